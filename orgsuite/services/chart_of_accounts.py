"""
General chart of accounts (Colombian PUC, classes 1 to 6).

Each class becomes a parent account; each group becomes a postable child
account whose code is the two-digit group number.
"""

PUC_GENERAL = [
    {
        "code": "1",
        "name": "Assets",
        "type": "asset",
        "groups": [
            ("11", "Cash and cash equivalents", "Cash, banks, savings accounts."),
            ("12", "Investments", "Fixed income securities, shares."),
            ("13", "Receivables", "Customers, amounts due from partners and workers."),
            ("14", "Inventories", "Merchandise, finished goods, raw materials."),
            ("15", "Property, plant and equipment", "Land, buildings, machinery, vehicles."),
            ("16", "Intangibles", "Patents, trademarks, copyrights."),
            ("17", "Deferred charges", "Prepaid expenses."),
            ("18", "Other assets", "Claims, art and cultural goods."),
            ("19", "Revaluations", "Adjustments to the value of investments or property."),
        ],
    },
    {
        "code": "2",
        "name": "Liabilities",
        "type": "liability",
        "groups": [
            ("21", "Financial obligations", "Short and long term bank loans."),
            ("22", "Suppliers", "Payables for goods and services."),
            ("23", "Accounts payable", "To creditors, workers and social security entities."),
            ("24", "Taxes, levies and fees", "Income tax, VAT payable, withholding tax."),
            ("25", "Labor obligations", "Salaries, severance, vacations."),
            ("26", "Estimated liabilities and provisions", "Litigation, warranties."),
            ("27", "Deferred credits", "Income received in advance."),
            ("28", "Other liabilities", "Advances received."),
        ],
    },
    {
        "code": "3",
        "name": "Equity",
        "type": "equity",
        "groups": [
            ("31", "Share capital", "Contributions of partners or shareholders."),
            ("32", "Capital surplus", "Share premium."),
            ("33", "Reserves", "Legal, statutory and occasional reserves."),
            ("34", "Equity revaluation", "Adjustment of the value of equity."),
            ("36", "Profit or loss for the year", "Result of the period."),
            ("37", "Retained earnings", "Accumulated profits or losses."),
        ],
    },
    {
        "code": "4",
        "name": "Income",
        "type": "income",
        "groups": [
            ("41", "Operating income", "Income from the main activities."),
            ("42", "Non-operating income", "Financial returns, rental income."),
        ],
    },
    {
        "code": "5",
        "name": "Expenses",
        "type": "expense",
        "groups": [
            ("51", "Administrative operating expenses", "Personnel, fees, utilities."),
            ("52", "Selling operating expenses", "Advertising, freight."),
            ("53", "Non-operating expenses", "Financial expenses, losses on asset sales."),
        ],
    },
    {
        "code": "6",
        "name": "Cost of sales",
        "type": "expense",
        "groups": [
            ("61", "Cost of goods sold", "Cost of the merchandise sold."),
        ],
    },
]


def iter_accounts():
    """Yield account attribute dicts, each class followed by its groups."""
    for account_class in PUC_GENERAL:
        yield {
            "code": account_class["code"],
            "name": account_class["name"],
            "type": account_class["type"],
            "is_parent": True,
            "parent_code": None,
        }
        for code, name, description in account_class["groups"]:
            yield {
                "code": code,
                "name": name,
                "type": account_class["type"],
                "description": description,
                "is_parent": False,
                "parent_code": account_class["code"],
            }
