"""
Domain exceptions.

Services raise these; the application maps them to HTTP responses
in ``orgsuite.main``.
"""


class OrgSuiteError(Exception):
    """Base class for domain errors."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(OrgSuiteError):
    """A referenced record does not exist in the caller's organization."""

    status_code = 404


class ConflictError(OrgSuiteError):
    """The operation clashes with the current state of a record."""

    status_code = 409


class BusinessRuleError(OrgSuiteError):
    """The input is well-formed but breaks a business rule."""

    status_code = 422
