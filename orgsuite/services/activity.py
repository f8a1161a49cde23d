"""
Activity log writer.

Entries are added to the caller's session and committed together with the
change they describe.
"""

import logging
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from orgsuite.models import ActivityLog, User

logger = logging.getLogger(__name__)

ACTIONS = ("CREATE", "UPDATE", "DELETE", "LOGIN", "APPROVE")

_VERBS = {
    "CREATE": "created",
    "UPDATE": "updated",
    "DELETE": "deleted",
    "LOGIN": "logged in to",
    "APPROVE": "approved",
}

_ENTITY_PHRASES = {
    "students": "a student",
    "subjects": "a subject",
    "grades": "a grade",
    "invoices": "an invoice",
    "employees": "an employee",
    "payrolls": "a payroll",
    "users": "a user",
    "organizations": "an organization",
    "patients": "a patient",
    "products": "a product",
    "sales": "a sale",
    "customers": "a customer",
    "campaigns": "a campaign",
    "sessions": "the system",
}


def build_message(user_name: str, action: str, resource: str) -> str:
    """Default human-readable message, e.g. "Ana created a student."."""
    verb = _VERBS.get(action, "performed an action on")
    entity = _ENTITY_PHRASES.get(resource, f"a record in {resource}")
    return f"{user_name} {verb} {entity}."


def log_activity(
    db: AsyncSession,
    user: User,
    action: str,
    resource: str,
    resource_id: Optional[Any] = None,
    changes: Optional[dict] = None,
    message: Optional[str] = None,
    organization_id: Optional[Any] = None,
) -> ActivityLog:
    """
    Record one user action.

    Args:
        db: Session the entry is added to (not committed here)
        user: Acting user
        action: One of CREATE, UPDATE, DELETE, LOGIN, APPROVE
        resource: Table/collection name of the affected record
        resource_id: Id of the affected record
        changes: Changed fields or extra context
        message: Custom message replacing the generated one
        organization_id: Tenant of the record, defaults to the user's

    Raises:
        ValueError: If action is unknown
    """
    if action not in ACTIONS:
        raise ValueError(f"Unknown activity action: {action}")

    entry = ActivityLog(
        organization_id=organization_id or user.organization_id,
        user_id=user.id,
        user_name=user.name,
        action=action,
        resource=resource,
        resource_id=str(resource_id) if resource_id is not None else None,
        message=message or build_message(user.name, action, resource),
        changes=changes,
    )
    db.add(entry)
    logger.debug("Activity %s on %s/%s by %s", action, resource, resource_id, user.email)
    return entry
