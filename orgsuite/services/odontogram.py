"""
Odontogram validation and findings summary.

Teeth are identified by their FDI number: the first digit is the quadrant
(1-4 permanent, 5-8 deciduous), the second the position in the quadrant
(1-8 for permanent teeth, 1-5 for deciduous ones).
"""

import uuid
from datetime import date

from orgsuite.exceptions import BusinessRuleError
from orgsuite.models import Patient

TOOTH_STATUSES = (
    "present",
    "absent",
    "caries",
    "restoration",
    "endodontics",
    "extraction",
    "crown",
    "implant",
    "sealant",
    "bridge",
)

DISPLAY_NAMES = {
    "present": "Present",
    "absent": "Absent",
    "caries": "Caries",
    "restoration": "Restoration",
    "endodontics": "Endodontics",
    "extraction": "For extraction",
    "crown": "Crown",
    "implant": "Implant",
    "sealant": "Sealant",
    "bridge": "Bridge",
}

PERMANENT_QUADRANTS = (1, 2, 3, 4)
DECIDUOUS_QUADRANTS = (5, 6, 7, 8)


def all_teeth(deciduous: bool = False) -> list[str]:
    """Every tooth of the permanent (32) or deciduous (20) dentition."""
    if deciduous:
        return [f"{q}{p}" for q in DECIDUOUS_QUADRANTS for p in range(1, 6)]
    return [f"{q}{p}" for q in PERMANENT_QUADRANTS for p in range(1, 9)]


VALID_TEETH = frozenset(all_teeth() + all_teeth(deciduous=True))


def is_valid_tooth(tooth_id: str) -> bool:
    """Check an FDI tooth number such as "11", "48" or "55"."""
    return tooth_id in VALID_TEETH


def display_name(key: str) -> str:
    """Readable name of a status or condition; unknown keys are returned as is."""
    return DISPLAY_NAMES.get(key, key)


def validate_odontogram(state: dict) -> dict:
    """
    Check every entry of an odontogram state.

    Returns the state unchanged so it round-trips exactly.

    Raises:
        BusinessRuleError: On an invalid tooth number, status or conditions list
    """
    for tooth_id, tooth in state.items():
        if not is_valid_tooth(str(tooth_id)):
            raise BusinessRuleError(f"Invalid FDI tooth number: {tooth_id}")
        if not isinstance(tooth, dict):
            raise BusinessRuleError(f"Tooth {tooth_id}: state must be an object")
        if tooth.get("status") not in TOOTH_STATUSES:
            raise BusinessRuleError(f"Tooth {tooth_id}: invalid status {tooth.get('status')!r}")
        conditions = tooth.get("conditions", [])
        if not isinstance(conditions, list) or not all(isinstance(c, str) for c in conditions):
            raise BusinessRuleError(f"Tooth {tooth_id}: conditions must be a list of strings")
    return state


def summarize(state: dict) -> list[dict]:
    """
    Findings of an odontogram, ordered by tooth number.

    A tooth is a finding when its status is not "present" or it carries at
    least one condition.
    """
    findings = []
    for tooth_id in sorted(state, key=int):
        tooth = state[tooth_id]
        status = tooth.get("status", "present")
        conditions = tooth.get("conditions") or []
        if status == "present" and not conditions:
            continue
        findings.append(
            {
                "tooth": tooth_id,
                "status": status,
                "status_name": display_name(status),
                "conditions": list(conditions),
                "condition_names": [display_name(c) for c in conditions],
            }
        )
    return findings


def add_follow_up(patient: Patient, follow_up_date: date, notes: str) -> dict:
    """Append a follow-up note to the patient's clinical history."""
    if len(notes.strip()) < 10:
        raise BusinessRuleError("Follow-up notes must be at least 10 characters")
    follow_up = {"id": str(uuid.uuid4()), "date": follow_up_date.isoformat(), "notes": notes}
    patient.follow_ups = [*(patient.follow_ups or []), follow_up]
    return follow_up
