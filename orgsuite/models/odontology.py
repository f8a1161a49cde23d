"""
Odontology patient record.

The odontogram is kept as a JSON mapping of FDI tooth number to
{"status": ..., "conditions": [...]} and returned exactly as stored.
"""

from typing import Optional

from sqlalchemy import JSON, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from orgsuite.models.base import Base, TenantMixin


class Patient(TenantMixin, Base):
    __tablename__ = "patients"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    identification_number: Mapped[str] = mapped_column(String(50), nullable=False)
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    gender: Mapped[str] = mapped_column(String(10), nullable=False)  # male, female, other

    # Contact
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    department: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    municipality: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Medical history
    allergies: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    current_medications: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    chronic_diseases: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    surgeries: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    habits: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Odontology
    odontogram_state: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    general_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    follow_ups: Mapped[list] = mapped_column(JSON, default=list, nullable=False)  # [{id, date, notes}]

    __table_args__ = (
        UniqueConstraint("organization_id", "identification_number", name="uq_org_patient_identification"),
    )
