"""
Odontology API routes.

Provides endpoints for:
- Patient records (CRUD)
- Reading and replacing a patient's odontogram
- Odontogram findings summary
- Clinical follow-up notes
"""

import datetime as dt
from typing import Any, Dict, List, Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.ext.asyncio import AsyncSession

from orgsuite.api.crud import TenantRecordResponse, build_crud_router, get_tenant_record
from orgsuite.database import get_db
from orgsuite.middleware.auth import TenantContext, require_module
from orgsuite.models import Patient
from orgsuite.permissions import Module
from orgsuite.services import odontogram as odontogram_service
from orgsuite.services.activity import log_activity

Gender = Literal["male", "female", "other"]


class PatientCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    identification_number: str = Field(..., min_length=5, max_length=50)
    age: int = Field(..., ge=1, le=130)
    gender: Gender
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(None, max_length=255)
    department: Optional[str] = Field(None, max_length=100)
    municipality: Optional[str] = Field(None, max_length=100)
    allergies: Optional[str] = None
    current_medications: Optional[str] = None
    chronic_diseases: Optional[str] = None
    surgeries: Optional[str] = None
    habits: Optional[str] = None
    general_notes: Optional[str] = None


class PatientUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    identification_number: Optional[str] = Field(None, min_length=5, max_length=50)
    age: Optional[int] = Field(None, ge=1, le=130)
    gender: Optional[Gender] = None
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(None, max_length=255)
    department: Optional[str] = Field(None, max_length=100)
    municipality: Optional[str] = Field(None, max_length=100)
    allergies: Optional[str] = None
    current_medications: Optional[str] = None
    chronic_diseases: Optional[str] = None
    surgeries: Optional[str] = None
    habits: Optional[str] = None
    general_notes: Optional[str] = None


class FollowUp(BaseModel):
    id: str
    date: dt.date
    notes: str


class PatientResponse(TenantRecordResponse):
    name: str
    identification_number: str
    age: int
    gender: str
    phone: Optional[str]
    email: Optional[str]
    address: Optional[str]
    department: Optional[str]
    municipality: Optional[str]
    allergies: Optional[str]
    current_medications: Optional[str]
    chronic_diseases: Optional[str]
    surgeries: Optional[str]
    habits: Optional[str]
    general_notes: Optional[str]
    odontogram_state: Dict[str, dict]
    follow_ups: List[FollowUp]


class OdontogramPayload(BaseModel):
    """Whole odontogram: FDI tooth number -> state."""

    odontogram_state: Dict[str, Dict[str, Any]]


class OdontogramResponse(BaseModel):
    patient_id: UUID
    odontogram_state: Dict[str, dict]


class Finding(BaseModel):
    tooth: str
    status: str
    status_name: str
    conditions: List[str]
    condition_names: List[str]


class FollowUpCreate(BaseModel):
    date: dt.date
    notes: str = Field(..., min_length=10)


patients_router = build_crud_router(
    model=Patient,
    module=Module.ODONTOLOGY,
    resource="patients",
    label="Patient",
    prefix="/api/v1/odontology/patients",
    tags=["odontology"],
    create_schema=PatientCreate,
    update_schema=PatientUpdate,
    response_schema=PatientResponse,
    order_by=[Patient.name],
    unique_fields=("identification_number",),
    filter_fields=("identification_number", "gender"),
)

require_odontology = require_module(Module.ODONTOLOGY)


@patients_router.get("/{record_id}/odontogram", response_model=OdontogramResponse)
async def get_odontogram(
    record_id: UUID,
    db: AsyncSession = Depends(get_db),
    ctx: TenantContext = Depends(require_odontology),
):
    """Return the odontogram exactly as it was last saved."""
    patient = await get_tenant_record(db, ctx, Patient, record_id, "Patient")
    return OdontogramResponse(patient_id=patient.id, odontogram_state=patient.odontogram_state or {})


@patients_router.put("/{record_id}/odontogram", response_model=OdontogramResponse)
async def save_odontogram(
    record_id: UUID,
    payload: OdontogramPayload,
    db: AsyncSession = Depends(get_db),
    ctx: TenantContext = Depends(require_odontology),
):
    """
    Replace the whole odontogram of a patient.

    Tooth numbers must be valid FDI numbers and statuses known ones (422).
    """
    patient = await get_tenant_record(db, ctx, Patient, record_id, "Patient")
    state = odontogram_service.validate_odontogram(payload.odontogram_state)
    patient.odontogram_state = state
    log_activity(
        db, ctx.user, "UPDATE", "patients", patient.id,
        changes={"odontogram_teeth": len(state)},
        message=f"{ctx.user.name} updated the odontogram of {patient.name}.",
        organization_id=patient.organization_id,
    )
    await db.commit()
    await db.refresh(patient)
    return OdontogramResponse(patient_id=patient.id, odontogram_state=patient.odontogram_state)


@patients_router.get("/{record_id}/odontogram/summary", response_model=List[Finding])
async def odontogram_summary(
    record_id: UUID,
    db: AsyncSession = Depends(get_db),
    ctx: TenantContext = Depends(require_odontology),
):
    """Teeth with a status other than present or with conditions, by tooth number."""
    patient = await get_tenant_record(db, ctx, Patient, record_id, "Patient")
    return odontogram_service.summarize(patient.odontogram_state or {})


@patients_router.post(
    "/{record_id}/follow-ups", response_model=PatientResponse, status_code=status.HTTP_201_CREATED
)
async def add_follow_up(
    record_id: UUID,
    follow_up: FollowUpCreate,
    db: AsyncSession = Depends(get_db),
    ctx: TenantContext = Depends(require_odontology),
):
    """Append a dated follow-up note to the patient's history."""
    patient = await get_tenant_record(db, ctx, Patient, record_id, "Patient")
    added = odontogram_service.add_follow_up(patient, follow_up.date, follow_up.notes)
    log_activity(
        db, ctx.user, "UPDATE", "patients", patient.id,
        changes={"follow_up": added["id"]}, organization_id=patient.organization_id,
    )
    await db.commit()
    await db.refresh(patient)
    return patient


router = APIRouter()
router.include_router(patients_router)
