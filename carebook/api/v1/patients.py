from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...api.deps import get_patient_user, get_today
from ...core.store import Repository, get_store
from ...models import AppointmentStatus, User
from ...schemas.doctor import Pagination
from ...schemas.patient import (
    MedicalHistoryEnvelope, PatientAppointmentList, PatientEnvelope,
    PatientProfileUpdate, PatientStatsEnvelope
)
from ...services.patient_service import PatientService

router = APIRouter(prefix="/patients", tags=["Patients"])

def get_patient_service(
    store: Repository = Depends(get_store),
    today: date = Depends(get_today)
) -> PatientService:
    return PatientService(store, today=today)

@router.get("/me", response_model=PatientEnvelope)
async def get_my_profile(
    current_user: User = Depends(get_patient_user),
    patient_service: PatientService = Depends(get_patient_service)
):
    profile = patient_service.get_profile(current_user)
    return PatientEnvelope(patient=patient_service.describe(current_user, profile))

@router.put("/me", response_model=PatientEnvelope)
async def update_my_profile(
    update: PatientProfileUpdate,
    current_user: User = Depends(get_patient_user),
    patient_service: PatientService = Depends(get_patient_service)
):
    """Partial update of the calling patient's profile."""
    profile = patient_service.update_profile(current_user, update)
    return PatientEnvelope(
        message="Profile updated successfully",
        patient=patient_service.describe(current_user, profile)
    )

@router.get("/me/stats", response_model=PatientStatsEnvelope)
async def get_my_stats(
    current_user: User = Depends(get_patient_user),
    patient_service: PatientService = Depends(get_patient_service)
):
    """Appointment and message counters for the dashboard."""
    return PatientStatsEnvelope(stats=patient_service.stats(current_user))

@router.get("/me/appointments", response_model=PatientAppointmentList)
async def get_my_appointments(
    status_filter: Optional[AppointmentStatus] = Query(None, alias="status"),
    upcoming: bool = Query(False, description="Only future, still open appointments"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_patient_user),
    patient_service: PatientService = Depends(get_patient_service)
):
    """The calling patient's appointments, newest first, with doctor details."""
    appointments, total = patient_service.appointments(
        current_user, status=status_filter, upcoming=upcoming, limit=limit, offset=offset
    )
    return PatientAppointmentList(
        appointments=appointments,
        pagination=Pagination(limit=limit, offset=offset, total=total)
    )

@router.get("/me/medical-history", response_model=MedicalHistoryEnvelope)
async def get_my_medical_history(
    current_user: User = Depends(get_patient_user),
    patient_service: PatientService = Depends(get_patient_service)
):
    return MedicalHistoryEnvelope(medical_history=patient_service.medical_history(current_user))
