from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...api.deps import get_doctor_user, get_today
from ...core.config import settings
from ...core.errors import ValidationError
from ...core.store import Repository, get_store
from ...models import User
from ...schemas.appointment import AvailabilityResponse
from ...schemas.doctor import (
    AgendaResponse, DoctorEnvelope, DoctorListResponse, DoctorResponse,
    ScheduleUpdate, SpecializationsResponse
)
from ...services.availability import AvailabilityService
from ...services.booking_service import BookingService
from ...services.directory_service import DirectoryService

router = APIRouter(prefix="/doctors", tags=["Doctors"])

@router.get("", response_model=DoctorListResponse)
async def list_doctors(
    specialization: Optional[str] = Query(None, description="Case-insensitive substring"),
    search: Optional[str] = Query(None, description="Matches name or specialization"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    store: Repository = Depends(get_store)
):
    """List doctors, optionally filtered."""
    doctors, pagination = DirectoryService(store).list_doctors(
        specialization=specialization, search=search, limit=limit, offset=offset
    )
    return DoctorListResponse(
        doctors=[DoctorResponse.model_validate(d) for d in doctors],
        pagination=pagination
    )

@router.get("/specializations", response_model=SpecializationsResponse)
async def list_specializations(store: Repository = Depends(get_store)):
    """Specializations with their number of doctors."""
    return SpecializationsResponse(specializations=DirectoryService(store).specializations())

@router.get("/{doctor_id}", response_model=DoctorEnvelope)
async def get_doctor(doctor_id: str, store: Repository = Depends(get_store)):
    """Get a doctor including the weekly schedule."""
    directory = DirectoryService(store)
    return DoctorEnvelope(doctor=directory.describe(directory.get_doctor(doctor_id)))

@router.get("/{doctor_id}/availability", response_model=AvailabilityResponse)
async def get_doctor_availability(
    doctor_id: str,
    day: date = Query(..., alias="date", description="YYYY-MM-DD"),
    today: date = Depends(get_today),
    store: Repository = Depends(get_store)
):
    """Free slots of a doctor on a date."""
    return availability_for(store, doctor_id, day, today)

@router.put("/{doctor_id}/schedule", response_model=DoctorEnvelope)
async def update_schedule(
    doctor_id: str,
    update: ScheduleUpdate,
    current_user: User = Depends(get_doctor_user),
    store: Repository = Depends(get_store)
):
    """Replace the weekly schedule of the calling doctor."""
    directory = DirectoryService(store)
    doctor = directory.update_schedule(current_user, doctor_id, update)
    return DoctorEnvelope(doctor=directory.describe(doctor))

@router.get("/{doctor_id}/schedule", response_model=AgendaResponse)
async def get_agenda(
    doctor_id: str,
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    current_user: User = Depends(get_doctor_user),
    store: Repository = Depends(get_store)
):
    """Appointments of the calling doctor between two dates, grouped by day."""
    agenda, total = BookingService(store).doctor_agenda(current_user, doctor_id, start_date, end_date)
    return AgendaResponse(
        start_date=start_date,
        end_date=end_date,
        schedule=agenda,
        total_appointments=total
    )

def availability_for(store: Repository, doctor_id: str, day: date, today: date) -> AvailabilityResponse:
    service = AvailabilityService(store)
    # Same order of checks as booking
    doctor = service.get_doctor(doctor_id)
    if not doctor.is_available:
        raise ValidationError("Doctor is currently not accepting appointments")
    if day < today:
        raise ValidationError("Cannot check availability for past dates.")
    if day > today + timedelta(days=settings.BOOKING_WINDOW_DAYS):
        raise ValidationError(
            f"Cannot check availability more than {settings.BOOKING_WINDOW_DAYS} days in advance."
        )
    return service.describe(service.get_availability(doctor_id, day))
