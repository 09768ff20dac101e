from datetime import date
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, status

from ...api.deps import get_current_user, get_patient_user, get_today
from ...core.store import Repository, get_store
from ...models import AppointmentStatus, User
from ...schemas.appointment import (
    AppointmentCancel, AppointmentCreate, AppointmentEnvelope, AppointmentListResponse,
    AppointmentUpdate, AvailabilityResponse
)
from ...schemas.doctor import Pagination
from ...services.booking_service import BookingService
from .doctors import availability_for

router = APIRouter(prefix="/appointments", tags=["Appointments"])

def get_booking_service(
    store: Repository = Depends(get_store),
    today: date = Depends(get_today)
) -> BookingService:
    return BookingService(store, today=today)

@router.post("", response_model=AppointmentEnvelope, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    booking: AppointmentCreate,
    current_user: User = Depends(get_patient_user),
    booking_service: BookingService = Depends(get_booking_service)
):
    """Book an appointment for the calling patient."""
    appointment = booking_service.book(current_user, booking)
    return AppointmentEnvelope(
        message="Appointment booked successfully",
        appointment=booking_service.describe(appointment)
    )

@router.get("", response_model=AppointmentListResponse)
async def list_appointments(
    status_filter: Optional[AppointmentStatus] = Query(None, alias="status"),
    day: Optional[date] = Query(None, alias="date"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service)
):
    """Appointments of the caller, as patient or as doctor."""
    appointments, total = booking_service.list_for_user(
        current_user, status=status_filter, day=day, limit=limit, offset=offset
    )
    return AppointmentListResponse(
        appointments=[booking_service.describe(a) for a in appointments],
        pagination=Pagination(limit=limit, offset=offset, total=total)
    )

@router.get("/doctor/{doctor_id}/availability", response_model=AvailabilityResponse)
async def get_availability(
    doctor_id: str,
    day: date = Query(..., alias="date", description="YYYY-MM-DD"),
    today: date = Depends(get_today),
    store: Repository = Depends(get_store)
):
    """Free slots of a doctor on a date."""
    return availability_for(store, doctor_id, day, today)

@router.get("/{appointment_id}", response_model=AppointmentEnvelope)
async def get_appointment(
    appointment_id: str,
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service)
):
    appointment = booking_service.get_for_user(current_user, appointment_id)
    return AppointmentEnvelope(appointment=booking_service.describe(appointment, detailed=True))

@router.patch("/{appointment_id}", response_model=AppointmentEnvelope)
@router.put("/{appointment_id}", response_model=AppointmentEnvelope)
async def update_appointment(
    appointment_id: str,
    update: AppointmentUpdate,
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service)
):
    """Reschedule, change the status or edit the reason for visit."""
    appointment = booking_service.update(current_user, appointment_id, update)
    return AppointmentEnvelope(
        message="Appointment updated successfully",
        appointment=booking_service.describe(appointment)
    )

@router.delete("/{appointment_id}", response_model=AppointmentEnvelope)
async def cancel_appointment(
    appointment_id: str,
    cancel: Optional[AppointmentCancel] = Body(None),
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service)
):
    """Cancel an appointment; the slot becomes bookable again."""
    reason = cancel.cancellation_reason if cancel else None
    appointment = booking_service.cancel(current_user, appointment_id, reason)
    return AppointmentEnvelope(
        message="Appointment cancelled successfully",
        appointment=booking_service.describe(appointment)
    )
