from datetime import date, datetime
from typing import List, Optional
from pydantic import Field, field_validator

from .base import CamelModel, TIME_PATTERN
from .doctor import Pagination
from ..models.appointment import AppointmentStatus

class AppointmentCreate(CamelModel):
    doctor_id: str = Field(..., min_length=1)
    appointment_date: date
    appointment_time: str = Field(..., pattern=TIME_PATTERN)
    reason_for_visit: Optional[str] = Field(None, min_length=10, max_length=500)

    @field_validator("doctor_id", mode="before")
    @classmethod
    def coerce_doctor_id(cls, value):
        # Clients send numeric ids as well as strings
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

class AppointmentUpdate(CamelModel):
    status: Optional[AppointmentStatus] = None
    appointment_date: Optional[date] = None
    appointment_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    reason_for_visit: Optional[str] = Field(None, min_length=10, max_length=500)
    cancellation_reason: Optional[str] = Field(None, max_length=500)

class AppointmentCancel(CamelModel):
    cancellation_reason: Optional[str] = Field(None, max_length=500)

class AppointmentResponse(CamelModel):
    id: str
    doctor_id: str
    patient_id: str
    appointment_date: date
    appointment_time: str
    reason_for_visit: str
    status: AppointmentStatus
    cancellation_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    doctor_name: Optional[str] = None
    doctor_specialization: Optional[str] = None
    doctor_fee: Optional[float] = None
    patient_name: Optional[str] = None
    patient_email: Optional[str] = None

class AppointmentEnvelope(CamelModel):
    message: Optional[str] = None
    appointment: AppointmentResponse

class AppointmentListResponse(CamelModel):
    appointments: List[AppointmentResponse]
    pagination: Pagination

class TimeSlot(CamelModel):
    time: str
    available: bool = True

class DoctorScheduleSummary(CamelModel):
    start_time: str
    end_time: str
    slot_duration: int

class AvailabilityResponse(CamelModel):
    date: date
    doctor_id: str
    available_slots: List[TimeSlot]
    booked_slots: List[str]
    doctor_schedule: Optional[DoctorScheduleSummary] = None
    message: Optional[str] = None
