from datetime import date
from typing import Dict, List, Optional
from pydantic import Field, model_validator

from .base import CamelModel, TIME_PATTERN

class ScheduleEntrySchema(CamelModel):
    day_of_week: int = Field(..., ge=0, le=6)
    day_name: Optional[str] = None
    start_time: str = Field(..., pattern=TIME_PATTERN)
    end_time: str = Field(..., pattern=TIME_PATTERN)
    slot_duration: int = Field(30, ge=5, le=240)

    @model_validator(mode="after")
    def check_hours(self):
        if self.start_time >= self.end_time:
            raise ValueError("startTime must be earlier than endTime")
        return self

class DoctorResponse(CamelModel):
    id: str
    name: str
    first_name: str
    last_name: str
    specialization: str
    years_of_experience: int
    consultation_fee: float
    bio: Optional[str] = None
    is_available: bool

class DoctorDetail(DoctorResponse):
    schedule: List[ScheduleEntrySchema] = []

class DoctorEnvelope(CamelModel):
    doctor: DoctorDetail

class Pagination(CamelModel):
    limit: int
    offset: int
    total: int
    pages: Optional[int] = None

class DoctorListResponse(CamelModel):
    doctors: List[DoctorResponse]
    pagination: Pagination

class SpecializationCount(CamelModel):
    name: str
    doctor_count: int

class SpecializationsResponse(CamelModel):
    specializations: List[SpecializationCount]

class ScheduleUpdate(CamelModel):
    schedule: List[ScheduleEntrySchema]
    is_available: Optional[bool] = None

class AgendaItem(CamelModel):
    id: str
    time: str
    duration: int
    patient_name: str
    patient_email: Optional[str] = None
    reason: str
    status: str

class AgendaResponse(CamelModel):
    start_date: date
    end_date: date
    schedule: Dict[str, List[AgendaItem]]
    total_appointments: int
