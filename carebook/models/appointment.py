from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional
import enum

class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"

# Statuses that hold a slot
ACTIVE_STATUSES = frozenset(s for s in AppointmentStatus if s != AppointmentStatus.CANCELLED)

# Statuses that can no longer be modified
FINAL_STATUSES = frozenset([AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED])

@dataclass
class Appointment:
    id: str
    doctor_id: str
    patient_id: str
    appointment_date: date
    appointment_time: str
    reason_for_visit: str = ""
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    cancellation_reason: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @property
    def slot_key(self):
        return (self.doctor_id, self.appointment_date, self.appointment_time)

    def __repr__(self):
        return (
            f"<Appointment(id={self.id}, patient_id={self.patient_id}, doctor_id={self.doctor_id}, "
            f"date='{self.appointment_date}', time='{self.appointment_time}')>"
        )
