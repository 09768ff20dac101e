from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

@dataclass(frozen=True)
class ScheduleEntry:
    """Weekly working hours; day_of_week counts from 0 = Sunday."""
    day_of_week: int
    start_time: str
    end_time: str
    slot_duration: int = 30

    @property
    def day_name(self) -> str:
        return DAY_NAMES[self.day_of_week]

def default_weekly_schedule() -> List[ScheduleEntry]:
    """Monday to Friday, 09:00-17:00 in 30 minute slots."""
    return [ScheduleEntry(day, "09:00", "17:00", 30) for day in range(1, 6)]

@dataclass
class Doctor:
    id: str
    first_name: str
    last_name: str
    specialization: str = "General Practice"
    years_of_experience: int = 0
    consultation_fee: float = 100.0
    bio: Optional[str] = None
    license_number: Optional[str] = None
    is_available: bool = True
    schedule: List[ScheduleEntry] = field(default_factory=default_weekly_schedule)
    created_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def name(self) -> str:
        return f"Dr. {self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<Doctor(id={self.id}, name='{self.name}', specialization='{self.specialization}')>"
