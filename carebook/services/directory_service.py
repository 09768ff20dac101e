from collections import Counter
from typing import List, Optional, Tuple
import logging
import math

from ..core.errors import AuthorizationError, NotFoundError
from ..core.security import UserRole
from ..models import Doctor, ScheduleEntry, User
from ..schemas.doctor import (
    DoctorDetail, Pagination, ScheduleEntrySchema, ScheduleUpdate, SpecializationCount
)

logger = logging.getLogger(__name__)

class DirectoryService:
    def __init__(self, store):
        self.store = store

    def list_doctors(
        self,
        specialization: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[Doctor], Pagination]:
        """Doctors filtered by case-insensitive substrings, in registration order."""
        doctors = self.store.list_doctors()

        if specialization:
            needle = specialization.lower()
            doctors = [d for d in doctors if needle in d.specialization.lower()]

        if search:
            needle = search.lower()
            doctors = [
                d for d in doctors
                if needle in d.name.lower() or needle in d.specialization.lower()
            ]

        total = len(doctors)
        pagination = Pagination(
            limit=limit,
            offset=offset,
            total=total,
            pages=math.ceil(total / limit) if limit else 0,
        )
        return doctors[offset:offset + limit], pagination

    def specializations(self) -> List[SpecializationCount]:
        counts = Counter(d.specialization for d in self.store.list_doctors())
        return [
            SpecializationCount(name=name, doctor_count=count)
            for name, count in counts.items()
        ]

    def get_doctor(self, doctor_id: str) -> Doctor:
        doctor = self.store.get_doctor(doctor_id)
        if not doctor:
            raise NotFoundError("Doctor not found")
        return doctor

    def describe(self, doctor: Doctor) -> DoctorDetail:
        schedule = [
            ScheduleEntrySchema(
                day_of_week=entry.day_of_week,
                day_name=entry.day_name,
                start_time=entry.start_time,
                end_time=entry.end_time,
                slot_duration=entry.slot_duration,
            )
            for entry in sorted(doctor.schedule, key=lambda e: (e.day_of_week, e.start_time))
        ]
        return DoctorDetail.model_validate(doctor).model_copy(update={"schedule": schedule})

    def update_schedule(self, user: User, doctor_id: str, update: ScheduleUpdate) -> Doctor:
        """Replace a doctor's weekly schedule; only the doctor may do this."""
        doctor = self.get_doctor(doctor_id)
        if user.role != UserRole.DOCTOR or user.id != doctor.id:
            raise AuthorizationError("Doctors can only update their own schedule")

        entries = [
            ScheduleEntry(
                day_of_week=item.day_of_week,
                start_time=item.start_time,
                end_time=item.end_time,
                slot_duration=item.slot_duration,
            )
            for item in update.schedule
        ]
        self.store.set_doctor_schedule(doctor, entries)
        if update.is_available is not None:
            doctor.is_available = update.is_available

        logger.info(f"Schedule updated for {doctor.name}: {len(entries)} entries")
        return doctor
