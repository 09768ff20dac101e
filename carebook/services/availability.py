"""Slot availability for a doctor on a given day.

A doctor's weekly schedule is a list of entries (day of week, working hours,
slot length). The slots of a day are the union of the grids of every entry
matching that weekday, minus the times held by non-cancelled appointments.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional
import logging

from ..core.errors import NotFoundError
from ..models import Doctor, ScheduleEntry
from ..schemas.appointment import AvailabilityResponse, DoctorScheduleSummary, TimeSlot

logger = logging.getLogger(__name__)

TIME_FORMAT = "%H:%M"


def day_of_week(day: date) -> int:
    """Weekday index counting from 0 = Sunday, as schedules store it."""
    return day.isoweekday() % 7


def entries_for_day(schedule: Iterable[ScheduleEntry], day: date) -> List[ScheduleEntry]:
    weekday = day_of_week(day)
    return sorted(
        (entry for entry in schedule if entry.day_of_week == weekday),
        key=lambda entry: entry.start_time,
    )


def slot_grid(entries: Iterable[ScheduleEntry]) -> List[str]:
    """
    Divide each entry's [start, end) into slot_duration increments.

    A trailing slot that would run past the end time is dropped.

    Example:
        09:00-10:00 every 30 minutes -> ["09:00", "09:30"]
    """
    times = set()
    for entry in entries:
        current = datetime.strptime(entry.start_time, TIME_FORMAT)
        end = datetime.strptime(entry.end_time, TIME_FORMAT)
        step = timedelta(minutes=entry.slot_duration)
        while current + step <= end:
            times.add(current.strftime(TIME_FORMAT))
            current += step
    return sorted(times)


@dataclass
class Slot:
    time: str
    available: bool = True


@dataclass
class DayAvailability:
    doctor_id: str
    date: date
    slots: List[Slot] = field(default_factory=list)
    booked: List[str] = field(default_factory=list)
    schedule: List[ScheduleEntry] = field(default_factory=list)

    @property
    def grid(self) -> List[str]:
        return slot_grid(self.schedule)

    @property
    def works_that_day(self) -> bool:
        return bool(self.schedule)


class AvailabilityService:
    def __init__(self, store):
        self.store = store

    def get_doctor(self, doctor_id: str) -> Doctor:
        doctor = self.store.get_doctor(doctor_id)
        if not doctor:
            raise NotFoundError(f"Doctor with ID {doctor_id} does not exist.")
        return doctor

    def get_availability(
        self,
        doctor_id: str,
        day: date,
        ignore_appointment_id: Optional[str] = None
    ) -> DayAvailability:
        """Free slots for a doctor on a day, ascending by time."""
        doctor = self.get_doctor(doctor_id)
        entries = entries_for_day(doctor.schedule, day)

        booked = sorted({
            appointment.appointment_time
            for appointment in self.store.appointments_for_doctor_on(doctor_id, day)
            if appointment.is_active and appointment.id != ignore_appointment_id
        })

        slots = [Slot(time=t) for t in slot_grid(entries) if t not in booked]

        logger.info(
            f"Availability for doctor {doctor_id} on {day.isoformat()}: "
            f"{len(slots)} free, {len(booked)} booked"
        )
        return DayAvailability(
            doctor_id=doctor_id,
            date=day,
            slots=slots,
            booked=booked,
            schedule=entries,
        )

    def describe(self, availability: DayAvailability) -> AvailabilityResponse:
        summary = None
        message = None
        if availability.works_that_day:
            entries = availability.schedule
            summary = DoctorScheduleSummary(
                start_time=min(e.start_time for e in entries),
                end_time=max(e.end_time for e in entries),
                slot_duration=entries[0].slot_duration,
            )
        else:
            message = "Doctor is not available on this day"

        return AvailabilityResponse(
            date=availability.date,
            doctor_id=availability.doctor_id,
            available_slots=[TimeSlot(time=s.time, available=s.available) for s in availability.slots],
            booked_slots=availability.booked,
            doctor_schedule=summary,
            message=message,
        )
