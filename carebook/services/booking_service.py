from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple
import logging

from ..core.config import settings
from ..core.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..core.security import UserRole
from ..models import Appointment, AppointmentStatus, Doctor, User
from ..models.appointment import FINAL_STATUSES
from ..schemas.appointment import AppointmentCreate, AppointmentResponse, AppointmentUpdate
from ..schemas.doctor import AgendaItem
from .availability import AvailabilityService, entries_for_day

logger = logging.getLogger(__name__)

class BookingService:
    def __init__(self, store, today: Optional[date] = None, window_days: Optional[int] = None):
        self.store = store
        self.today = today or date.today()
        self.window_days = settings.BOOKING_WINDOW_DAYS if window_days is None else window_days
        self.availability = AvailabilityService(store)

    def book(self, patient: User, booking: AppointmentCreate) -> Appointment:
        """Book a slot for a patient; the first writer on a slot wins."""
        doctor = self.availability.get_doctor(booking.doctor_id)
        if not doctor.is_available:
            raise ValidationError("Doctor is currently not accepting appointments")

        self._validate_date(booking.appointment_date)

        key = (doctor.id, booking.appointment_date, booking.appointment_time)
        with self.store.slot_lock(key):
            self._check_slot(doctor, booking.appointment_date, booking.appointment_time)

            appointment = Appointment(
                id=self.store.next_id(),
                doctor_id=doctor.id,
                patient_id=patient.id,
                appointment_date=booking.appointment_date,
                appointment_time=booking.appointment_time,
                reason_for_visit=booking.reason_for_visit or "",
                status=AppointmentStatus.SCHEDULED,
            )
            self.store.add_appointment(appointment)

        logger.info(
            f"Appointment booked: {patient.full_name} with {doctor.name} "
            f"on {booking.appointment_date.isoformat()} at {booking.appointment_time}"
        )
        return appointment

    def list_for_user(
        self,
        user: User,
        status: Optional[AppointmentStatus] = None,
        day: Optional[date] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[Appointment], int]:
        """Appointments visible to a user, oldest first."""
        if user.role == UserRole.DOCTOR:
            appointments = self.store.appointments_for_doctor(user.id)
        else:
            appointments = self.store.appointments_for_patient(user.id)

        if status:
            appointments = [a for a in appointments if a.status == status]
        if day:
            appointments = [a for a in appointments if a.appointment_date == day]

        appointments.sort(key=lambda a: (a.appointment_date, a.appointment_time))
        return appointments[offset:offset + limit], len(appointments)

    def get_for_user(self, user: User, appointment_id: str, action: str = "view") -> Appointment:
        appointment = self.store.get_appointment(appointment_id)
        if not appointment:
            raise NotFoundError("The requested appointment does not exist")

        if user.id not in (appointment.patient_id, appointment.doctor_id):
            raise AuthorizationError(f"You do not have permission to {action} this appointment")

        return appointment

    def update(self, user: User, appointment_id: str, update: AppointmentUpdate) -> Appointment:
        """Reschedule, change status or edit the reason of an appointment."""
        appointment = self.get_for_user(user, appointment_id, action="modify")

        if appointment.status in FINAL_STATUSES:
            raise ValidationError("Cannot modify cancelled or completed appointments")

        changes = update.model_dump(exclude_unset=True, exclude_none=True)
        new_status = changes.get("status")
        if (
            user.role == UserRole.PATIENT
            and new_status is not None
            and new_status != AppointmentStatus.CANCELLED
        ):
            raise AuthorizationError("Patients can only cancel their appointments")

        if new_status == AppointmentStatus.CANCELLED:
            # A cancelled appointment keeps the slot it was booked for
            changes.pop("appointment_date", None)
            changes.pop("appointment_time", None)

        reschedule = "appointment_date" in changes or "appointment_time" in changes
        if reschedule:
            new_date = changes.get("appointment_date", appointment.appointment_date)
            new_time = changes.get("appointment_time", appointment.appointment_time)
            self._validate_date(new_date)

            doctor = self.availability.get_doctor(appointment.doctor_id)
            with self.store.slot_lock((doctor.id, new_date, new_time)):
                self._check_slot(doctor, new_date, new_time, ignore_appointment_id=appointment.id)
                self.store.update_appointment(appointment, **changes)
            logger.info(f"Appointment {appointment.id} rescheduled to {new_date.isoformat()} at {new_time}")
        else:
            self.store.update_appointment(appointment, **changes)
            logger.info(f"Appointment {appointment.id} updated: status={appointment.status.value}")

        return appointment

    def cancel(self, user: User, appointment_id: str, reason: Optional[str] = None) -> Appointment:
        appointment = self.get_for_user(user, appointment_id, action="cancel")

        if appointment.status in FINAL_STATUSES:
            raise ValidationError("Cannot modify cancelled or completed appointments")

        changes = {"status": AppointmentStatus.CANCELLED}
        if reason:
            changes["cancellation_reason"] = reason
        self.store.update_appointment(appointment, **changes)

        logger.info(f"Appointment {appointment.id} cancelled by {user.role.value}")
        return appointment

    def describe(self, appointment: Appointment, detailed: bool = False) -> AppointmentResponse:
        """Appointment enriched with doctor and patient details."""
        doctor = self.store.get_doctor(appointment.doctor_id)
        patient = self.store.get_user(appointment.patient_id)

        extra = {
            "doctor_name": doctor.name if doctor else "Unknown Doctor",
            "doctor_specialization": doctor.specialization if doctor else None,
            "patient_name": patient.full_name if patient else "Unknown Patient",
        }
        if detailed:
            extra["doctor_fee"] = doctor.consultation_fee if doctor else None
            extra["patient_email"] = patient.email if patient else None

        return AppointmentResponse.model_validate(appointment).model_copy(update=extra)

    def doctor_agenda(
        self,
        user: User,
        doctor_id: str,
        start_date: date,
        end_date: date
    ) -> Tuple[Dict[str, List[AgendaItem]], int]:
        """A doctor's own appointments between two dates, grouped by day."""
        if user.role != UserRole.DOCTOR or user.id != doctor_id:
            raise AuthorizationError("Doctors can only view their own schedule")
        if start_date > end_date:
            raise ValidationError("startDate must not be after endDate")

        doctor = self.availability.get_doctor(doctor_id)
        appointments = [
            a for a in self.store.appointments_for_doctor(doctor_id)
            if start_date <= a.appointment_date <= end_date
        ]
        appointments.sort(key=lambda a: (a.appointment_date, a.appointment_time))

        agenda: Dict[str, List[AgendaItem]] = defaultdict(list)
        for appointment in appointments:
            patient = self.store.get_user(appointment.patient_id)
            entries = entries_for_day(doctor.schedule, appointment.appointment_date)
            agenda[appointment.appointment_date.isoformat()].append(AgendaItem(
                id=appointment.id,
                time=appointment.appointment_time,
                duration=entries[0].slot_duration if entries else 30,
                patient_name=patient.full_name if patient else "Unknown Patient",
                patient_email=patient.email if patient else None,
                reason=appointment.reason_for_visit,
                status=appointment.status.value,
            ))

        return dict(agenda), len(appointments)

    def _validate_date(self, day: date) -> None:
        if day < self.today:
            raise ValidationError("Cannot book appointments in the past. Please select a future date.")
        if day > self.today + timedelta(days=self.window_days):
            raise ValidationError(
                f"Cannot book appointments more than {self.window_days} days in advance."
            )

    def _check_slot(
        self,
        doctor: Doctor,
        day: date,
        time: str,
        ignore_appointment_id: Optional[str] = None
    ) -> None:
        availability = self.availability.get_availability(
            doctor.id, day, ignore_appointment_id=ignore_appointment_id
        )
        if not availability.works_that_day:
            raise ValidationError("Doctor is not available on this day")
        if time not in availability.grid:
            raise ValidationError(
                f'Invalid time slot "{time}". Please select one of the doctor\'s slots.',
                details={"validTimeSlots": availability.grid},
            )
        if time in availability.booked:
            raise ConflictError("This time slot is no longer available. Please choose another time.")
