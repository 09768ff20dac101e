from dataclasses import asdict
from datetime import date, datetime
from typing import List, Optional, Tuple
import logging

from ..core.errors import NotFoundError
from ..models import (
    Address, Appointment, AppointmentStatus, EmergencyContact, PatientProfile, User
)
from ..models.appointment import FINAL_STATUSES
from ..schemas.patient import (
    AppointmentDoctor, MedicalHistory, PatientAppointment, PatientInfo,
    PatientProfileResponse, PatientProfileUpdate, PatientStats
)

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 50

class PatientService:
    def __init__(self, store, today: Optional[date] = None):
        self.store = store
        self.today = today or date.today()

    def get_profile(self, user: User) -> PatientProfile:
        profile = self.store.get_patient_profile(user.id)
        if not profile:
            raise NotFoundError("Patient profile not found")
        return profile

    def describe(self, user: User, profile: PatientProfile) -> PatientProfileResponse:
        data = asdict(profile)
        data.pop("user_id")
        return PatientProfileResponse(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            full_name=user.full_name,
            role=user.role.value,
            **data,
        )

    def update_profile(self, user: User, update: PatientProfileUpdate) -> PatientProfile:
        """Apply a partial profile update."""
        profile = self.get_profile(user)
        changes = update.model_dump(exclude_unset=True)

        if changes.get("first_name"):
            user.first_name = changes.pop("first_name")
        if changes.get("last_name"):
            user.last_name = changes.pop("last_name")
        changes.pop("first_name", None)
        changes.pop("last_name", None)

        if "address" in changes:
            address = changes.pop("address")
            profile.address = Address(**address) if address else Address()
        if "emergency_contact" in changes:
            contact = changes.pop("emergency_contact")
            profile.emergency_contact = EmergencyContact(**contact) if contact else EmergencyContact()

        for name, value in changes.items():
            if name in ("allergies", "chronic_conditions") and value is None:
                value = []
            setattr(profile, name, value)
        profile.updated_at = datetime.utcnow()

        logger.info(f"Patient profile updated for user {user.id}")
        return profile

    def stats(self, user: User) -> PatientStats:
        appointments = self.store.appointments_for_patient(user.id)

        unread = 0
        for conversation in self.store.conversations_for(user.id):
            unread += sum(
                1 for m in self.store.messages_for(conversation.id)
                if m.sender_id != user.id and not m.read
            )

        return PatientStats(
            total_appointments=len(appointments),
            upcoming_appointments=sum(
                1 for a in appointments
                if a.is_active
                and a.status not in (AppointmentStatus.COMPLETED, AppointmentStatus.NO_SHOW)
                and a.appointment_date >= self.today
            ),
            completed_appointments=sum(1 for a in appointments if a.status == AppointmentStatus.COMPLETED),
            cancelled_appointments=sum(1 for a in appointments if a.status == AppointmentStatus.CANCELLED),
            total_doctors=len({a.doctor_id for a in appointments}),
            unread_messages=unread,
        )

    def appointments(
        self,
        user: User,
        status: Optional[AppointmentStatus] = None,
        upcoming: bool = False,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[PatientAppointment], int]:
        """A patient's appointments, newest first."""
        self.get_profile(user)
        appointments = self.store.appointments_for_patient(user.id)

        if status:
            appointments = [a for a in appointments if a.status == status]
        if upcoming:
            appointments = [
                a for a in appointments
                if a.appointment_date >= self.today and a.status not in FINAL_STATUSES
            ]

        appointments.sort(key=lambda a: (a.appointment_date, a.appointment_time), reverse=True)
        page = appointments[offset:offset + limit]
        return [self._summarize(a) for a in page], len(appointments)

    def medical_history(self, user: User) -> MedicalHistory:
        """Medical fields of the profile plus completed visits, newest first."""
        profile = self.get_profile(user)
        completed = [
            a for a in self.store.appointments_for_patient(user.id)
            if a.status == AppointmentStatus.COMPLETED
        ]
        completed.sort(key=lambda a: (a.appointment_date, a.appointment_time), reverse=True)

        return MedicalHistory(
            patient_info=PatientInfo(
                name=user.full_name,
                date_of_birth=profile.date_of_birth,
                gender=profile.gender,
                blood_group=profile.blood_group,
            ),
            allergies=list(profile.allergies),
            chronic_conditions=list(profile.chronic_conditions),
            appointment_history=[
                self._summarize(a, detailed=False) for a in completed[:HISTORY_LIMIT]
            ],
        )

    def _summarize(self, appointment: Appointment, detailed: bool = True) -> PatientAppointment:
        doctor = self.store.get_doctor(appointment.doctor_id)
        if doctor is None:
            block = AppointmentDoctor(name="Unknown Doctor")
        elif detailed:
            block = AppointmentDoctor(
                name=doctor.name,
                first_name=doctor.first_name,
                last_name=doctor.last_name,
                specialization=doctor.specialization,
                consultation_fee=doctor.consultation_fee,
            )
        else:
            block = AppointmentDoctor(name=doctor.name, specialization=doctor.specialization)

        return PatientAppointment(
            id=appointment.id,
            appointment_date=appointment.appointment_date,
            appointment_time=appointment.appointment_time,
            status=appointment.status,
            reason_for_visit=appointment.reason_for_visit,
            cancellation_reason=appointment.cancellation_reason,
            created_at=appointment.created_at,
            updated_at=appointment.updated_at,
            doctor=block,
        )
