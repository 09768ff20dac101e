"""In-memory repository holding every record of the running process.

All mutations go through the repository lock. Appointments are additionally
indexed by (doctor, day) and by the slot they hold, so that at most one
non-cancelled appointment can exist per (doctor_id, date, time).
"""
from collections import defaultdict
from contextlib import contextmanager
from datetime import date, datetime
from typing import Dict, Iterator, List, Optional, Set, Tuple
import threading
import time

from .errors import ConflictError, ValidationError
from ..models import (
    ACTIVE_STATUSES, Appointment, Conversation, Doctor, Message, PatientProfile,
    ScheduleEntry, User, UserSettings
)

SlotKey = Tuple[str, date, str]

class Repository:
    def __init__(self):
        self._lock = threading.RLock()
        self._slot_locks: Dict[SlotKey, List] = {}
        self._last_id = 0

        self._users: Dict[str, User] = {}
        self._user_ids_by_email: Dict[str, str] = {}
        self._doctors: Dict[str, Doctor] = {}
        self._patients: Dict[str, PatientProfile] = {}
        self._settings: Dict[str, UserSettings] = {}

        self._appointments: Dict[str, Appointment] = {}
        self._appointment_ids_by_day: Dict[Tuple[str, date], List[str]] = defaultdict(list)
        self._active_slots: Dict[SlotKey, str] = {}

        self._conversations: Dict[str, Conversation] = {}
        self._messages: Dict[str, List[Message]] = defaultdict(list)

        self._revoked_tokens: Set[str] = set()

    def next_id(self) -> str:
        """Millisecond timestamp id, strictly increasing within the process."""
        with self._lock:
            candidate = int(time.time() * 1000)
            self._last_id = max(candidate, self._last_id + 1)
            return str(self._last_id)

    @contextmanager
    def slot_lock(self, key: SlotKey) -> Iterator[None]:
        """Serialize work on a single (doctor_id, date, time) slot.

        Entries are [lock, holders] and are removed when the last holder
        or waiter leaves.
        """
        with self._lock:
            entry = self._slot_locks.get(key)
            if entry is None:
                entry = self._slot_locks[key] = [threading.Lock(), 0]
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._lock:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._slot_locks[key]

    # Users
    def add_user(self, user: User) -> User:
        email_key = user.email.lower()
        with self._lock:
            if email_key in self._user_ids_by_email:
                raise ValidationError("User with this email already exists. Please login instead.")
            self._users[user.id] = user
            self._user_ids_by_email[email_key] = user.id
        return user

    def get_user(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        user_id = self._user_ids_by_email.get(email.lower())
        return self._users.get(user_id) if user_id else None

    def change_user_email(self, user: User, new_email: str) -> None:
        new_key = new_email.lower()
        with self._lock:
            owner = self._user_ids_by_email.get(new_key)
            if owner is not None and owner != user.id:
                raise ValidationError("Email already registered")
            self._user_ids_by_email.pop(user.email.lower(), None)
            self._user_ids_by_email[new_key] = user.id
            user.email = new_email

    # Doctors
    def add_doctor(self, doctor: Doctor) -> Doctor:
        with self._lock:
            if doctor.id in self._doctors:
                raise ValidationError(f"Doctor {doctor.id} already exists")
            self._doctors[doctor.id] = doctor
        return doctor

    def get_doctor(self, doctor_id: str) -> Optional[Doctor]:
        return self._doctors.get(doctor_id)

    def list_doctors(self) -> List[Doctor]:
        return list(self._doctors.values())

    def set_doctor_schedule(self, doctor: Doctor, schedule: List[ScheduleEntry]) -> None:
        with self._lock:
            doctor.schedule = list(schedule)

    # Patients and settings
    def add_patient_profile(self, profile: PatientProfile) -> PatientProfile:
        with self._lock:
            self._patients[profile.user_id] = profile
        return profile

    def get_patient_profile(self, user_id: str) -> Optional[PatientProfile]:
        return self._patients.get(user_id)

    def get_settings(self, user_id: str) -> UserSettings:
        with self._lock:
            if user_id not in self._settings:
                self._settings[user_id] = UserSettings(user_id=user_id)
            return self._settings[user_id]

    # Appointments
    def add_appointment(self, appointment: Appointment) -> Appointment:
        with self._lock:
            if appointment.is_active:
                if appointment.slot_key in self._active_slots:
                    raise ConflictError("This time slot is no longer available. Please choose another time.")
                self._active_slots[appointment.slot_key] = appointment.id
            self._appointments[appointment.id] = appointment
            self._appointment_ids_by_day[(appointment.doctor_id, appointment.appointment_date)].append(appointment.id)
        return appointment

    def update_appointment(self, appointment: Appointment, **changes) -> Appointment:
        """Apply field changes, keeping the slot indexes consistent."""
        with self._lock:
            old_key = appointment.slot_key
            old_day = (appointment.doctor_id, appointment.appointment_date)
            new_key = (
                appointment.doctor_id,
                changes.get("appointment_date", appointment.appointment_date),
                changes.get("appointment_time", appointment.appointment_time),
            )
            will_be_active = changes.get("status", appointment.status) in ACTIVE_STATUSES

            if will_be_active:
                holder = self._active_slots.get(new_key)
                if holder is not None and holder != appointment.id:
                    raise ConflictError("This time slot is already booked")

            if self._active_slots.get(old_key) == appointment.id:
                del self._active_slots[old_key]
            for name, value in changes.items():
                setattr(appointment, name, value)
            if will_be_active:
                self._active_slots[new_key] = appointment.id

            new_day = (appointment.doctor_id, appointment.appointment_date)
            if new_day != old_day:
                self._appointment_ids_by_day[old_day].remove(appointment.id)
                self._appointment_ids_by_day[new_day].append(appointment.id)

            appointment.updated_at = datetime.utcnow()
        return appointment

    def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        return self._appointments.get(appointment_id)

    def appointments_for_doctor_on(self, doctor_id: str, day: date) -> List[Appointment]:
        with self._lock:
            ids = list(self._appointment_ids_by_day.get((doctor_id, day), []))
        return [self._appointments[i] for i in ids]

    def appointments_for_doctor(self, doctor_id: str) -> List[Appointment]:
        return [a for a in list(self._appointments.values()) if a.doctor_id == doctor_id]

    def appointments_for_patient(self, patient_id: str) -> List[Appointment]:
        return [a for a in list(self._appointments.values()) if a.patient_id == patient_id]

    def is_slot_taken(self, key: SlotKey) -> bool:
        return key in self._active_slots

    # Messaging
    def add_conversation(self, conversation: Conversation) -> Conversation:
        with self._lock:
            self._conversations[conversation.id] = conversation
        return conversation

    def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        return self._conversations.get(conversation_id)

    def find_conversation(self, patient_id: str, doctor_id: str) -> Optional[Conversation]:
        for conversation in list(self._conversations.values()):
            if conversation.patient_id == patient_id and conversation.doctor_id == doctor_id:
                return conversation
        return None

    def conversations_for(self, user_id: str) -> List[Conversation]:
        return [c for c in list(self._conversations.values()) if c.has_participant(user_id)]

    def add_message(self, message: Message) -> Message:
        with self._lock:
            self._messages[message.conversation_id].append(message)
        return message

    def messages_for(self, conversation_id: str) -> List[Message]:
        with self._lock:
            return list(self._messages.get(conversation_id, []))

    # Tokens
    def revoke_token(self, jti: str) -> None:
        with self._lock:
            self._revoked_tokens.add(jti)

    def is_token_revoked(self, jti: Optional[str]) -> bool:
        return jti is not None and jti in self._revoked_tokens


store = Repository()

# Store dependency
def get_store() -> Repository:
    """Get the process-wide repository."""
    return store

def init_store(seed: bool = True) -> Repository:
    """Seed the process-wide repository with demo data."""
    if seed:
        from .seed import seed_demo_data
        seed_demo_data(store)
    return store
