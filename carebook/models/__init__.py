from .user import User
from .doctor import Doctor, ScheduleEntry, default_weekly_schedule
from .patient import PatientProfile, Address, EmergencyContact
from .appointment import Appointment, AppointmentStatus, ACTIVE_STATUSES
from .message import Conversation, Message
from .settings import UserSettings, NotificationSettings, PrivacySettings, Preferences

__all__ = [
    "User",
    "Doctor",
    "ScheduleEntry",
    "default_weekly_schedule",
    "PatientProfile",
    "Address",
    "EmergencyContact",
    "Appointment",
    "AppointmentStatus",
    "ACTIVE_STATUSES",
    "Conversation",
    "Message",
    "UserSettings",
    "NotificationSettings",
    "PrivacySettings",
    "Preferences",
]
