from dataclasses import dataclass, field

@dataclass
class NotificationSettings:
    email_notifications: bool = True
    sms_notifications: bool = False
    appointment_reminders: bool = True
    promotional_emails: bool = False

@dataclass
class PrivacySettings:
    profile_visibility: str = "public"
    show_email: bool = False
    show_phone: bool = False

@dataclass
class Preferences:
    language: str = "en"
    timezone: str = "UTC"
    theme: str = "light"

@dataclass
class UserSettings:
    user_id: str
    notifications: NotificationSettings = field(default_factory=NotificationSettings)
    privacy: PrivacySettings = field(default_factory=PrivacySettings)
    preferences: Preferences = field(default_factory=Preferences)
