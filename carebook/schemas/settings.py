from datetime import datetime
from typing import List, Literal, Optional
from pydantic import EmailStr, Field

from .base import CamelModel
from .appointment import AppointmentResponse
from .auth import UserResponse

class ProfileSettings(CamelModel):
    first_name: str
    last_name: str
    email: str

class ProfileUpdate(CamelModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None

class NotificationSettingsSchema(CamelModel):
    email_notifications: bool = True
    sms_notifications: bool = False
    appointment_reminders: bool = True
    promotional_emails: bool = False

class NotificationSettingsUpdate(CamelModel):
    email_notifications: Optional[bool] = None
    sms_notifications: Optional[bool] = None
    appointment_reminders: Optional[bool] = None
    promotional_emails: Optional[bool] = None

ProfileVisibility = Literal["public", "private", "doctors_only"]

class PrivacySettingsSchema(CamelModel):
    profile_visibility: ProfileVisibility = "public"
    show_email: bool = False
    show_phone: bool = False

class PrivacySettingsUpdate(CamelModel):
    profile_visibility: Optional[ProfileVisibility] = None
    show_email: Optional[bool] = None
    show_phone: Optional[bool] = None

class PreferencesSchema(CamelModel):
    language: str = "en"
    timezone: str = "UTC"
    theme: str = "light"

class PreferencesUpdate(CamelModel):
    language: Optional[str] = Field(None, min_length=2, max_length=10)
    timezone: Optional[str] = Field(None, min_length=1, max_length=64)
    theme: Optional[Literal["light", "dark", "system"]] = None

class SettingsBundle(CamelModel):
    profile: ProfileSettings
    notifications: NotificationSettingsSchema
    privacy: PrivacySettingsSchema
    preferences: PreferencesSchema

class SettingsResponse(CamelModel):
    settings: SettingsBundle

class PasswordChange(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1, max_length=128)
    confirm_password: str = Field(..., min_length=1)

class DeleteAccountRequest(CamelModel):
    password: str = Field(..., min_length=1)
    confirmation: str

class ExportData(CamelModel):
    user: UserResponse
    appointments: List[AppointmentResponse]
    export_date: datetime

class ExportResponse(CamelModel):
    message: str
    data: ExportData
