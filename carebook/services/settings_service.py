from dataclasses import asdict
from datetime import datetime
import logging

from ..core.errors import ValidationError
from ..core.security import UserRole, verify_password
from ..models import User, UserSettings
from ..schemas.auth import UserResponse
from ..schemas.settings import (
    ExportData, NotificationSettingsUpdate, PasswordChange, PreferencesUpdate,
    PrivacySettingsUpdate, ProfileSettings, ProfileUpdate, SettingsBundle
)
from .auth_service import AuthService

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
DELETE_CONFIRMATION = "DELETE"

class SettingsService:
    def __init__(self, store):
        self.store = store

    def get(self, user: User) -> UserSettings:
        return self.store.get_settings(user.id)

    def describe(self, user: User) -> SettingsBundle:
        user_settings = self.get(user)
        return SettingsBundle(
            profile=self.profile(user),
            notifications=asdict(user_settings.notifications),
            privacy=asdict(user_settings.privacy),
            preferences=asdict(user_settings.preferences),
        )

    def profile(self, user: User) -> ProfileSettings:
        return ProfileSettings(first_name=user.first_name, last_name=user.last_name, email=user.email)

    def update_profile(self, user: User, update: ProfileUpdate) -> ProfileSettings:
        if update.email and update.email.lower() != user.email.lower():
            self.store.change_user_email(user, update.email)
        if update.first_name:
            user.first_name = update.first_name
        if update.last_name:
            user.last_name = update.last_name

        # Doctor listings show the account name
        doctor = self.store.get_doctor(user.id)
        if doctor:
            doctor.first_name = user.first_name
            doctor.last_name = user.last_name

        logger.info(f"Profile settings updated for user {user.id}")
        return self.profile(user)

    def update_notifications(self, user: User, update: NotificationSettingsUpdate):
        return self._apply(self.get(user).notifications, update)

    def update_privacy(self, user: User, update: PrivacySettingsUpdate):
        return self._apply(self.get(user).privacy, update)

    def update_preferences(self, user: User, update: PreferencesUpdate):
        return self._apply(self.get(user).preferences, update)

    def change_password(self, user: User, auth_service: AuthService, change: PasswordChange) -> None:
        if change.new_password != change.confirm_password:
            raise ValidationError("New passwords do not match")
        if len(change.new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
        auth_service.change_password(user, change.current_password, change.new_password)

    def delete_account(self, user: User, password: str, confirmation: str) -> None:
        """Deactivate the account; its tokens stop authenticating."""
        if confirmation != DELETE_CONFIRMATION or not verify_password(password, user.password_hash):
            raise ValidationError("Invalid confirmation")

        user.is_active = False
        doctor = self.store.get_doctor(user.id)
        if doctor:
            doctor.is_available = False

        logger.info(f"Account {user.id} deactivated at {datetime.utcnow().isoformat()}")

    @staticmethod
    def _apply(section, update):
        for name, value in update.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(section, name, value)
        return section

    def export_data(self, user: User, booking_service) -> ExportData:
        """Everything held about a user: account and appointments."""
        if user.role == UserRole.DOCTOR:
            appointments = self.store.appointments_for_doctor(user.id)
        else:
            appointments = self.store.appointments_for_patient(user.id)
        appointments.sort(key=lambda a: (a.appointment_date, a.appointment_time))

        logger.info(f"Data export generated for user {user.id}")
        return ExportData(
            user=UserResponse.model_validate(user),
            appointments=[booking_service.describe(a) for a in appointments],
            export_date=datetime.utcnow(),
        )
