from fastapi import APIRouter, Depends

from ...api.deps import get_auth_service, get_current_user
from ...core.store import Repository, get_store
from ...models import User
from ...schemas.settings import (
    DeleteAccountRequest, ExportResponse, NotificationSettingsSchema,
    NotificationSettingsUpdate, PasswordChange, PreferencesSchema, PreferencesUpdate,
    PrivacySettingsSchema, PrivacySettingsUpdate, ProfileUpdate,
    SettingsResponse
)
from ...services.auth_service import AuthService
from ...services.booking_service import BookingService
from ...services.settings_service import SettingsService

router = APIRouter(prefix="/settings", tags=["Settings"])

def get_settings_service(store: Repository = Depends(get_store)) -> SettingsService:
    return SettingsService(store)

@router.get("", response_model=SettingsResponse)
async def get_settings(
    current_user: User = Depends(get_current_user),
    settings_service: SettingsService = Depends(get_settings_service)
):
    """Profile, notification, privacy and display settings of the caller."""
    return SettingsResponse(settings=settings_service.describe(current_user))

@router.put("/profile")
async def update_profile(
    update: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    settings_service: SettingsService = Depends(get_settings_service)
):
    profile = settings_service.update_profile(current_user, update)
    return {
        "message": "Profile updated successfully",
        "profile": profile.model_dump(by_alias=True)
    }

@router.put("/notifications")
async def update_notifications(
    update: NotificationSettingsUpdate,
    current_user: User = Depends(get_current_user),
    settings_service: SettingsService = Depends(get_settings_service)
):
    section = settings_service.update_notifications(current_user, update)
    return {
        "message": "Notification settings updated",
        "notifications": NotificationSettingsSchema.model_validate(section).model_dump(by_alias=True)
    }

@router.put("/privacy")
async def update_privacy(
    update: PrivacySettingsUpdate,
    current_user: User = Depends(get_current_user),
    settings_service: SettingsService = Depends(get_settings_service)
):
    section = settings_service.update_privacy(current_user, update)
    return {
        "message": "Privacy settings updated",
        "privacy": PrivacySettingsSchema.model_validate(section).model_dump(by_alias=True)
    }

@router.put("/preferences")
async def update_preferences(
    update: PreferencesUpdate,
    current_user: User = Depends(get_current_user),
    settings_service: SettingsService = Depends(get_settings_service)
):
    section = settings_service.update_preferences(current_user, update)
    return {
        "message": "Preferences updated",
        "preferences": PreferencesSchema.model_validate(section).model_dump(by_alias=True)
    }

@router.put("/security")
async def change_password(
    change: PasswordChange,
    current_user: User = Depends(get_current_user),
    settings_service: SettingsService = Depends(get_settings_service),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Change the caller's password."""
    settings_service.change_password(current_user, auth_service, change)
    return {"message": "Password changed successfully"}

@router.get("/export-data", response_model=ExportResponse)
async def export_data(
    current_user: User = Depends(get_current_user),
    store: Repository = Depends(get_store),
    settings_service: SettingsService = Depends(get_settings_service)
):
    data = settings_service.export_data(current_user, BookingService(store))
    return ExportResponse(message="Data export generated", data=data)

@router.post("/delete-account")
async def delete_account(
    request: DeleteAccountRequest,
    current_user: User = Depends(get_current_user),
    settings_service: SettingsService = Depends(get_settings_service)
):
    """Deactivate the caller's account after confirming the password."""
    settings_service.delete_account(current_user, request.password, request.confirmation)
    return {"message": "Account deleted successfully"}
