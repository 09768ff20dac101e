from typing import Tuple
import logging

from ..core.config import settings
from ..core.errors import AuthenticationError, ValidationError
from ..core.security import (
    TokenPayload, TokenVerifier, UserRole, get_password_hash, verify_password
)
from ..models import Doctor, PatientProfile, User
from ..schemas.auth import UserLogin, UserRegister

logger = logging.getLogger(__name__)

class AuthService:
    def __init__(self, store, verifier: TokenVerifier):
        self.store = store
        self.verifier = verifier

    def register_user(self, user_data: UserRegister) -> Tuple[User, str]:
        """Register a new user, pairing doctors with a Doctor record."""
        password = user_data.password or settings.DEMO_PASSWORD

        new_user = User(
            id=self.store.next_id(),
            email=user_data.email,
            first_name=user_data.first_name,
            last_name=user_data.last_name,
            role=user_data.role,
            password_hash=get_password_hash(password),
        )
        # Raises on duplicate email
        self.store.add_user(new_user)

        if new_user.role == UserRole.DOCTOR:
            specialization = user_data.specialization or "General Practice"
            self.store.add_doctor(Doctor(
                id=new_user.id,
                first_name=new_user.first_name,
                last_name=new_user.last_name,
                specialization=specialization,
                years_of_experience=user_data.years_of_experience or 0,
                consultation_fee=(
                    user_data.consultation_fee
                    if user_data.consultation_fee is not None else 100.0
                ),
                bio=user_data.bio or f"{specialization} physician providing quality healthcare services.",
                license_number=user_data.license_number,
            ))
            logger.info(f"New doctor registered: Dr. {new_user.full_name} ({specialization})")
        else:
            self.store.add_patient_profile(PatientProfile(
                user_id=new_user.id,
                phone=user_data.phone,
                date_of_birth=user_data.date_of_birth,
                gender=user_data.gender,
            ))

        logger.info(f"User registered: {new_user.email} as {new_user.role.value}")
        return new_user, self.issue_token(new_user)

    def login(self, login_data: UserLogin) -> Tuple[User, str]:
        """Check credentials and return the user with a fresh token."""
        user = self.store.get_user_by_email(login_data.email)

        if not user or not verify_password(login_data.password, user.password_hash):
            logger.warning(f"Failed login attempt for {login_data.email}")
            raise AuthenticationError("Invalid email or password")

        if not user.is_active:
            raise AuthenticationError("Account is deactivated")

        logger.info(f"Login successful: {user.email}")
        return user, self.issue_token(user)

    def issue_token(self, user: User) -> str:
        return self.verifier.issue(user.id, user.email, user.role)

    def verify(self, token: str) -> TokenPayload:
        payload = self.verifier.verify(token)
        if not payload or not payload.sub:
            raise AuthenticationError("Invalid or expired token")
        if self.store.is_token_revoked(payload.jti):
            raise AuthenticationError("Token has been revoked")
        return payload

    def authenticate(self, token: str) -> User:
        """Resolve a bearer token to an active user."""
        payload = self.verify(token)

        user = self.store.get_user(payload.sub)
        if not user:
            raise AuthenticationError("Invalid token - user not found")
        if not user.is_active:
            raise AuthenticationError("User account is deactivated")

        return user

    def logout(self, payload: TokenPayload) -> None:
        """Revoke the presented token when it carries an id."""
        if payload.jti:
            self.store.revoke_token(payload.jti)
        logger.info(f"User {payload.sub} logged out")

    def change_password(self, user: User, current_password: str, new_password: str) -> None:
        if not verify_password(current_password, user.password_hash):
            raise ValidationError("Current password is incorrect")
        user.password_hash = get_password_hash(new_password)
        logger.info(f"Password changed for user {user.id}")
