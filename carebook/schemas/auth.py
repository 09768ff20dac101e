from datetime import date
from typing import Optional
from pydantic import EmailStr, Field

from .base import CamelModel
from ..core.security import UserRole

class UserRegister(CamelModel):
    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    role: UserRole = UserRole.PATIENT
    password: Optional[str] = Field(None, min_length=8, max_length=128)

    # Doctor registration
    specialization: Optional[str] = Field(None, max_length=100)
    license_number: Optional[str] = Field(None, max_length=50)
    years_of_experience: Optional[int] = Field(None, ge=0, le=80)
    consultation_fee: Optional[float] = Field(None, ge=0)
    bio: Optional[str] = Field(None, max_length=2000)

    # Patient registration
    phone: Optional[str] = Field(None, max_length=30)
    date_of_birth: Optional[date] = None
    gender: Optional[str] = Field(None, max_length=20)

class UserLogin(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

class UserResponse(CamelModel):
    id: str
    email: str
    first_name: str
    last_name: str
    role: UserRole

class AuthResponse(CamelModel):
    message: str
    user: UserResponse
    token: str
    token_type: str = "bearer"

class TokenVerification(CamelModel):
    valid: bool
    user_id: str
    role: UserRole
    expires: Optional[int] = None
