from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi.security import HTTPBearer
from pydantic import BaseModel
from enum import Enum
import uuid

from .config import settings

# Password hashing
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.PASSWORD_HASH_ROUNDS,
)

# Bearer token extraction; missing headers are reported by get_current_user_token
security = HTTPBearer(auto_error=False)

DEMO_TOKEN_PREFIX = "demo-jwt-token-"

class UserRole(str, Enum):
    DOCTOR = "doctor"
    PATIENT = "patient"

class TokenPayload(BaseModel):
    sub: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    exp: Optional[int] = None
    jti: Optional[str] = None

# Password utilities
def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    """Generate password hash."""
    return pwd_context.hash(password)

# Token verifiers
class TokenVerifier(ABC):
    """Issues bearer tokens for users and turns them back into payloads."""

    @abstractmethod
    def issue(self, user_id: str, email: str, role: UserRole) -> str:
        ...

    @abstractmethod
    def verify(self, token: str) -> Optional[TokenPayload]:
        """Return the payload, or None when the token is not acceptable."""

class JWTTokenVerifier(TokenVerifier):
    """Signed, expiring HS256 tokens."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expires_delta: Optional[timedelta] = None
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expires_delta = expires_delta or timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )

    def issue(self, user_id: str, email: str, role: UserRole) -> str:
        to_encode = {
            "sub": user_id,
            "email": email,
            "role": UserRole(role).value,
            "exp": datetime.utcnow() + self.expires_delta,
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> Optional[TokenPayload]:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
            return TokenPayload(**payload)
        except JWTError:
            return None

class DemoTokenVerifier(TokenVerifier):
    """Unsigned "demo-jwt-token-{userId}" tokens, for local demos only."""

    def issue(self, user_id: str, email: str, role: UserRole) -> str:
        return f"{DEMO_TOKEN_PREFIX}{user_id}"

    def verify(self, token: str) -> Optional[TokenPayload]:
        if not token.startswith(DEMO_TOKEN_PREFIX):
            return None
        user_id = token[len(DEMO_TOKEN_PREFIX):]
        if not user_id:
            return None
        return TokenPayload(sub=user_id)

def build_token_verifier(scheme: str) -> TokenVerifier:
    if scheme == "jwt":
        return JWTTokenVerifier(settings.SECRET_KEY, settings.ALGORITHM)
    if scheme == "demo":
        return DemoTokenVerifier()
    raise ValueError(f"Unknown token scheme: {scheme}")

token_verifier = build_token_verifier(settings.TOKEN_SCHEME)

def get_token_verifier() -> TokenVerifier:
    """Get the configured token verifier."""
    return token_verifier
