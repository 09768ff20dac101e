from datetime import date
from typing import List, Optional
import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials
from redis.exceptions import RedisError

from ..core.cache import get_redis
from ..core.config import settings
from ..core.errors import AuthenticationError, AuthorizationError, RateLimitError
from ..core.security import (
    TokenPayload, TokenVerifier, UserRole, get_token_verifier, security
)
from ..core.store import Repository, get_store
from ..models import User
from ..services.auth_service import AuthService

logger = logging.getLogger(__name__)

def get_today() -> date:
    """Current date; overridden in tests to freeze the booking window."""
    return date.today()

def get_auth_service(
    store: Repository = Depends(get_store),
    verifier: TokenVerifier = Depends(get_token_verifier)
) -> AuthService:
    return AuthService(store, verifier)

async def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> str:
    """Extract the bearer token from the Authorization header."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("No token provided or invalid format")
    return credentials.credentials

async def get_current_user_token(
    token: str = Depends(get_bearer_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> TokenPayload:
    """Verify the bearer token and return its payload."""
    return auth_service.verify(token)

async def get_current_user(
    token: str = Depends(get_bearer_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """Get the authenticated user from the repository."""
    return auth_service.authenticate(token)

# Role-based access control dependencies
def require_role(allowed_roles: List[UserRole]):
    """Create a dependency that requires specific user roles."""
    async def role_checker(
        current_user: User = Depends(get_current_user)
    ) -> User:
        if current_user.role not in allowed_roles:
            raise AuthorizationError(
                f"Access denied. Required roles: {[role.value for role in allowed_roles]}"
            )
        return current_user

    return role_checker

async def get_doctor_user(
    current_user: User = Depends(require_role([UserRole.DOCTOR]))
) -> User:
    """Require doctor role."""
    return current_user

async def get_patient_user(
    current_user: User = Depends(require_role([UserRole.PATIENT]))
) -> User:
    """Require patient role."""
    return current_user

# Rate limiting dependency
async def rate_limit_check(
    request: Request,
    redis_client = Depends(get_redis)
) -> None:
    """Fixed-window rate limiting for authentication endpoints."""
    if not settings.RATE_LIMIT_ENABLED:
        return None

    client_ip = request.client.host if request.client else "unknown"
    key = f"rate_limit:{client_ip}"

    try:
        current_requests = redis_client.incr(key)
        if current_requests == 1:
            redis_client.expire(key, settings.RATE_LIMIT_WINDOW_SECONDS)
    except RedisError as e:
        # Fail open when Redis is unreachable
        logger.warning(f"Rate limit check skipped, Redis unavailable: {str(e)}")
        return None

    if int(current_requests) > settings.RATE_LIMIT_REQUESTS:
        raise RateLimitError()
