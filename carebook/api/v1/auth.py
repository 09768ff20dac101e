from fastapi import APIRouter, Depends, status

from ...api.deps import (
    get_auth_service, get_current_user, get_current_user_token, rate_limit_check
)
from ...core.security import TokenPayload
from ...models import User
from ...schemas.auth import (
    AuthResponse, TokenVerification, UserLogin, UserRegister, UserResponse
)
from ...services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Authentication"])

@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    auth_service: AuthService = Depends(get_auth_service),
    _: None = Depends(rate_limit_check)
):
    """Register a new user; doctors also get a directory listing."""
    user, token = auth_service.register_user(user_data)
    return AuthResponse(
        message="User registered successfully",
        user=UserResponse.model_validate(user),
        token=token
    )

@router.post("/login", response_model=AuthResponse)
async def login(
    login_data: UserLogin,
    auth_service: AuthService = Depends(get_auth_service),
    _: None = Depends(rate_limit_check)
):
    """Authenticate user and return an access token."""
    user, token = auth_service.login(login_data)
    return AuthResponse(
        message="Login successful",
        user=UserResponse.model_validate(user),
        token=token
    )

@router.post("/logout")
async def logout(
    token_payload: TokenPayload = Depends(get_current_user_token),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Logout user by revoking the presented token."""
    auth_service.logout(token_payload)
    return {"message": "Logged out successfully"}

@router.get("/me")
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    """Get current user information."""
    return {"user": UserResponse.model_validate(current_user).model_dump(by_alias=True, mode="json")}

@router.post("/verify-token", response_model=TokenVerification)
async def verify_token_endpoint(
    token_payload: TokenPayload = Depends(get_current_user_token),
    current_user: User = Depends(get_current_user)
):
    """Verify if token is valid."""
    return TokenVerification(
        valid=True,
        user_id=current_user.id,
        role=current_user.role,
        expires=token_payload.exp
    )
