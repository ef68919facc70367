"""User API routes."""

from fastapi import APIRouter, Depends, status

from controller.auth import get_current_user
from controller.schemas.auth import RegisterRequest, UserResponse
from controller.services.auth_service import AuthService

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest):
    """
    Register a new user account.

    Raises:
        - 400: Missing email, missing password, or email already registered
    """
    auth_service = AuthService()
    user = auth_service.register_user(request.email, request.password)

    return UserResponse(id=user.user_id, email=user.email)


@router.get("/me", response_model=UserResponse)
async def me(current_user: str = Depends(get_current_user)):
    """
    Return the user owning the x-token session.

    Raises:
        - 401: Token missing, unknown or expired
    """
    auth_service = AuthService()
    user = auth_service.get_user(current_user)

    return UserResponse(id=user.user_id, email=user.email)
