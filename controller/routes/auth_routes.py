"""Authentication API routes."""

from typing import Optional

from fastapi import APIRouter, Header, Response, status

from controller.schemas.auth import LoginResponse
from controller.services.auth_service import AuthService

router = APIRouter(tags=["Authentication"])


@router.get("/connect", response_model=LoginResponse)
async def connect(authorization: Optional[str] = Header(None)):
    """
    Authenticate with Basic credentials and open a session.

    Parameters:
        - Authorization header: Basic base64(email:password)

    Returns:
        - token: Session token, valid for 24 hours

    Raises:
        - 401: Malformed header, unknown email or wrong password
    """
    auth_service = AuthService()
    token = auth_service.authenticate(authorization)

    return LoginResponse(token=token)


@router.get("/disconnect", status_code=status.HTTP_204_NO_CONTENT)
async def disconnect(x_token: Optional[str] = Header(None)):
    """
    Close the session identified by the x-token header.

    Raises:
        - 401: Token missing, unknown or expired
    """
    auth_service = AuthService()
    auth_service.revoke(x_token)

    return Response(status_code=status.HTTP_204_NO_CONTENT)
