"""Pydantic schemas for API requests and responses."""

from controller.schemas.auth import (
    RegisterRequest,
    UserResponse,
    LoginResponse
)
from controller.schemas.files import (
    CreateFileRequest,
    FileResponse
)
from controller.schemas.common import ErrorResponse, StatusResponse, StatsResponse

__all__ = [
    "RegisterRequest",
    "UserResponse",
    "LoginResponse",
    "CreateFileRequest",
    "FileResponse",
    "ErrorResponse",
    "StatusResponse",
    "StatsResponse"
]
