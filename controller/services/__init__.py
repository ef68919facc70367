"""Service layer for business logic."""

from controller.services.auth_service import AuthService
from controller.services.file_service import FileService

__all__ = [
    "AuthService",
    "FileService",
]
