"""Repository layer for data access."""

from controller.repositories.user_repository import UserRepository
from controller.repositories.session_repository import SessionRepository
from controller.repositories.file_repository import FileRepository

__all__ = [
    "UserRepository",
    "SessionRepository",
    "FileRepository",
]
