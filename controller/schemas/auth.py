"""Pydantic schemas for authentication and user endpoints."""

from typing import Optional

from pydantic import BaseModel


class RegisterRequest(BaseModel):
    """Request model for user registration. Fields are checked by the service."""
    email: Optional[str] = None
    password: Optional[str] = None


class UserResponse(BaseModel):
    """Response model for a user."""
    id: str
    email: str


class LoginResponse(BaseModel):
    """Response model for a successful connect."""
    token: str
