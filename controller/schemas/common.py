"""Common schemas used across multiple endpoints."""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Response model for errors."""
    error: str
    code: str


class StatusResponse(BaseModel):
    db: bool
    storage: bool


class StatsResponse(BaseModel):
    users: int
    files: int
