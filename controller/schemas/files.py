"""Pydantic schemas for file operation endpoints."""

from typing import Optional, Union

from pydantic import BaseModel

from common.constants import ROOT_PARENT_ID
from controller.repositories.file_repository import FileRecord


class CreateFileRequest(BaseModel):
    """
    Request model for file creation.

    Every field is optional here so that missing values are reported by the
    service with their own messages instead of a generic validation error.
    """
    name: Optional[str] = None
    type: Optional[str] = None
    parentId: Optional[Union[str, int]] = None
    isPublic: Optional[bool] = False
    data: Optional[str] = None


class FileResponse(BaseModel):
    """Response model for file metadata. Storage paths are never exposed."""
    id: str
    userId: str
    name: str
    type: str
    isPublic: bool
    parentId: Union[int, str]

    @classmethod
    def from_record(cls, record: FileRecord) -> "FileResponse":
        return cls(
            id=record.file_id,
            userId=record.user_id,
            name=record.name,
            type=record.type,
            isPublic=record.is_public,
            parentId=0 if record.parent_id == ROOT_PARENT_ID else record.parent_id,
        )
