"""File operation API routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from controller.auth import get_current_user, get_optional_user
from controller.schemas.files import CreateFileRequest, FileResponse
from controller.services.file_service import FileService

router = APIRouter(prefix="/files", tags=["Files"])


async def read_create_file_request(request: Request) -> CreateFileRequest:
    """
    Parse the upload body. Declared after get_current_user so that a missing
    or bad token is reported before a malformed body.
    """
    try:
        payload = await request.json()
    except ValueError:
        raise RequestValidationError([{"type": "json_invalid", "loc": ("body",), "msg": "JSON decode error"}])

    try:
        return CreateFileRequest.model_validate(payload)
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_input=False))


@router.post(
    "",
    response_model=FileResponse,
    status_code=status.HTTP_201_CREATED,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": CreateFileRequest.model_json_schema()}},
        }
    },
)
async def upload_file(
    current_user: str = Depends(get_current_user),
    request: CreateFileRequest = Depends(read_create_file_request)
):
    """
    Create a folder, or upload a file or image.

    Parameters:
        - name: File name (required)
        - type: folder, file or image (required)
        - parentId: Id of the parent folder (default 0, the root)
        - isPublic: Visibility (default false)
        - data: Base64 content (required unless type is folder)
        - x-token header (required)

    Returns:
        - The created file record. Images get thumbnails in the background.

    Raises:
        - 400: Missing name, Missing type, Missing data, Invalid data,
               Parent not found, Parent is not a folder
        - 401: Invalid or missing token
    """
    file_service = FileService()

    record = file_service.create_file(
        user_id=current_user,
        name=request.name,
        type=request.type,
        parent_id=request.parentId,
        is_public=request.isPublic,
        data=request.data,
    )

    return FileResponse.from_record(record)


@router.get("", response_model=List[FileResponse])
async def list_files(
    parentId: Optional[str] = Query(None),
    page: Optional[str] = Query(None),
    current_user: str = Depends(get_current_user)
):
    """
    List the current user's files under a parent folder, 20 per page.

    Parameters:
        - parentId: Parent folder id (default 0, the root)
        - page: Zero-indexed page (default 0)

    Raises:
        - 401: Invalid or missing token
    """
    file_service = FileService()

    records = file_service.list_files(current_user, parent_id=parentId, page=page)

    return [FileResponse.from_record(record) for record in records]


@router.get("/{file_id}", response_model=FileResponse)
async def get_file(
    file_id: str,
    current_user: str = Depends(get_current_user)
):
    """
    Get the metadata of one of the current user's files.

    Raises:
        - 401: Invalid or missing token
        - 404: Not found (absent or owned by someone else)
    """
    file_service = FileService()

    record = file_service.get_file(current_user, file_id)

    return FileResponse.from_record(record)


@router.put("/{file_id}/publish", response_model=FileResponse)
async def publish_file(
    file_id: str,
    current_user: str = Depends(get_current_user)
):
    """
    Make a file public.

    Raises:
        - 401: Invalid or missing token
        - 404: Not found
    """
    file_service = FileService()

    record = file_service.publish(current_user, file_id)

    return FileResponse.from_record(record)


@router.put("/{file_id}/unpublish", response_model=FileResponse)
async def unpublish_file(
    file_id: str,
    current_user: str = Depends(get_current_user)
):
    """
    Make a file private.

    Raises:
        - 401: Invalid or missing token
        - 404: Not found
    """
    file_service = FileService()

    record = file_service.unpublish(current_user, file_id)

    return FileResponse.from_record(record)


@router.get("/{file_id}/data")
async def get_file_data(
    file_id: str,
    size: Optional[str] = Query(None),
    current_user: Optional[str] = Depends(get_optional_user)
):
    """
    Return a file's raw content, or one of its thumbnails.

    Parameters:
        - size: Thumbnail width, one of 100, 250, 500 (optional)
        - x-token header (optional; required for private files)

    Raises:
        - 400: Folder has no content, or invalid size
        - 404: Not found, or thumbnail not generated yet
    """
    file_service = FileService()

    content, mime_type = file_service.read_content(current_user, file_id, size)

    return Response(content=content, media_type=mime_type)
