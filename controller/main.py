"""Entry point for the Controller service."""

import uvicorn
import time
import uuid
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from common.logging_config import setup_logging
from controller.config import CONTROLLER_HOST, CONTROLLER_PORT
from controller.database import get_db_connection, init_database
from controller.object_store import LocalObjectStore
from controller.repositories.file_repository import FileRepository
from controller.repositories.user_repository import UserRepository
from controller.routes.auth_routes import router as auth_router
from controller.routes.file_routes import router as file_router
from controller.routes.user_routes import router as user_router
from controller.schemas.common import ErrorResponse, StatsResponse, StatusResponse
from controller.exceptions import (
    FilesManagerError,
    InvalidCredentialsError,
    InvalidTokenError,
    BadRequestError,
    FileNotFoundError,
)

logger = setup_logging('controller')

app = FastAPI(
    title="Files Manager",
    description="Multi-tenant file storage with public sharing and image thumbnails",
    version="1.0.0"
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    logger.info(
        f"Request started: {request.method} {request.url.path} [request_id={request_id}]"
    )

    response = await call_next(request)

    duration = time.time() - start_time
    user_id = getattr(request.state, 'user_id', None)

    logger.info(
        f"Request completed: {request.method} {request.url.path} "
        f"status={response.status_code} duration={duration:.3f}s "
        f"[request_id={request_id}] [user_id={user_id or 'anonymous'}]"
    )

    response.headers["X-Request-ID"] = request_id

    return response


@app.on_event("startup")
async def startup_event():
    """
    Initialize database and storage directory on application startup.
    """
    logger.info("Controller service starting up...")

    init_database()
    logger.info("Database initialized")

    LocalObjectStore().ensure_directory()
    logger.info("Storage directory ready")


def _error(status_code: int, message: str, code: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message, code=code).model_dump())


@app.exception_handler(InvalidCredentialsError)
async def invalid_credentials_handler(request: Request, exc: InvalidCredentialsError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Invalid credentials [request_id={request_id}] path={request.url.path}"
    )
    return _error(status.HTTP_401_UNAUTHORIZED, "Unauthorized", "INVALID_CREDENTIALS")


@app.exception_handler(InvalidTokenError)
async def invalid_token_handler(request: Request, exc: InvalidTokenError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Invalid token [request_id={request_id}] path={request.url.path}"
    )
    return _error(status.HTTP_401_UNAUTHORIZED, "Unauthorized", "INVALID_TOKEN")


# Messages for request fields that fail schema validation; the submitted value is never echoed
_FIELD_MESSAGES = {
    "email": "Missing email",
    "password": "Missing password",
    "name": "Missing name",
    "type": "Missing type",
    "parentId": "Parent not found",
    "isPublic": "Invalid isPublic",
    "data": "Missing data",
}


def validation_message(errors) -> str:
    for error in errors:
        for part in error.get("loc") or ():
            if part in _FIELD_MESSAGES:
                return _FIELD_MESSAGES[part]
    return "Invalid request body"


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    message = validation_message(exc.errors())
    logger.warning(
        f"Invalid request: {message} [request_id={request_id}] path={request.url.path}"
    )
    return _error(status.HTTP_400_BAD_REQUEST, message, "BAD_REQUEST")


@app.exception_handler(BadRequestError)
async def bad_request_handler(request: Request, exc: BadRequestError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Bad request: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return _error(status.HTTP_400_BAD_REQUEST, str(exc), "BAD_REQUEST")


@app.exception_handler(FileNotFoundError)
async def file_not_found_handler(request: Request, exc: FileNotFoundError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    user_id = getattr(request.state, 'user_id', None)
    logger.warning(
        f"File not found [request_id={request_id}] [user_id={user_id or 'anonymous'}] path={request.url.path}"
    )
    return _error(status.HTTP_404_NOT_FOUND, "Not found", "NOT_FOUND")


@app.exception_handler(FilesManagerError)
async def files_manager_error_handler(request: Request, exc: FilesManagerError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Unhandled service error: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=True
    )
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", "INTERNAL_ERROR")


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Unexpected error: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=True
    )
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", "INTERNAL_ERROR")


app.include_router(auth_router)
app.include_router(user_router)
app.include_router(file_router)


@app.get("/status", response_model=StatusResponse)
async def status_check():
    """
    Report whether the database and the storage directory are usable.
    """
    try:
        with get_db_connection() as conn:
            conn.execute("SELECT 1")
        db_ok = True
    except Exception as e:
        logger.error(f"Database check failed: {e}")
        db_ok = False

    return StatusResponse(db=db_ok, storage=LocalObjectStore().is_writable())


@app.get("/stats", response_model=StatsResponse)
async def stats():
    """
    Count users and file records.
    """
    return StatsResponse(
        users=UserRepository.count_users(),
        files=FileRepository.count_files(),
    )


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    uvicorn.run(
        "controller.main:app",
        host=CONTROLLER_HOST,
        port=CONTROLLER_PORT,
    )


if __name__ == "__main__":
    main()
