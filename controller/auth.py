"""Authentication and security utilities."""

import base64
import binascii
import secrets
from functools import lru_cache
from typing import Optional, Tuple

import bcrypt
from fastapi import Header, Request

from common.constants import MAX_PASSWORD_BYTES
from controller.exceptions import InvalidCredentialsError


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password to hash

    Returns:
        Bcrypt hash of the password
    """
    password_bytes = password.encode('utf-8')
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against a bcrypt hash.

    Args:
        password: Plain text password to verify
        password_hash: Bcrypt hash to verify against

    Returns:
        True if password matches hash, False otherwise
    """
    password_bytes = password.encode('utf-8')
    if len(password_bytes) > MAX_PASSWORD_BYTES:
        # longer passwords are refused at registration, so none can match
        return False
    hash_bytes = password_hash.encode('utf-8')
    return bcrypt.checkpw(password_bytes, hash_bytes)


@lru_cache(maxsize=1)
def dummy_password_hash() -> str:
    """Hash checked against when the email is unknown, so both paths cost one bcrypt round."""
    return hash_password(secrets.token_hex(16))


def generate_session_token() -> str:
    """
    Generate a new opaque session token (256 bits of entropy).
    """
    return secrets.token_urlsafe(32)


def parse_basic_auth(authorization: Optional[str]) -> Tuple[str, str]:
    """
    Decode a Basic authorization header into (email, password).

    Raises:
        InvalidCredentialsError: If the header is missing or malformed
    """
    if not authorization:
        raise InvalidCredentialsError("Unauthorized")

    parts = authorization.split(' ')
    if len(parts) != 2 or parts[0] != 'Basic' or not parts[1]:
        raise InvalidCredentialsError("Unauthorized")

    try:
        decoded = base64.b64decode(parts[1], validate=True).decode('utf-8')
    except (binascii.Error, UnicodeDecodeError):
        raise InvalidCredentialsError("Unauthorized")

    email, separator, password = decoded.partition(':')
    if not separator or not email or not password:
        raise InvalidCredentialsError("Unauthorized")

    return email, password


async def get_current_user(request: Request, x_token: Optional[str] = Header(None)) -> str:
    """
    FastAPI dependency to validate the x-token header and extract user_id.

    Raises:
        InvalidTokenError: 401 if the token is missing, unknown or expired
    """
    from controller.services.auth_service import AuthService

    user_id = AuthService().resolve(x_token)
    request.state.user_id = user_id
    return user_id


async def get_optional_user(request: Request, x_token: Optional[str] = Header(None)) -> Optional[str]:
    """
    FastAPI dependency for public-read endpoints: an unresolved token means anonymous.
    """
    from controller.services.auth_service import AuthService

    user_id = AuthService().resolve_optional(x_token)
    request.state.user_id = user_id
    return user_id
