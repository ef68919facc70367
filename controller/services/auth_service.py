"""Authentication service: credential checks and token sessions."""

from datetime import datetime, timedelta
from typing import Callable, Optional
import sqlite3

from common.constants import MAX_PASSWORD_BYTES
from common.logging_config import get_logger
from controller import config
from controller.auth import (
    dummy_password_hash,
    generate_session_token,
    hash_password,
    parse_basic_auth,
    verify_password,
)
from controller.exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    MissingFieldError,
    PasswordTooLongError,
    UserAlreadyExistsError,
)
from controller.repositories.session_repository import SessionRepository
from controller.repositories.user_repository import User, UserRepository
from controller.utils import generate_uuid, utc_now

logger = get_logger(__name__)


class AuthService:
    def __init__(self, clock: Callable[[], datetime] = utc_now, ttl_seconds: Optional[int] = None):
        self.user_repo = UserRepository()
        self.session_repo = SessionRepository()
        self.clock = clock
        self.ttl = timedelta(seconds=ttl_seconds if ttl_seconds is not None else config.SESSION_TTL)

    def register_user(self, email: Optional[str], password: Optional[str]) -> User:
        if not email:
            raise MissingFieldError("Missing email")
        if not password:
            raise MissingFieldError("Missing password")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise PasswordTooLongError("Password too long")

        if self.user_repo.get_by_email(email) is not None:
            logger.warning("Registration failed: email already exists")
            raise UserAlreadyExistsError("Already exist")

        try:
            user = self.user_repo.create_user(
                user_id=generate_uuid(),
                email=email,
                password_hash=hash_password(password),
                created_at=self.clock(),
            )
        except sqlite3.IntegrityError:
            logger.warning("Registration failed due to integrity error")
            raise UserAlreadyExistsError("Already exist")

        logger.info(f"Successfully registered user [user_id={user.user_id}]")
        return user

    def authenticate(self, authorization: Optional[str]) -> str:
        """
        Check Basic credentials and open a session.

        Every failure raises the same InvalidCredentialsError, and an unknown
        email still costs one bcrypt verification.

        Returns:
            The new session token
        """
        email, password = parse_basic_auth(authorization)

        user = self.user_repo.get_by_email(email)
        if user is None:
            verify_password(password, dummy_password_hash())
            logger.warning("Login failed: invalid credentials")
            raise InvalidCredentialsError("Unauthorized")

        if not verify_password(password, user.password_hash):
            logger.warning("Login failed: invalid credentials")
            raise InvalidCredentialsError("Unauthorized")

        token = generate_session_token()
        created_at = self.clock()
        self.session_repo.create_session(
            token=token,
            user_id=user.user_id,
            created_at=created_at,
            expires_at=created_at + self.ttl,
        )
        logger.info(f"Successfully logged in user [user_id={user.user_id}]")
        return token

    def resolve(self, token: Optional[str]) -> str:
        """
        Map a session token to its user_id.

        Raises:
            InvalidTokenError: Token missing, unknown or expired
        """
        if not token:
            raise InvalidTokenError("Unauthorized")

        session = self.session_repo.get_by_token(token)
        if session is None:
            logger.debug("Token validation failed: unknown token")
            raise InvalidTokenError("Unauthorized")

        if session.is_expired(self.clock()):
            logger.debug(f"Token validation failed: session expired [user_id={session.user_id}]")
            raise InvalidTokenError("Unauthorized")

        return session.user_id

    def resolve_optional(self, token: Optional[str]) -> Optional[str]:
        try:
            return self.resolve(token)
        except InvalidTokenError:
            return None

    def revoke(self, token: Optional[str]) -> None:
        user_id = self.resolve(token)
        if not self.session_repo.delete_session(token):
            raise InvalidTokenError("Unauthorized")
        logger.info(f"Session revoked [user_id={user_id}]")

    def get_user(self, user_id: str) -> User:
        user = self.user_repo.get_by_user_id(user_id)
        if user is None:
            raise InvalidTokenError("Unauthorized")
        return user
