"""User repository for database operations."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from common.logging_config import get_logger
from controller.database import get_db_connection

logger = get_logger(__name__)


@dataclass
class User:
    user_id: str
    email: str
    password_hash: str
    created_at: datetime


def _row_to_user(row) -> User:
    return User(
        user_id=row["user_id"],
        email=row["email"],
        password_hash=row["password_hash"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


class UserRepository:
    @staticmethod
    def create_user(user_id: str, email: str, password_hash: str, created_at: datetime) -> User:
        logger.debug(f"Creating user [user_id={user_id}]")

        with get_db_connection() as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(
                    """
                    INSERT INTO users (user_id, email, password_hash, created_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (user_id, email, password_hash, created_at.isoformat())
                )
                conn.commit()
                logger.info(f"User created successfully [user_id={user_id}]")
            except Exception as e:
                logger.error(f"Failed to create user [user_id={user_id}]: {e}", exc_info=True)
                raise

        return User(
            user_id=user_id,
            email=email,
            password_hash=password_hash,
            created_at=created_at,
        )

    @staticmethod
    def get_by_email(email: str) -> Optional[User]:
        logger.debug("Fetching user by email")
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT user_id, email, password_hash, created_at FROM users WHERE email = ?",
                (email,)
            )
            row = cursor.fetchone()

            if row is None:
                logger.debug("User not found for email")
                return None

            return _row_to_user(row)

    @staticmethod
    def get_by_user_id(user_id: str) -> Optional[User]:
        logger.debug(f"Fetching user by user_id: {user_id}")
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT user_id, email, password_hash, created_at FROM users WHERE user_id = ?",
                (user_id,)
            )
            row = cursor.fetchone()

            if row is None:
                logger.debug(f"User not found: {user_id}")
                return None

            return _row_to_user(row)

    @staticmethod
    def count_users() -> int:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) FROM users")
            return cursor.fetchone()[0]
