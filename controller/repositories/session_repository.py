"""Session repository: token to user mapping with a stored expiry."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from common.logging_config import get_logger
from controller.database import get_db_connection

logger = get_logger(__name__)


@dataclass
class Session:
    token: str
    user_id: str
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class SessionRepository:
    @staticmethod
    def create_session(token: str, user_id: str, created_at: datetime, expires_at: datetime) -> Session:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO sessions (token, user_id, created_at, expires_at)
                VALUES (?, ?, ?, ?)
                """,
                (token, user_id, created_at.isoformat(), expires_at.isoformat())
            )
            conn.commit()

        logger.debug(f"Session created [user_id={user_id}] expires_at={expires_at.isoformat()}")
        return Session(token=token, user_id=user_id, created_at=created_at, expires_at=expires_at)

    @staticmethod
    def get_by_token(token: str) -> Optional[Session]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT token, user_id, created_at, expires_at FROM sessions WHERE token = ?",
                (token,)
            )
            row = cursor.fetchone()

            if row is None:
                return None

            return Session(
                token=row["token"],
                user_id=row["user_id"],
                created_at=datetime.fromisoformat(row["created_at"]),
                expires_at=datetime.fromisoformat(row["expires_at"]),
            )

    @staticmethod
    def delete_session(token: str) -> bool:
        """
        Delete a session.

        Returns:
            True if a row was deleted, False if the token was already absent
        """
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM sessions WHERE token = ?", (token,))
            conn.commit()
            return cursor.rowcount > 0
