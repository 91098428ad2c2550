"""
Bearer-token sessions.

A session maps an opaque token to {username, role, createdAt}. Sessions
have no expiry: they are created on login and removed on logout, or when
the owning user is deleted.
"""

import secrets
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from ..models.content import now_ms
from ..models.user import Session, User
from ..storage.base import Repository
from ..utils.logger import get_logger

logger = get_logger(__name__)

SESSIONS = "sessions"


class SessionStore:
    def __init__(self, repository: Repository):
        self.repository = repository

    def create(self, user: User) -> Session:
        """Create a new session and return it"""
        session = Session(
            token=secrets.token_urlsafe(32),
            username=user.username,
            role=user.role,
            created_at=now_ms(),
        )
        self.repository.insert(SESSIONS, session.to_record())
        logger.info("Session created", username=user.username)
        return session

    def validate(self, token: Optional[str]) -> Optional[Session]:
        """Return the session for a token, or None"""
        if not token:
            return None
        record = self.repository.get(SESSIONS, token)
        if record is None:
            return None
        try:
            return Session.model_validate(record)
        except PydanticValidationError:
            logger.warning("Dropping malformed session record")
            self.repository.delete(SESSIONS, token)
            return None

    def destroy(self, token: Optional[str]) -> bool:
        """Invalidate a session (idempotent)"""
        if not token:
            return False
        removed = self.repository.delete(SESSIONS, token)
        if removed:
            logger.info("Session destroyed", username=removed.get("username"))
        return removed is not None

    def destroy_for_user(self, username: str) -> int:
        count = self.repository.delete_where(SESSIONS, username=username)
        if count:
            logger.info("Sessions destroyed for user", username=username, count=count)
        return count
