"""
Admin account operations on top of the active authenticator.

Role checks (superadmin-only operations) are enforced by the web layer's
dependencies; this service assumes the caller is already authorized.
"""

from typing import List

from .authenticators import Authenticator, Credentials, LoginResult
from .sessions import SessionStore
from ..models.user import ROLE_ADMIN, Principal, User
from ..services.user_store import UserStore
from ..utils.exceptions import ValidationError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class AuthService:
    def __init__(self, authenticator: Authenticator, users: UserStore, sessions: SessionStore):
        self.authenticator = authenticator
        self.users = users
        self.sessions = sessions

    @property
    def strategy(self) -> str:
        return self.authenticator.name

    def authenticate(self, credentials: Credentials) -> Principal:
        return self.authenticator.authenticate(credentials)

    def login(self, username: str, password: str) -> LoginResult:
        try:
            result = self.authenticator.login(username, password)
        except Exception:
            logger.warning("Login failed", username=username, strategy=self.strategy)
            raise
        logger.info("Login successful", username=result.username, role=result.role, strategy=self.strategy)
        return result

    def logout(self, credentials: Credentials) -> None:
        self.authenticator.logout(credentials)

    def change_own_password(self, principal: Principal, current: str, new: str) -> None:
        self.authenticator.change_own_password(principal, current, new)

    def change_user_password(self, actor: Principal, username: str, new: str) -> User:
        user = self.users.set_password(username, new)
        logger.info("Password reset by superadmin", username=username, actor=actor.username)
        return user

    def create_admin(self, actor: Principal, username: str, password: str, role: str = ROLE_ADMIN) -> User:
        return self.users.create_user(username, password, role=role, created_by=actor.username)

    def list_users(self) -> List[User]:
        return self.users.load_users()

    def delete_user(self, actor: Principal, username: str) -> User:
        if username == actor.username:
            raise ValidationError("Cannot delete your own account")
        user = self.users.delete_user(username)
        self.sessions.destroy_for_user(username)
        return user
