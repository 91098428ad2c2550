"""
Pluggable admin authentication.

Exactly one Authenticator is active per process, selected by
AUTH_STRATEGY:

    shared_secret  one admin secret in x-admin-pass (or body "password")
    credentialed   x-username / x-password checked on every request
    token          login once, then x-auth-token / Authorization: Bearer

All variants resolve a request's credentials to a Principal or raise.
"""

import hmac
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .sessions import SessionStore
from .shared_secret import SharedSecretStore
from ..models.user import ROLE_SUPERADMIN, Principal, User
from ..services.user_store import UserStore
from ..utils.config import AuthSettings
from ..utils.exceptions import AuthenticationError, ConfigError, ForbiddenError
from ..utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class Credentials:
    """Everything a request may carry to identify an admin"""

    admin_pass: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    token: Optional[str] = None


@dataclass
class LoginResult:
    username: str
    role: str
    token: Optional[str] = None

    def to_public(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"username": self.username, "role": self.role}
        if self.token:
            data["token"] = self.token
        return data


class Authenticator(ABC):
    """Base class for admin authentication strategies"""

    name = ""

    def __init__(self, users: UserStore, settings: AuthSettings):
        self.users = users
        self.settings = settings

    @abstractmethod
    def authenticate(self, credentials: Credentials) -> Principal:
        """Resolve credentials to a principal or raise"""

    @abstractmethod
    def login(self, username: str, password: str) -> LoginResult:
        """Check a username/password pair"""

    def logout(self, credentials: Credentials) -> None:
        """Nothing to forget unless the strategy keeps sessions"""

    def change_own_password(self, principal: Principal, current: str, new: str) -> None:
        user = self.users.verify_credentials(principal.username, current)
        if user is None:
            raise AuthenticationError("Current password is incorrect")
        self.users.set_password(principal.username, new)

    def _check_user(self, username: Optional[str], password: Optional[str]) -> User:
        """
        Verify a user record.

        The default username is also accepted with ADMIN_PASS when no such
        record exists yet; the superadmin is then materialized.
        """
        if not username or not password:
            raise AuthenticationError("Username and password are required")

        user = self.users.find_by_username(username)
        if user is None:
            if username == self.settings.default_username and hmac.compare_digest(
                password.encode("utf-8"), self.settings.admin_pass.encode("utf-8")
            ):
                logger.info("Materializing default superadmin on login", username=username)
                return self.users.create_user(
                    username, password, role=ROLE_SUPERADMIN, enforce_policy=False
                )
            raise AuthenticationError("Invalid username or password")

        user = self.users.verify_credentials(username, password)
        if user is None:
            raise AuthenticationError("Invalid username or password")
        return user


class SharedSecretAuthenticator(Authenticator):
    """The original scheme: one secret, compared on every request"""

    name = "shared_secret"

    def __init__(self, users: UserStore, settings: AuthSettings, secret: SharedSecretStore):
        super().__init__(users, settings)
        self.secret = secret

    def _principal(self) -> Principal:
        return Principal(username=self.settings.default_username, role=ROLE_SUPERADMIN)

    def authenticate(self, credentials: Credentials) -> Principal:
        if not self.secret.verify(credentials.admin_pass):
            raise ForbiddenError("Incorrect password")
        return self._principal()

    def login(self, username: str, password: str) -> LoginResult:
        if not self.secret.verify(password):
            raise AuthenticationError("Incorrect password")
        principal = self._principal()
        return LoginResult(username=principal.username, role=principal.role)

    def change_own_password(self, principal: Principal, current: str, new: str) -> None:
        self.secret.change(current, new)


class CredentialedAuthenticator(Authenticator):
    """Username and password sent as headers with every request"""

    name = "credentialed"

    def authenticate(self, credentials: Credentials) -> Principal:
        user = self._check_user(credentials.username, credentials.password)
        return Principal(username=user.username, role=user.role)

    def login(self, username: str, password: str) -> LoginResult:
        user = self._check_user(username, password)
        return LoginResult(username=user.username, role=user.role)


class TokenSessionAuthenticator(Authenticator):
    """Login issues a session token; later requests present the token"""

    name = "token"

    def __init__(self, users: UserStore, settings: AuthSettings, sessions: SessionStore):
        super().__init__(users, settings)
        self.sessions = sessions

    def authenticate(self, credentials: Credentials) -> Principal:
        if not credentials.token:
            raise AuthenticationError("Not authenticated")
        session = self.sessions.validate(credentials.token)
        if session is None:
            raise AuthenticationError("Invalid session")
        return Principal(username=session.username, role=session.role, token=session.token)

    def login(self, username: str, password: str) -> LoginResult:
        user = self._check_user(username, password)
        session = self.sessions.create(user)
        return LoginResult(username=user.username, role=user.role, token=session.token)

    def logout(self, credentials: Credentials) -> None:
        self.sessions.destroy(credentials.token)


def create_authenticator(
    settings: AuthSettings,
    users: UserStore,
    sessions: SessionStore,
    secret: SharedSecretStore,
) -> Authenticator:
    """Build the authenticator selected by AUTH_STRATEGY"""
    if settings.strategy == "shared_secret":
        return SharedSecretAuthenticator(users, settings, secret)
    if settings.strategy == "credentialed":
        return CredentialedAuthenticator(users, settings)
    if settings.strategy == "token":
        return TokenSessionAuthenticator(users, settings, sessions)
    raise ConfigError(f"Unknown auth strategy: {settings.strategy}")
