"""
User storage service.
Handles admin account CRUD and creates the default superadmin on first run.

Older deployments wrote users.json with a plaintext "password", short role
names and no timestamps; those records are upgraded in place on startup.
"""

import uuid
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..auth.passwords import hash_password, verify_password
from ..models.content import now_ms
from ..models.user import ROLE_ADMIN, ROLE_SUPERADMIN, User
from ..storage.base import Repository
from ..utils.config import AuthSettings
from ..utils.exceptions import ConflictError, NotFoundError, ValidationError
from ..utils.logger import get_logger

logger = get_logger(__name__)

USERS = "users"
VALID_ROLES = (ROLE_SUPERADMIN, ROLE_ADMIN)


class UserStore:
    """Admin accounts persisted in the "users" collection"""

    def __init__(self, repository: Repository, settings: AuthSettings):
        self.repository = repository
        self.settings = settings

    def _parse(self, record: Dict[str, Any]) -> Optional[User]:
        try:
            return User.model_validate(record)
        except PydanticValidationError as e:
            logger.warning("Skipping invalid user record", record_id=record.get("id"), error=str(e))
            return None

    def load_users(self) -> List[User]:
        users = []
        for record in self.repository.list(USERS):
            user = self._parse(record)
            if user is not None:
                users.append(user)
        return users

    def find_by_username(self, username: str) -> Optional[User]:
        record = self.repository.find_one(USERS, username=username)
        return self._parse(record) if record else None

    def get(self, username: str) -> User:
        user = self.find_by_username(username)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def verify_credentials(self, username: str, password: str) -> Optional[User]:
        """Return the user if the password matches, else None"""
        user = self.find_by_username(username)
        if user is None or not verify_password(password, user.password_hash):
            return None
        return user

    def _check_password(self, password: Optional[str]) -> None:
        minimum = self.settings.min_password_length
        if not password or len(password) < minimum:
            raise ValidationError(f"Password must be at least {minimum} characters")

    def create_user(
        self,
        username: str,
        password: str,
        role: str = ROLE_ADMIN,
        created_by: Optional[str] = None,
        enforce_policy: bool = True,
    ) -> User:
        """Create a new admin account"""
        username = (username or "").strip()
        if not username:
            raise ValidationError("Username is required")
        if role not in VALID_ROLES:
            raise ValidationError(f"Role must be one of: {', '.join(VALID_ROLES)}")
        if enforce_policy:
            self._check_password(password)
        elif not password:
            raise ValidationError("Password is required")

        if self.repository.find_one(USERS, username=username):
            raise ConflictError(f"Username '{username}' already exists")

        user = User(
            id=str(uuid.uuid4()),
            username=username,
            password_hash=hash_password(password, self.settings.bcrypt_rounds),
            role=role,
            created_at=now_ms(),
            created_by=created_by,
        )
        # The lookup above only skips hashing for obvious duplicates
        if self.repository.insert_unique(USERS, user.to_record(), "username") is None:
            raise ConflictError(f"Username '{username}' already exists")

        logger.info("User created", username=username, role=role, created_by=created_by)
        return user

    def set_password(self, username: str, new_password: str) -> User:
        """Replace a user's password hash"""
        self._check_password(new_password)
        user = self.get(username)
        new_hash = hash_password(new_password, self.settings.bcrypt_rounds)

        def mutate(record):
            record["passwordHash"] = new_hash
            return record

        updated = self.repository.update(USERS, user.id, mutate)
        if updated is None:
            raise NotFoundError("User not found")
        logger.info("Password changed", username=username)
        return User.model_validate(updated)

    def delete_user(self, username: str) -> User:
        """Delete a user; the last superadmin is protected"""
        user = self.get(username)
        if user.role == ROLE_SUPERADMIN:
            superadmins = [u for u in self.load_users() if u.role == ROLE_SUPERADMIN]
            if len(superadmins) <= 1:
                raise ValidationError("Cannot delete the last superadmin")

        self.repository.delete(USERS, user.id)
        logger.info("User deleted", username=username)
        return user

    def migrate_legacy_records(self) -> int:
        """Hash plaintext passwords and fill in missing timestamps"""
        migrated = 0
        for record in self.repository.list(USERS):
            plaintext = record.get("password")
            needs_hash = not record.get("passwordHash") and isinstance(plaintext, str) and plaintext
            if not needs_hash and "password" not in record and record.get("createdAt") is not None:
                continue

            def mutate(current):
                secret = current.pop("password", None)
                if not current.get("passwordHash") and isinstance(secret, str) and secret:
                    current["passwordHash"] = hash_password(secret, self.settings.bcrypt_rounds)
                if current.get("createdAt") is None:
                    current["createdAt"] = now_ms()
                return current

            if self.repository.update(USERS, record["id"], mutate) is not None:
                migrated += 1

        if migrated:
            logger.info("Upgraded legacy user records", count=migrated)
        return migrated

    def ensure_default_superadmin(self) -> Optional[User]:
        """Create the default superadmin unless a valid one already exists"""
        if any(u.role == ROLE_SUPERADMIN for u in self.load_users()):
            return None

        username = self.settings.default_username
        if self.repository.find_one(USERS, username=username):
            logger.warning(
                "No superadmin available and the default username is taken",
                username=username,
            )
            return None

        user = self.create_user(
            username,
            self.settings.admin_pass,
            role=ROLE_SUPERADMIN,
            enforce_policy=False,
        )
        logger.info("Created default superadmin", username=user.username)
        return user
