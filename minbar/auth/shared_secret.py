"""
Single shared admin secret.

Until the secret is changed through the API, candidates are compared
(timing-safe) with the ADMIN_PASS setting. Once changed, only a bcrypt
hash is stored, in the "admin" collection. A plaintext secret left by an
older version is hashed the first time it is read.
"""

import hmac
from typing import Any, Dict, Optional

from .passwords import hash_password, verify_password
from ..models.content import now_ms
from ..storage.base import Repository
from ..utils.config import AuthSettings
from ..utils.exceptions import AuthenticationError, ValidationError
from ..utils.logger import get_logger

logger = get_logger(__name__)

ADMIN = "admin"
SECRET_ID = "admin"


class SharedSecretStore:
    def __init__(self, repository: Repository, settings: AuthSettings):
        self.repository = repository
        self.settings = settings

    def _stored_record(self) -> Optional[Dict[str, Any]]:
        record = self.repository.get(ADMIN, SECRET_ID)
        if record is not None:
            return record
        # Older side files hold one unnamed record
        return next(iter(self.repository.list(ADMIN)), None)

    def _stored_hash(self) -> Optional[str]:
        record = self._stored_record()
        if record is None:
            return None
        if record.get("passwordHash"):
            return record["passwordHash"]

        plaintext = record.get("password")
        if not isinstance(plaintext, str) or not plaintext:
            return None
        password_hash = self._store(plaintext)
        if record.get("id") != SECRET_ID:
            self.repository.delete(ADMIN, record["id"])
        logger.info("Upgraded plaintext admin secret to a hash")
        return password_hash

    def _store(self, secret: str) -> str:
        password_hash = hash_password(secret, self.settings.bcrypt_rounds)
        self.repository.upsert(ADMIN, {
            "id": SECRET_ID,
            "passwordHash": password_hash,
            "updatedAt": now_ms(),
        })
        return password_hash

    def verify(self, candidate: Optional[str]) -> bool:
        if not candidate:
            return False
        stored = self._stored_hash()
        if stored:
            return verify_password(candidate, stored)
        return hmac.compare_digest(candidate.encode("utf-8"), self.settings.admin_pass.encode("utf-8"))

    def change(self, current: str, new: str) -> None:
        """Overwrite the secret once the current one is confirmed"""
        if not self.verify(current):
            raise AuthenticationError("Current password is incorrect")
        minimum = self.settings.min_password_length
        if not new or len(new) < minimum:
            raise ValidationError(f"Password must be at least {minimum} characters")

        self._store(new)
        logger.info("Shared admin secret changed")
