"""User and session data models for authentication"""

from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


ROLE_SUPERADMIN = "superadmin"
ROLE_ADMIN = "admin"

# Role names written by older deployments
LEGACY_ROLES = {"super": ROLE_SUPERADMIN, "mod": ROLE_ADMIN}


def normalize_role(role: Any) -> Any:
    if isinstance(role, str):
        return LEGACY_ROLES.get(role, role)
    return role


class User(BaseModel):
    """Admin account; only superadmin and admin exist"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    username: str
    password_hash: str
    role: Literal["superadmin", "admin"] = ROLE_ADMIN
    created_at: int
    created_by: Optional[str] = None

    @field_validator("role", mode="before")
    @classmethod
    def normalize_legacy_role(cls, value: Any) -> Any:
        return normalize_role(value)

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)

    def to_public(self) -> Dict[str, Any]:
        """Serializable view without the password hash"""
        return self.model_dump(by_alias=True, exclude={"password_hash"}, exclude_none=True)


class Session(BaseModel):
    """Opaque bearer token; never expires, removed only on logout"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    token: str = Field(alias="id")
    username: str
    role: Literal["superadmin", "admin"]
    created_at: int

    @field_validator("role", mode="before")
    @classmethod
    def normalize_legacy_role(cls, value: Any) -> Any:
        return normalize_role(value)

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


@dataclass(frozen=True)
class Principal:
    """The authenticated caller attached to a request"""

    username: str
    role: str
    token: Optional[str] = None

    @property
    def is_superadmin(self) -> bool:
        return self.role == ROLE_SUPERADMIN
