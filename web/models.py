"""API request models for the content backend"""

from typing import Annotated, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel

from minbar.models.user import ROLE_ADMIN, normalize_role

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class ApiModel(BaseModel):
    """camelCase on the wire, unknown keys (e.g. a body "password") ignored"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class BookCreate(ApiModel):
    title: NonEmptyStr
    url: NonEmptyStr


class BookUpdate(ApiModel):
    title: Optional[str] = None
    url: Optional[str] = None


class TipCreate(ApiModel):
    text: str = ""
    image_url: Optional[str] = None


class TipUpdate(ApiModel):
    text: Optional[str] = None
    image_url: Optional[str] = None


class PostCreate(ApiModel):
    title: NonEmptyStr
    description: Optional[str] = None
    video_url: Optional[str] = None


class PostUpdate(ApiModel):
    title: Optional[str] = None
    description: Optional[str] = None
    video_url: Optional[str] = None


class LoginRequest(ApiModel):
    # Shared-secret deployments send only the password
    username: str = ""
    password: str


class ChangePasswordRequest(ApiModel):
    current_password: str
    new_password: str


class SetPasswordRequest(ApiModel):
    new_password: str


class CreateAdminRequest(ApiModel):
    username: NonEmptyStr
    password: str
    role: Literal["superadmin", "admin"] = ROLE_ADMIN

    @field_validator("role", mode="before")
    @classmethod
    def normalize_legacy_role(cls, value):
        return normalize_role(value)


class MaintenanceRequest(ApiModel):
    maintenance: bool = Field(..., description="Advisory flag read by the front-end")
