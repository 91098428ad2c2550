"""
Configuration management with schema validation.

Settings come from three layers, later ones winning:
    1. defaults declared on the models below
    2. an optional settings.yaml (values may use ${VAR} or ${VAR:default})
    3. environment variables (a .env file is loaded first when present)
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from .exceptions import ConfigError

# Load environment variables
load_dotenv()

SETTINGS_FILE = Path(os.getenv("SETTINGS_FILE", "settings.yaml"))


class AppSettings(BaseModel):
    name: str = "Minbar"
    version: str = "1.0.0"
    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = 4000
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    liveness_message: str = "Minbar server is running"


class StorageSettings(BaseModel):
    backend: Literal["json", "sqlite"] = "json"
    data_dir: str = "."
    database_path: str = "minbar.db"


class AuthSettings(BaseModel):
    strategy: Literal["shared_secret", "credentialed", "token"] = "shared_secret"
    admin_pass: str = "sayaf1820"
    default_username: str = "admin"
    min_password_length: int = 6
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)


class MediaSettings(BaseModel):
    cloudinary_url: Optional[str] = None
    cloud_name: Optional[str] = None
    api_key: Optional[str] = None
    api_secret: Optional[str] = None
    folder: str = "minbar"
    max_upload_bytes: int = 100 * 1024 * 1024

    @property
    def is_configured(self) -> bool:
        return bool(self.cloudinary_url or (self.cloud_name and self.api_key and self.api_secret))


class FeedSettings(BaseModel):
    base_url: str = "https://www.youtube.com/feeds/videos.xml"
    timeout_seconds: float = 10.0


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "console"
    file_path: Optional[str] = None
    max_bytes: int = 10485760
    backup_count: int = 5


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    media: MediaSettings = Field(default_factory=MediaSettings)
    feed: FeedSettings = Field(default_factory=FeedSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# Environment variable -> (section, field)
ENV_OVERRIDES = {
    "ENVIRONMENT": ("app", "environment"),
    "HOST": ("app", "host"),
    "PORT": ("app", "port"),
    "CORS_ORIGINS": ("app", "cors_origins"),
    "STORAGE_BACKEND": ("storage", "backend"),
    "DATA_DIR": ("storage", "data_dir"),
    "DATABASE_PATH": ("storage", "database_path"),
    "AUTH_STRATEGY": ("auth", "strategy"),
    "ADMIN_PASS": ("auth", "admin_pass"),
    "AUTH_DEFAULT_USERNAME": ("auth", "default_username"),
    "AUTH_MIN_PASSWORD_LENGTH": ("auth", "min_password_length"),
    "BCRYPT_ROUNDS": ("auth", "bcrypt_rounds"),
    "CLOUDINARY_URL": ("media", "cloudinary_url"),
    "CLOUDINARY_CLOUD_NAME": ("media", "cloud_name"),
    "CLOUDINARY_API_KEY": ("media", "api_key"),
    "CLOUDINARY_API_SECRET": ("media", "api_secret"),
    "MEDIA_FOLDER": ("media", "folder"),
    "MEDIA_MAX_UPLOAD_BYTES": ("media", "max_upload_bytes"),
    "FEED_TIMEOUT_SECONDS": ("feed", "timeout_seconds"),
    "LOG_LEVEL": ("logging", "level"),
    "LOG_FORMAT": ("logging", "format"),
    "LOG_FILE": ("logging", "file_path"),
}


def _substitute_env_vars(value: Any) -> Any:
    """Recursively substitute ${VAR} and ${VAR:default} references"""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            var_expr = value[2:-1]
            if ":" in var_expr:
                var_name, default = var_expr.split(":", 1)
                return os.getenv(var_name.strip(), default.strip())
            return os.getenv(var_expr, value)
    elif isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_substitute_env_vars(item) for item in value]
    return value


def _apply_env_overrides(data: Dict[str, Any], environ: Dict[str, str]) -> Dict[str, Any]:
    for var_name, (section, field) in ENV_OVERRIDES.items():
        raw = environ.get(var_name)
        if raw is None or raw == "":
            continue
        value: Any = raw
        if field == "cors_origins":
            value = [origin.strip() for origin in raw.split(",") if origin.strip()]
        data.setdefault(section, {})[field] = value
    return data


def load_settings(
    settings_path: Optional[Path] = None,
    environ: Optional[Dict[str, str]] = None,
) -> Settings:
    """Build Settings from settings.yaml (if present) and the environment"""
    path = settings_path or SETTINGS_FILE
    environ = dict(os.environ) if environ is None else environ

    data: Dict[str, Any] = {}
    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to read settings from {path}: {e}")
        if not isinstance(raw_data, dict):
            raise ConfigError(f"Settings file {path} must contain a mapping")
        data = _substitute_env_vars(raw_data)

    data = _apply_env_overrides(data, environ)

    try:
        return Settings(**data)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid settings: {e}")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached process-wide settings"""
    return load_settings()
