"""Persistence adapters behind a single Repository interface"""

from pathlib import Path

from .base import Record, Repository
from .json_store import JsonFileRepository
from .sqlite_store import SqliteRepository
from ..utils.config import StorageSettings
from ..utils.exceptions import ConfigError


def create_repository(settings: StorageSettings) -> Repository:
    """Build the repository selected by STORAGE_BACKEND"""
    if settings.backend == "json":
        return JsonFileRepository(Path(settings.data_dir))
    if settings.backend == "sqlite":
        return SqliteRepository(Path(settings.database_path))
    raise ConfigError(f"Unknown storage backend: {settings.backend}")


__all__ = [
    "Record",
    "Repository",
    "JsonFileRepository",
    "SqliteRepository",
    "create_repository",
]
