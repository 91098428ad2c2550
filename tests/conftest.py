import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Make the project root importable when running plain `pytest`
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from minbar.utils.config import AuthSettings, MediaSettings, Settings, StorageSettings  # noqa: E402

ADMIN_PASS = "test-secret-1820"


@pytest.fixture
def make_settings(tmp_path):
    """Factory for isolated settings: data under tmp_path, fast bcrypt"""
    def _make(strategy="shared_secret", backend="json", media=None, **auth):
        return Settings(
            storage=StorageSettings(
                backend=backend,
                data_dir=str(tmp_path / "data"),
                database_path=str(tmp_path / "minbar.db"),
            ),
            auth=AuthSettings(strategy=strategy, admin_pass=ADMIN_PASS, bcrypt_rounds=4, **auth),
            media=media or MediaSettings(),
        )

    return _make


@pytest.fixture
def make_client(make_settings):
    """Factory for a TestClient around a freshly created app"""
    def _make(**kwargs) -> TestClient:
        from web.main import create_app
        return TestClient(create_app(make_settings(**kwargs)))

    return _make


@pytest.fixture(params=["json", "sqlite"])
def client(request, make_client):
    """Default deployment (shared admin secret) on each storage backend"""
    return make_client(backend=request.param)


@pytest.fixture
def token_client(make_client):
    return make_client(strategy="token")


@pytest.fixture
def admin_headers():
    return {"x-admin-pass": ADMIN_PASS}


@pytest.fixture
def admin_pass():
    return ADMIN_PASS
