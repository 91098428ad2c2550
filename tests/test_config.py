import pytest

from minbar.utils.config import Settings, load_settings
from minbar.utils.exceptions import ConfigError


def test_defaults_without_file(tmp_path):
    settings = load_settings(tmp_path / "missing.yaml", environ={})
    assert settings == Settings()
    assert settings.app.port == 4000
    assert settings.auth.strategy == "shared_secret"
    assert settings.storage.backend == "json"
    assert settings.media.is_configured is False


def test_yaml_with_substitution(tmp_path, monkeypatch):
    monkeypatch.setenv("MINBAR_TEST_DIR", "/srv/minbar")
    path = tmp_path / "settings.yaml"
    path.write_text(
        "app:\n"
        "  port: 5000\n"
        "storage:\n"
        "  backend: sqlite\n"
        "  data_dir: ${MINBAR_TEST_DIR}\n"
        "  database_path: ${MINBAR_TEST_DB:content.db}\n",
        encoding="utf-8",
    )
    settings = load_settings(path, environ={})
    assert settings.app.port == 5000
    assert settings.storage.backend == "sqlite"
    assert settings.storage.data_dir == "/srv/minbar"
    assert settings.storage.database_path == "content.db"


def test_environment_wins_over_file(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("app:\n  port: 5000\nauth:\n  strategy: credentialed\n", encoding="utf-8")
    settings = load_settings(path, environ={
        "PORT": "8080",
        "AUTH_STRATEGY": "token",
        "ADMIN_PASS": "from-env",
        "CORS_ORIGINS": "https://a.example, https://b.example",
        "CLOUDINARY_URL": "cloudinary://k:s@cloud",
        "LOG_LEVEL": "",
    })
    assert settings.app.port == 8080
    assert settings.auth.strategy == "token"
    assert settings.auth.admin_pass == "from-env"
    assert settings.app.cors_origins == ["https://a.example", "https://b.example"]
    assert settings.media.is_configured is True
    assert settings.logging.level == "INFO"


@pytest.mark.parametrize("environ", [
    {"AUTH_STRATEGY": "oauth"},
    {"PORT": "not-a-port"},
    {"BCRYPT_ROUNDS": "2"},
])
def test_invalid_values_raise(tmp_path, environ):
    with pytest.raises(ConfigError):
        load_settings(tmp_path / "missing.yaml", environ=environ)


def test_non_mapping_file(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_settings(path, environ={})
