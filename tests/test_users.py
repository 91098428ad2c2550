"""Unit tests for the user store, sessions and password hashing"""

import json
import threading

import pytest

from minbar.auth.passwords import hash_password, verify_password
from minbar.auth.sessions import SessionStore
from minbar.models.user import User
from minbar.services.user_store import UserStore
from minbar.storage import JsonFileRepository, SqliteRepository
from minbar.utils.config import AuthSettings
from minbar.utils.exceptions import ConflictError, NotFoundError, ValidationError


@pytest.fixture
def repo(tmp_path):
    return JsonFileRepository(tmp_path)


@pytest.fixture
def users(repo):
    return UserStore(repo, AuthSettings(admin_pass="seed-secret", bcrypt_rounds=4))


def test_hash_and_verify():
    hashed = hash_password("s3cret!", rounds=4)
    assert hashed != "s3cret!"
    assert verify_password("s3cret!", hashed)
    assert not verify_password("other", hashed)
    assert not verify_password("", hashed)
    assert not verify_password("s3cret!", "not-a-bcrypt-hash")


def test_default_superadmin_only_on_empty_store(users):
    created = users.ensure_default_superadmin()
    assert created.username == "admin"
    assert created.role == "superadmin"
    assert users.verify_credentials("admin", "seed-secret") is not None

    assert users.ensure_default_superadmin() is None
    assert len(users.load_users()) == 1


def test_create_user_rules(users):
    users.create_user("editor", "editor-pass")
    with pytest.raises(ConflictError):
        users.create_user("editor", "another-pass")
    with pytest.raises(ValidationError):
        users.create_user("short", "123")
    with pytest.raises(ValidationError):
        users.create_user("bad-role", "valid-pass", role="moderator")
    with pytest.raises(ValidationError):
        users.create_user("  ", "valid-pass")


def test_password_is_stored_hashed(users, repo):
    users.create_user("editor", "editor-pass")
    record = repo.find_one("users", username="editor")
    assert record["passwordHash"].startswith("$2")
    assert "editor-pass" not in record.values()


def test_last_superadmin_is_protected(users):
    users.ensure_default_superadmin()
    with pytest.raises(ValidationError):
        users.delete_user("admin")

    users.create_user("second", "second-pass", role="superadmin")
    users.delete_user("admin")
    with pytest.raises(NotFoundError):
        users.get("admin")


def test_legacy_roles_are_normalized(repo, users):
    repo.insert("users", {
        "id": "u1",
        "username": "old-super",
        "passwordHash": hash_password("legacy-pass", rounds=4),
        "role": "super",
        "createdAt": 1,
    })
    repo.insert("users", {
        "id": "u2",
        "username": "old-mod",
        "passwordHash": hash_password("legacy-pass", rounds=4),
        "role": "mod",
        "createdAt": 2,
    })
    roles = {u.username: u.role for u in users.load_users()}
    assert roles == {"old-super": "superadmin", "old-mod": "admin"}


def test_user_public_view():
    user = User(id="u1", username="a", password_hash="h", role="admin", created_at=5)
    assert user.to_public() == {"id": "u1", "username": "a", "role": "admin", "createdAt": 5}


def test_sessions_lifecycle(repo, users):
    user = users.create_user("editor", "editor-pass")
    sessions = SessionStore(repo)

    first = sessions.create(user)
    second = sessions.create(user)
    assert first.token != second.token
    assert sessions.validate(first.token).username == "editor"

    assert sessions.destroy(first.token) is True
    assert sessions.destroy(first.token) is False
    assert sessions.validate(first.token) is None

    assert sessions.destroy_for_user("editor") == 1
    assert sessions.validate(second.token) is None
    assert sessions.validate(None) is None


@pytest.mark.parametrize("backend", ["json", "sqlite"])
def test_concurrent_creates_keep_usernames_unique(tmp_path, backend):
    if backend == "json":
        repo = JsonFileRepository(tmp_path / "data")
    else:
        repo = SqliteRepository(tmp_path / "minbar.db")
    store = UserStore(repo, AuthSettings(bcrypt_rounds=4))
    barrier = threading.Barrier(4)
    created, conflicts = [], []

    def worker():
        barrier.wait()
        try:
            created.append(store.create_user("editor", "editor-pass"))
        except ConflictError:
            conflicts.append(True)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(created) == 1
    assert len(conflicts) == 3
    assert [u.username for u in store.load_users()] == ["editor"]


class TestLegacyUsersFile:
    """users.json written by older versions: plaintext passwords, short roles"""

    def write_users(self, path, records):
        path.mkdir(parents=True, exist_ok=True)
        (path / "users.json").write_text(json.dumps(records), encoding="utf-8")

    def test_plaintext_records_are_hashed(self, tmp_path):
        self.write_users(tmp_path, [
            {"username": "admin", "password": "old-secret", "role": "super"},
            {"username": "helper", "password": "helper-pass", "role": "mod"},
        ])
        store = UserStore(JsonFileRepository(tmp_path), AuthSettings(bcrypt_rounds=4))

        assert store.migrate_legacy_records() == 2
        assert store.migrate_legacy_records() == 0

        on_disk = json.loads((tmp_path / "users.json").read_text(encoding="utf-8"))
        for record in on_disk:
            assert "password" not in record
            assert record["passwordHash"].startswith("$2")
            assert isinstance(record["createdAt"], int)

        admin = store.verify_credentials("admin", "old-secret")
        assert admin.role == "superadmin"
        assert store.verify_credentials("helper", "helper-pass").role == "admin"
        assert store.ensure_default_superadmin() is None

    def test_invalid_record_is_treated_as_absent(self, tmp_path):
        self.write_users(tmp_path, [{"username": "broken", "role": "admin"}])
        store = UserStore(JsonFileRepository(tmp_path), AuthSettings(bcrypt_rounds=4))

        assert store.find_by_username("broken") is None
        assert store.verify_credentials("broken", "anything") is None
        assert store.load_users() == []

    def test_default_superadmin_seeded_when_only_admins_exist(self, tmp_path):
        self.write_users(tmp_path, [{"username": "helper", "password": "helper-pass", "role": "mod"}])
        store = UserStore(JsonFileRepository(tmp_path), AuthSettings(admin_pass="seed-secret", bcrypt_rounds=4))
        store.migrate_legacy_records()

        seeded = store.ensure_default_superadmin()
        assert seeded.username == "admin"
        assert seeded.role == "superadmin"
        assert {u.username for u in store.load_users()} == {"admin", "helper"}
