from pathlib import Path

import pytest
import yaml

from dashauth.auth.tokens import TokenService
from dashauth.errors import ConflictError, StorageCorrupt
from dashauth.infra.user_store import MemoryUserStore, UserRecord, YamlUserStore, normalize_email
from dashauth.services.auth_service import AuthService


def _record(email="ana@example.com", uid="u1"):
    return UserRecord(id=uid, name="Ana", email=email, password_hash="$argon2id$fake")


def test_missing_file_is_an_empty_store(yaml_store):
    assert not yaml_store.path.exists()
    assert yaml_store.load() == {}


def test_save_then_load_keeps_records(yaml_store):
    rec = _record()
    yaml_store.save({rec.email: rec})

    assert yaml_store.path.exists()
    assert yaml_store.load() == {rec.email: rec}


def test_file_is_human_readable_yaml(yaml_store):
    rec = _record()
    yaml_store.save({rec.email: rec})

    raw = yaml.safe_load(yaml_store.path.read_text(encoding="utf-8"))
    assert raw["version"] == 1
    assert raw["users"]["ana@example.com"]["password_hash"] == "$argon2id$fake"


def test_save_leaves_no_temp_files(yaml_store):
    yaml_store.save({"ana@example.com": _record()})
    yaml_store.save({})
    assert [p.name for p in yaml_store.path.parent.iterdir()] == ["users.yml"]


@pytest.mark.parametrize(
    "content",
    [
        "users: [unclosed",
        "- just\n- a list\n",
        "version: 1\nusers: 42\n",
        "version: 1\nusers:\n  a@b.com: nope\n",
        "version: 1\nusers:\n  a@b.com:\n    name: A\n    email: a@b.com\n",
        "a@b.com:\n  id: x1\n  email: a@b.com\n  passwordHash: h\n",
        "version: 1\n",
        "version: 2\nusers: {}\n",
        "users:\n  a@b.com:\n    id: x1\n    email: a@b.com\n    password_hash: h\n",
    ],
)
def test_malformed_content_raises_storage_corrupt(users_path: Path, content):
    users_path.parent.mkdir(parents=True)
    users_path.write_text(content, encoding="utf-8")

    with pytest.raises(StorageCorrupt):
        YamlUserStore(users_path).load()


def test_empty_file_is_an_empty_store(users_path: Path):
    users_path.parent.mkdir(parents=True)
    users_path.write_text("", encoding="utf-8")
    assert YamlUserStore(users_path).load() == {}


def test_non_utf8_file_raises_storage_corrupt(users_path: Path):
    users_path.parent.mkdir(parents=True)
    users_path.write_bytes(b"users:\n  \xff\xfe: 1\n")

    with pytest.raises(StorageCorrupt):
        YamlUserStore(users_path).load()


@pytest.mark.parametrize("content", ["{}\n", "null\n", "version: 1\nusers:\n"])
def test_empty_shapes_are_an_empty_store(users_path: Path, content):
    users_path.parent.mkdir(parents=True)
    users_path.write_text(content, encoding="utf-8")
    assert YamlUserStore(users_path).load() == {}


def test_register_does_not_overwrite_a_foreign_layout(users_path: Path):
    flat = "a@b.com:\n  id: x1\n  name: A\n  email: a@b.com\n  passwordHash: h\n"
    users_path.parent.mkdir(parents=True)
    users_path.write_text(flat, encoding="utf-8")
    service = AuthService(YamlUserStore(users_path), TokenService("k"))

    with pytest.raises(StorageCorrupt):
        service.register(email="c@d.com", password="secret1")
    assert users_path.read_text(encoding="utf-8") == flat


def test_add_rejects_existing_email():
    store = MemoryUserStore()
    store.add(_record(uid="u1"))

    with pytest.raises(ConflictError):
        store.add(_record(uid="u2"))
    assert store.load()["ana@example.com"].id == "u1"


def test_find_by_id_scans_records(yaml_store):
    yaml_store.add(_record("a@x.com", "id-a"))
    yaml_store.add(_record("b@x.com", "id-b"))

    assert yaml_store.find_by_id("id-b").email == "b@x.com"
    assert yaml_store.find_by_id("missing") is None


def test_public_view_hides_hash():
    assert _record().public() == {"id": "u1", "name": "Ana", "email": "ana@example.com"}


def test_normalize_email():
    assert normalize_email("  A@B.com ") == "a@b.com"
    assert normalize_email(None) == ""
