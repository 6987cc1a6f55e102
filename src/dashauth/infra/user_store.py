# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Credential store: normalized email -> user record.

The store is read and written as a whole snapshot. ``YamlUserStore`` keeps it
in a human-editable YAML file::

    version: 1
    users:
      someone@example.com:
        id: 3k9...
        name: Someone
        email: someone@example.com
        password_hash: $argon2id$...

A missing file is an empty store. A file that exists but does not parse, or
does not have this shape, raises :class:`StorageCorrupt`.
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, Optional

import yaml

from dashauth.errors import ConflictError, StorageCorrupt

logger = logging.getLogger(__name__)

STORE_VERSION = 1
_REQUIRED_FIELDS = ("id", "email", "password_hash")


@dataclass(frozen=True)
class UserRecord:
    id: str
    name: str
    email: str
    password_hash: str

    def public(self) -> Dict[str, str]:
        """The fields that may leave the server."""
        return {"id": self.id, "name": self.name, "email": self.email}


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


class UserStore:
    """Base class: ``load``/``save`` plus helpers built on top of them.

    Subclasses only implement the snapshot read and write.
    """

    def __init__(self) -> None:
        self._write_lock = threading.Lock()

    def load(self) -> Dict[str, UserRecord]:
        raise NotImplementedError

    def save(self, users: Dict[str, UserRecord]) -> None:
        raise NotImplementedError

    def add(self, record: UserRecord) -> None:
        """Insert ``record`` unless its email is already taken.

        The check and the write happen under a lock, so two registrations in
        the same process cannot both succeed. Other processes writing the same
        backing resource are not coordinated (last writer wins).
        """
        with self._write_lock:
            users = self.load()
            if record.email in users:
                raise ConflictError("An account with this email already exists.")
            users[record.email] = record
            self.save(users)

    def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        for record in self.load().values():
            if record.id == user_id:
                return record
        return None


class MemoryUserStore(UserStore):
    """Process-local store, handy for tests and throwaway instances."""

    def __init__(self, users: Optional[Dict[str, UserRecord]] = None) -> None:
        super().__init__()
        self._users: Dict[str, UserRecord] = dict(users or {})

    def load(self) -> Dict[str, UserRecord]:
        return dict(self._users)

    def save(self, users: Dict[str, UserRecord]) -> None:
        self._users = dict(users)


def _parse_users(raw: object, path: Path) -> Dict[str, UserRecord]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise StorageCorrupt(f"{path}: expected a mapping at the top level")
    if not raw:
        return {}

    # A non-empty file must be a versioned users file.
    if raw.get("version") != STORE_VERSION:
        raise StorageCorrupt(f"{path}: unsupported store version {raw.get('version')!r}")
    if "users" not in raw:
        raise StorageCorrupt(f"{path}: missing 'users' mapping")

    users = raw["users"]
    if users is None:
        return {}
    if not isinstance(users, dict):
        raise StorageCorrupt(f"{path}: 'users' must be a mapping")

    out: Dict[str, UserRecord] = {}
    for key, udata in users.items():
        if not isinstance(udata, dict):
            raise StorageCorrupt(f"{path}: entry '{key}' is not a mapping")
        missing = [f for f in _REQUIRED_FIELDS if not str(udata.get(f) or "").strip()]
        if missing:
            raise StorageCorrupt(f"{path}: entry '{key}' is missing {', '.join(missing)}")
        email = str(key)
        out[email] = UserRecord(
            id=str(udata["id"]),
            name=str(udata.get("name") or email),
            email=str(udata["email"]),
            password_hash=str(udata["password_hash"]),
        )
    return out


class YamlUserStore(UserStore):
    """Users file on disk, replaced atomically on every save."""

    def __init__(self, path: Path) -> None:
        super().__init__()
        self.path = Path(path)

    def load(self) -> Dict[str, UserRecord]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except UnicodeDecodeError as exc:
            raise StorageCorrupt(f"{self.path}: not valid UTF-8 ({exc})") from exc
        try:
            raw = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise StorageCorrupt(f"{self.path}: {exc}") from exc
        return _parse_users(raw, self.path)

    def save(self, users: Dict[str, UserRecord]) -> None:
        raw = {
            "version": STORE_VERSION,
            "users": {email: asdict(record) for email, record in users.items()},
        }
        body = yaml.safe_dump(raw, sort_keys=False, allow_unicode=True)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(body)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Wrote %d user(s) to %s", len(users), self.path)
