# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Register, login and session check on top of the store, hasher and tokens."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional

from dashauth.auth.passwords import hash_password, verify_password
from dashauth.auth.tokens import TokenService
from dashauth.errors import AuthError, ConflictError, TokenInvalid, Unauthorized, ValidationError
from dashauth.infra.user_store import UserRecord, UserStore, normalize_email

logger = logging.getLogger(__name__)

PASSWORD_MIN_LENGTH = 6


def _new_user_id() -> str:
    return uuid.uuid4().hex


def _password_length(password: str) -> int:
    # UTF-16 code units, so a character outside the BMP counts as two.
    return len(password.encode("utf-16-le", "surrogatepass")) // 2


class AuthService:
    def __init__(self, store: UserStore, tokens: TokenService) -> None:
        self.store = store
        self.tokens = tokens

    def register(
        self,
        email: Optional[str],
        password: Optional[str],
        name: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create an account and return ``{"user": ..., "token": ...}``.

        Validation runs before any store access. The record is written only
        once the hash and the id are ready.
        """
        e = normalize_email(email)
        p = password or ""
        if not e or not p:
            raise ValidationError("Email and password are required.")
        if _password_length(p) < PASSWORD_MIN_LENGTH:
            raise ValidationError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters.")

        # Cheap check first so duplicates don't pay for a hash.
        if e in self.store.load():
            raise ConflictError("An account with this email already exists.")

        record = UserRecord(
            id=_new_user_id(),
            name=(name or "").strip() or e,
            email=e,
            password_hash=hash_password(p),
        )
        self.store.add(record)
        logger.info("Registered user %s (%s)", record.id, e)

        return {"user": record.public(), "token": self.tokens.issue(record.id, e)}

    def login(self, email: Optional[str], password: Optional[str]) -> Dict[str, Any]:
        e = normalize_email(email)
        p = password or ""
        if not e or not p:
            raise ValidationError("Email and password are required.")

        record = self.store.load().get(e)
        if record is None:
            logger.warning("Login attempt for unknown email %s", e)
            raise AuthError("No account with this email. Please register first.")
        if not verify_password(record.password_hash, p):
            logger.warning("Failed login attempt for %s", e)
            raise AuthError("Invalid email or password.")

        logger.info("User %s signed in", record.id)
        return {"user": record.public(), "token": self.tokens.issue(record.id, e)}

    def whoami(self, token: Optional[str]) -> Dict[str, Any]:
        if not token:
            raise Unauthorized("Unauthorized")
        try:
            claims = self.tokens.verify(token)
        except TokenInvalid as exc:
            raise Unauthorized("Invalid or expired token") from exc

        record = self.store.find_by_id(claims.user_id)
        if record is None:
            raise Unauthorized("User not found")
        return {"user": record.public()}
