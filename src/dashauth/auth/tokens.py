# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Stateless bearer tokens.

A token is an itsdangerous timed signature over ``{"uid", "email"}``. The
signer embeds the issue timestamp, so the expiry is ``issued_at + max_age``
and nothing is kept server-side.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from itsdangerous import BadData, SignatureExpired, URLSafeTimedSerializer

from dashauth.errors import TokenInvalid

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE_SECONDS = 7 * 24 * 3600  # 7 days
DEFAULT_SALT = "dashauth.token.v1"


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    email: str
    issued_at: datetime
    expires_at: datetime


class TokenService:
    """Issue and verify signed, time-limited bearer tokens."""

    def __init__(
        self,
        secret: str,
        *,
        max_age: int = DEFAULT_MAX_AGE_SECONDS,
        salt: str = DEFAULT_SALT,
    ) -> None:
        if not secret:
            raise ValueError("A signing secret is required")
        if max_age <= 0:
            raise ValueError("max_age must be positive")
        self._serializer = URLSafeTimedSerializer(secret_key=secret, salt=salt)
        self._max_age = max_age

    @property
    def max_age(self) -> int:
        return self._max_age

    def issue(self, user_id: str, email: str) -> str:
        return self._serializer.dumps({"uid": user_id, "email": email})

    def verify(self, token: str) -> TokenClaims:
        """Return the claims of a valid token.

        Raises :class:`TokenInvalid` for a bad signature, a malformed token or
        an expired one. The reason is only logged; callers should report all
        of them the same way.
        """
        if not token:
            raise TokenInvalid("empty token")
        try:
            data, issued_at = self._serializer.loads(
                token, max_age=self._max_age, return_timestamp=True
            )
        except SignatureExpired as exc:
            logger.debug("Rejected expired token: %s", exc)
            raise TokenInvalid("expired") from exc
        except BadData as exc:
            logger.debug("Rejected token with bad signature or payload: %s", exc)
            raise TokenInvalid("bad signature") from exc

        if not isinstance(data, dict):
            raise TokenInvalid("malformed claims")
        user_id = str(data.get("uid") or "").strip()
        email = str(data.get("email") or "").strip()
        if not user_id or not email:
            logger.debug("Rejected token with missing claims")
            raise TokenInvalid("malformed claims")

        return TokenClaims(
            user_id=user_id,
            email=email,
            issued_at=issued_at,
            expires_at=issued_at + timedelta(seconds=self._max_age),
        )
