# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy shared by the store, the token service and the auth flows.

Subclasses of :class:`AuthServiceError` are expected outcomes of a request
and carry the HTTP status they map to. :class:`TokenInvalid` and
:class:`StorageCorrupt` are internal: the first is translated by the auth
flows, the second is never caught and fails the request.
"""

from __future__ import annotations


class AuthServiceError(Exception):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AuthServiceError):
    status_code = 400


class ConflictError(AuthServiceError):
    status_code = 409


class AuthError(AuthServiceError):
    status_code = 401


class Unauthorized(AuthServiceError):
    status_code = 401


class TokenInvalid(Exception):
    """Bad signature, malformed payload or expired token."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class StorageCorrupt(Exception):
    """The users file exists but cannot be read as a valid store."""
