# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""dashauth: account backend for the weather dashboard.

Register an account, log in, and check a session token. Users live in a
single YAML file; passwords are hashed with argon2 and sessions are
stateless signed tokens.
"""

from __future__ import annotations

from typing import Any


def create_app(*args: Any, **kwargs: Any):
    """Build the FastAPI application (see :func:`dashauth.app.create_app`)."""
    from dashauth.app import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = ["create_app"]
