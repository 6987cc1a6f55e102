# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authentication primitives.

This package provides:
- Password hashing/verification (argon2)
- Signed, time-limited bearer tokens (itsdangerous)
"""
