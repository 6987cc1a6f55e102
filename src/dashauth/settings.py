# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Runtime configuration, read from the environment once per app."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Tuple

from dashauth.auth.tokens import DEFAULT_MAX_AGE_SECONDS

# Anchor the default users file to the project root, not the working directory.
BASE_DIR = Path(__file__).resolve().parents[2]
DEFAULT_USERS_PATH = BASE_DIR / "data" / "users.yml"

# Demo-only signing key. Anyone who knows it can mint tokens.
INSECURE_DEFAULT_SECRET = "weather-dashboard-secret-change-in-production"


def _env_flag(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _split_csv(value: str) -> Tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 3001
    secret_key: str = INSECURE_DEFAULT_SECRET
    users_path: Path = DEFAULT_USERS_PATH
    token_max_age: int = DEFAULT_MAX_AGE_SECONDS
    cors_origins: Tuple[str, ...] = field(default_factory=lambda: ("*",))
    log_level: str = "INFO"
    reload: bool = False

    @property
    def using_default_secret(self) -> bool:
        return self.secret_key == INSECURE_DEFAULT_SECRET

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        port = env.get("DASHAUTH_PORT") or env.get("PORT") or "3001"
        secret = env.get("DASHAUTH_SECRET_KEY") or env.get("JWT_SECRET") or INSECURE_DEFAULT_SECRET
        users_path = env.get("DASHAUTH_USERS_PATH")
        origins = _split_csv(env.get("DASHAUTH_CORS_ORIGINS", "*")) or ("*",)

        return cls(
            host=env.get("DASHAUTH_HOST", "0.0.0.0"),
            port=int(port),
            secret_key=secret,
            users_path=Path(users_path).expanduser().resolve() if users_path else DEFAULT_USERS_PATH,
            token_max_age=int(env.get("DASHAUTH_TOKEN_MAX_AGE", str(DEFAULT_MAX_AGE_SECONDS))),
            cors_origins=origins,
            log_level=env.get("DASHAUTH_LOG_LEVEL", "INFO").strip().upper() or "INFO",
            reload=_env_flag(env.get("DASHAUTH_RELOAD")),
        )
