#!/usr/bin/env python3
from __future__ import annotations

from getpass import getpass

from dashauth.auth.tokens import TokenService
from dashauth.errors import AuthServiceError
from dashauth.infra.user_store import YamlUserStore
from dashauth.services.auth_service import AuthService
from dashauth.settings import Settings


def main() -> None:
    settings = Settings.from_env()
    service = AuthService(
        YamlUserStore(settings.users_path),
        TokenService(settings.secret_key, max_age=settings.token_max_age),
    )

    name = input("Name (optional): ").strip()
    email = input("Email: ").strip()

    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        raise SystemExit("Passwords do not match")

    try:
        result = service.register(email=email, password=pw1, name=name)
    except AuthServiceError as exc:
        raise SystemExit(exc.message) from exc

    user = result["user"]
    print(f"OK -> {user['email']} (id {user['id']}) in {settings.users_path}")


if __name__ == "__main__":
    main()
