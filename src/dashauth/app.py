# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from dashauth.auth.tokens import TokenService
from dashauth.errors import AuthServiceError
from dashauth.infra.user_store import UserStore, YamlUserStore
from dashauth.services.auth_service import AuthService
from dashauth.settings import Settings

logger = logging.getLogger(__name__)

_bearer = HTTPBearer(auto_error=False)


class RegisterBody(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginBody(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth


def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[UserStore] = None,
    tokens: Optional[TokenService] = None,
) -> FastAPI:
    """Create the API application.

    ``store`` and ``tokens`` default to the YAML users file and a token service
    keyed with ``settings.secret_key``.
    """
    if settings is None:
        settings = Settings.from_env()
    if settings.using_default_secret:
        logger.warning(
            "Using the built-in token secret; set DASHAUTH_SECRET_KEY outside of demos"
        )
    if store is None:
        store = YamlUserStore(settings.users_path)
    if tokens is None:
        tokens = TokenService(settings.secret_key, max_age=settings.token_max_age)

    app = FastAPI(title="Weather Dashboard Auth", docs_url=None, redoc_url=None)
    app.state.settings = settings
    app.state.auth = AuthService(store, tokens)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.exception_handler(AuthServiceError)
    async def _auth_error(request: Request, exc: AuthServiceError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def _bad_body(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": "Invalid request body."})

    # ------------------ Routes ------------------

    @app.post("/api/register", status_code=201)
    def register(body: Optional[RegisterBody] = None, auth: AuthService = Depends(get_auth_service)):
        body = body or RegisterBody()
        return auth.register(email=body.email, password=body.password, name=body.name)

    @app.post("/api/login")
    def login(body: Optional[LoginBody] = None, auth: AuthService = Depends(get_auth_service)):
        body = body or LoginBody()
        return auth.login(email=body.email, password=body.password)

    @app.get("/api/me")
    def me(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
        auth: AuthService = Depends(get_auth_service),
    ):
        token = credentials.credentials if credentials is not None else None
        return auth.whoami(token)

    @app.get("/api/health")
    def health():
        return {"ok": True}

    return app
