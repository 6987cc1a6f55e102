import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from dashauth.app import create_app
from dashauth.auth.tokens import TokenService
from dashauth.infra.user_store import MemoryUserStore, YamlUserStore
from dashauth.services.auth_service import AuthService
from dashauth.settings import Settings

TEST_SECRET = "tests-secret-key"


@pytest.fixture()
def users_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "users.yml"


@pytest.fixture()
def settings(users_path: Path) -> Settings:
    return Settings(secret_key=TEST_SECRET, users_path=users_path)


@pytest.fixture()
def tokens() -> TokenService:
    return TokenService(TEST_SECRET)


@pytest.fixture()
def service(tokens: TokenService) -> AuthService:
    return AuthService(MemoryUserStore(), tokens)


@pytest.fixture()
def client(settings: Settings) -> TestClient:
    with TestClient(create_app(settings)) as c:
        yield c


@pytest.fixture()
def yaml_store(users_path: Path) -> YamlUserStore:
    return YamlUserStore(users_path)
