from __future__ import annotations

from typing import Any, Dict

import pytest
from starlette.testclient import TestClient

from intranet_platform.api.server import create_app
from intranet_platform.config import Config
from intranet_platform.db import init_db

ADMIN_NAME = "admin"
ADMIN_PASSWORD = "Admin1234"
TEST_SECRET = "test-secret-0123456789abcdef0123456789abcdef"


@pytest.fixture
def cfg(tmp_path) -> Config:
    return Config(
        DB_DSN=str(tmp_path / "intranet-test.sqlite"),
        AUTH_JWT_SECRET=TEST_SECRET,
        AUTH_BOOTSTRAP_ADMIN_NAME=ADMIN_NAME,
        AUTH_BOOTSTRAP_ADMIN_PASSWORD=ADMIN_PASSWORD,
    )


@pytest.fixture
def db(cfg: Config) -> Config:
    """A config whose database schema already exists."""
    init_db(cfg.DB_DSN)
    return cfg


@pytest.fixture
def build_app(cfg: Config):
    def _build(**overrides: Any):
        c = Config(**{**cfg.__dict__, **overrides}) if overrides else cfg
        return create_app(c)

    return _build


@pytest.fixture
def client(build_app):
    with TestClient(build_app()) as c:
        yield c


def login(client: TestClient, name: str = ADMIN_NAME, password: str = ADMIN_PASSWORD) -> Dict[str, Any]:
    r = client.post("/api/login", json={"name": name, "password": password})
    assert r.status_code == 200, r.text
    return r.json()


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
