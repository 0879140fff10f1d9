"""Pytest configuration.

Settings are read when ``finboard`` is first imported, so the environment is
prepared at module import time: a throwaway SQLite file, a fixed JWT secret
and cheap bcrypt rounds. The application engine and the seeding helpers in
``tests/db.py`` both point at that file.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import pytest

_DB_FILE = Path(tempfile.mkdtemp(prefix="finboard-tests-")) / "finboard.db"

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_FILE}"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"

from fastapi.testclient import TestClient  # noqa: E402

from finboard.main import app  # noqa: E402
from finboard.security import create_access_token  # noqa: E402
from tests.db import create_schema, seed_transactions  # noqa: E402

create_schema()


@pytest.fixture(scope="session")
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers() -> dict[str, str]:
    token = create_access_token(data={"sub": "1", "username": "tester"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def seed():
    yield seed_transactions
    seed_transactions([])
