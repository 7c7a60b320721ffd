# tests/conftest.py
from __future__ import annotations

import os
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# ============================================================
# settings are cached on first import: set env before shipquote loads
# ============================================================
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from shipquote.core.cache import get_config_cache  # noqa: E402
from shipquote.db.session import build_engine, create_all, get_db  # noqa: E402
from shipquote.main import app  # noqa: E402


# =========================================
# one in-memory database per test (StaticPool keeps the single connection)
# =========================================
@pytest.fixture(scope="function")
def engine() -> Generator[Engine, None, None]:
    eng = build_engine("sqlite://", poolclass=StaticPool)
    create_all(bind=eng)
    try:
        yield eng
    finally:
        eng.dispose()


@pytest.fixture(scope="function")
def session_maker(engine: Engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, class_=Session)


@pytest.fixture(scope="function")
def db(session_maker) -> Generator[Session, None, None]:
    sess = session_maker()
    try:
        yield sess
    finally:
        sess.close()


@pytest.fixture(scope="function")
def client(session_maker) -> Generator[TestClient, None, None]:
    def _override_get_db():
        sess = session_maker()
        try:
            yield sess
        finally:
            sess.close()

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)


# =========================================
# the config cache is process-wide: start every test cold
# =========================================
@pytest.fixture(autouse=True, scope="function")
def _cold_config_cache():
    get_config_cache().clear()
    yield
    get_config_cache().clear()
