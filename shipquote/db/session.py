# shipquote/db/session.py
# Sync engine/session factory + FastAPI dependency (get_db)
from __future__ import annotations

import logging
import re
from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from shipquote.core.config import get_settings

log = logging.getLogger("shipquote.db")


# ---- DSN normalisation: postgres DSNs always go through psycopg3 ----
def normalize_dsn(url: str) -> str:
    url = (url or "").strip()
    if (url.startswith('"') and url.endswith('"')) or (url.startswith("'") and url.endswith("'")):
        url = url[1:-1].strip()
    if not url:
        return "sqlite:///./shipquote.db"
    if url.startswith("postgresql+asyncpg://") or url.startswith("postgres+asyncpg://"):
        return re.sub(r"^postgres(?:ql)?\+asyncpg://", "postgresql+psycopg://", url)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def _connect_args_for(url_str: str) -> dict[str, Any]:
    backend = make_url(url_str).get_backend_name()
    if backend.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


def build_engine(url_str: str, *, echo: bool = False, **kwargs: Any) -> Engine:
    url_str = normalize_dsn(url_str)
    opts: dict[str, Any] = {"echo": echo, "future": True}
    if make_url(url_str).get_backend_name().startswith("postgresql"):
        opts["pool_pre_ping"] = True
    connect_args = _connect_args_for(url_str)
    if connect_args:
        opts["connect_args"] = connect_args
    opts.update(kwargs)
    eng = create_engine(url_str, **opts)
    if connect_args:
        _sqlite_savepoints(eng)
    return eng


def _sqlite_savepoints(eng: Engine) -> None:
    # pysqlite defers BEGIN on its own, which breaks SAVEPOINT; issue BEGIN ourselves
    @event.listens_for(eng, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(eng, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


_settings = get_settings()
SYNC_URL = normalize_dsn(_settings.DATABASE_URL)

engine: Engine = build_engine(SYNC_URL, echo=_settings.SQL_ECHO)
SessionLocal: sessionmaker[Session] = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    class_=Session,
)


# ---- FastAPI dependency ----
def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_all(bind: Engine | None = None) -> None:
    from shipquote.db.base import Base, init_models
    from shipquote.db.generations import seed_generations

    init_models()
    eng = bind or engine
    Base.metadata.create_all(bind=eng)
    with Session(eng) as db:
        seed_generations(db)
    log.info("tables ensured on %s", eng.url.render_as_string(hide_password=True))
