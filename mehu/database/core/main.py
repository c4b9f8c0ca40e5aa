# mehu/database/core/main.py
from __future__ import annotations

from typing import Optional

from sqlalchemy import MetaData, create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool

from mehu.common.settings import get_settings

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


def create_db_engine(url: Optional[str] = None, *, echo: Optional[bool] = None) -> Engine:
    """
    Build an Engine for ``url`` (defaults to Settings.database_url).
    SQLite connections get foreign keys switched on; in-memory SQLite shares
    one connection so every Session sees the same database.
    """
    cfg = get_settings()
    url = url or cfg.database_url
    kwargs = {"echo": cfg.db.echo if echo is None else echo, "future": True}

    is_sqlite = url.startswith("sqlite")
    if is_sqlite:
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool

    engine = create_engine(url, **kwargs)

    if is_sqlite:
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_conn, _):
            cur = dbapi_conn.cursor()
            try:
                cur.execute("PRAGMA foreign_keys=ON")
            finally:
                cur.close()

    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, expire_on_commit=False, future=True, autoflush=False)


def init_schema(engine: Engine) -> None:
    """CREATE TABLE IF NOT EXISTS for every model (no Alembic)."""
    import mehu.database.models  # noqa: F401  (register tables on Base.metadata)
    Base.metadata.create_all(bind=engine)
