# tests/conftest.py
from __future__ import annotations

import pytest
from sqlalchemy.engine import Engine

from mehu.common import settings as s
from mehu.database.core.main import create_db_engine, init_schema
from mehu.database.store import Store

_ENV_KEYS = ("MEHU_TELEGRAM_APIKEY", "TELEGRAM_API_KEY", "DATABASE_URL", "DB__URL", "LOG_LEVEL")


@pytest.fixture(autouse=True)
def _isolated_settings(tmp_path, monkeypatch):
    """
    Every test gets its own data_root and a fresh settings cache.
    We also chdir into tmp_path so a developer's .env never leaks in.
    """
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.setenv("DATA_ROOT", str(tmp_path / "data"))
    monkeypatch.chdir(tmp_path)
    s.get_settings.cache_clear()
    yield
    s.get_settings.cache_clear()


@pytest.fixture()
def db_url(tmp_path) -> str:
    return f"sqlite:///{(tmp_path / 'test.sqlite').as_posix()}"


@pytest.fixture()
def db_engine(db_url) -> Engine:
    engine = create_db_engine(db_url)
    # Skip Alembic here; just create tables from models
    init_schema(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def store(db_engine) -> Store:
    return Store.from_engine(db_engine)
