"""Tests for simsimi.database.DatabaseConnection."""
from dataclasses import replace

import pytest
from sqlalchemy import inspect
from sqlalchemy.exc import OperationalError

from simsimi.core.exceptions import StorageFailure
from simsimi.database import DatabaseConnection, init_tables


def flaky_connect(engine, failures):
    real_connect = engine.connect
    calls = {"count": 0}

    def connect():
        calls["count"] += 1
        if calls["count"] <= failures:
            raise OperationalError("SELECT 1", {}, Exception("database is unavailable"))
        return real_connect()

    return connect, calls


def test_connect_retries_with_linear_backoff(settings, monkeypatch):
    delays = []
    db = DatabaseConnection(replace(settings, db_retry_delay_seconds=1.0), sleep=delays.append)
    connect, calls = flaky_connect(db.engine, failures=2)
    monkeypatch.setattr(db.engine, "connect", connect)

    db.connect()

    assert db.is_connected is True
    assert calls["count"] == 3
    assert delays == [1.0, 2.0]
    db.close()


def test_connect_gives_up_after_max_retries(settings, monkeypatch):
    delays = []
    db = DatabaseConnection(replace(settings, db_connect_retries=3), sleep=delays.append)
    connect, calls = flaky_connect(db.engine, failures=10)
    monkeypatch.setattr(db.engine, "connect", connect)

    with pytest.raises(StorageFailure):
        db.connect()

    assert calls["count"] == 3
    assert len(delays) == 2
    assert db.is_connected is False


def test_sqlite_directory_is_created(settings, tmp_path):
    nested = tmp_path / "data" / "nested" / "simsimi.db"
    db = DatabaseConnection(replace(settings, database_url=f"sqlite:///{nested}"))
    db.connect()
    init_tables(db)

    assert nested.parent.is_dir()
    assert set(inspect(db.engine).get_table_names()) >= {"conversations", "logs"}
    db.close()


def test_sqlite_pragmas_applied(database):
    with database.engine.connect() as conn:
        journal_mode = conn.exec_driver_sql("PRAGMA journal_mode").scalar()
        busy_timeout = conn.exec_driver_sql("PRAGMA busy_timeout").scalar()

    assert journal_mode.lower() == "wal"
    assert busy_timeout == 5000


def test_health_check(settings):
    db = DatabaseConnection(settings)
    assert db.health_check() == {"healthy": False, "error": "Not connected"}

    db.connect()
    assert db.health_check() == {"healthy": True, "error": None}
    db.close()
