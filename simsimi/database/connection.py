"""
Database Connection Management.

This module handles the storage connection via SQLAlchemy.
It provides:
- Engine creation with per-dialect settings (SQLite pragmas, pooling)
- Connection establishment with retries
- Session management
- Health checks
"""
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Dict, Generator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session

from simsimi.core.config import Settings, get_settings
from simsimi.core.exceptions import StorageFailure
from simsimi.core.logging_config import get_logger

logger = get_logger(__name__)


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _set_sqlite_pragmas(busy_timeout_ms: int) -> Callable:
    def on_connect(dbapi_connection, connection_record):
        # SQLite's built-in lower() only folds ASCII letters
        dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode = WAL")
        cursor.execute("PRAGMA synchronous = NORMAL")
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.execute(f"PRAGMA busy_timeout = {busy_timeout_ms}")
        cursor.close()
    return on_connect


class DatabaseConnection:
    """
    Manages the storage engine and session lifecycle.

    Example:
        >>> db = DatabaseConnection()
        >>> db.connect()
        >>> with db.get_session() as session:
        ...     session.execute(text("SELECT 1"))
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize database engine.

        Args:
            settings: Settings to use. Defaults to the cached environment settings.
            sleep: Delay function used between connection attempts.
        """
        self.settings = settings or get_settings()
        self._sleep = sleep
        self.is_connected = False

        db_url = self.settings.database_url
        url = make_url(db_url)
        self.dialect = url.get_backend_name()

        if self.dialect == "sqlite":
            self._ensure_sqlite_directory(url.database)
            self.engine = create_engine(
                db_url,
                connect_args={
                    "timeout": self.settings.db_timeout_seconds,
                    "check_same_thread": False,
                },
                echo=False,
            )
            event.listen(
                self.engine,
                "connect",
                _set_sqlite_pragmas(self.settings.db_timeout_seconds * 1000)
            )
        else:
            # pool_pre_ping: Test connections before using (handles stale connections)
            self.engine = create_engine(
                db_url,
                pool_pre_ping=True,
                pool_size=5,
                max_overflow=10,
                pool_timeout=self.settings.db_timeout_seconds,
                connect_args=self._network_connect_args(),
                echo=False,
            )

        # expire_on_commit=False keeps returned entries readable after the session closes
        self._session_factory = sessionmaker(
            bind=self.engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

        logger.info(f"Database engine created: {url.render_as_string(hide_password=True)}")

    def _network_connect_args(self) -> Dict[str, int]:
        if self.dialect == "postgresql":
            return {"connect_timeout": self.settings.db_timeout_seconds}
        if self.dialect == "mysql":
            return {
                "connect_timeout": self.settings.db_timeout_seconds,
                "read_timeout": self.settings.db_timeout_seconds,
                "write_timeout": self.settings.db_timeout_seconds,
            }
        return {}

    @staticmethod
    def _ensure_sqlite_directory(database: Optional[str]) -> None:
        if not database or database == ":memory:" or database.startswith("file:"):
            return
        Path(database).parent.mkdir(parents=True, exist_ok=True)

    def connect(self) -> None:
        """
        Establish connectivity, retrying with a linear backoff.

        Only startup goes through retries; steady-state operations fail fast.

        Raises:
            StorageFailure: If every attempt fails
        """
        attempts = max(1, self.settings.db_connect_retries)

        for attempt in range(1, attempts + 1):
            try:
                with self.engine.connect() as conn:
                    conn.execute(text("SELECT 1"))
                self.is_connected = True
                logger.info(f"Connected to {self.dialect} database")
                return
            except SQLAlchemyError as e:
                if attempt >= attempts:
                    logger.error(f"Failed to connect to database after {attempts} attempts: {e}")
                    raise StorageFailure("Could not connect to the database") from e

                delay = self.settings.db_retry_delay_seconds * attempt
                logger.warning(
                    f"Retrying database connection ({attempt}/{attempts}) in {delay:g}s: {e}"
                )
                self._sleep(delay)

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """
        Get a database session with automatic cleanup.

        Transactions are rolled back on error, committed on success.

        Yields:
            SQLAlchemy Session object
        """
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Database error, rolling back: {e}")
            raise
        finally:
            session.close()

    def health_check(self) -> Dict[str, object]:
        """
        Test database connectivity.

        Returns:
            {"healthy": bool, "error": str | None}
        """
        if not self.is_connected:
            return {"healthy": False, "error": "Not connected"}
        try:
            with self.get_session() as session:
                session.execute(text("SELECT 1"))
            logger.debug("Database health check: OK")
            return {"healthy": True, "error": None}
        except SQLAlchemyError as e:
            logger.error(f"Database health check failed: {e}")
            return {"healthy": False, "error": str(e)}

    def close(self) -> None:
        """Close all connections in the pool."""
        self.engine.dispose()
        self.is_connected = False
        logger.info("Database connections closed")
