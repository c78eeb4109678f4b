"""
Configuration management via environment variables.

This module loads configuration from .env file using python-dotenv.
All configuration values are accessed through the Settings class.
"""
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


PROJECT_ROOT = Path(__file__).parent.parent.parent

# Load .env file from project root
# This must happen before accessing os.environ
env_path = PROJECT_ROOT / ".env"
load_dotenv(env_path)


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    frozen=True makes the dataclass immutable, preventing accidental
    modification of settings at runtime.

    Attributes:
        app_name: Application identifier for logging
        app_env: Environment name (development, staging, production)
        log_level: Logging verbosity (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for daily log files
        api_version: Version segment of the API prefix (/api/<version>)
        database_url: SQLAlchemy connection string
        db_connect_retries: Connection attempts made at startup
        db_retry_delay_seconds: Base delay between connection attempts
        db_timeout_seconds: Connection/busy timeout at the storage boundary
        seed_default_data: Upsert the default greetings on startup
        rate_limit_per_minute: Requests allowed per client per window
        rate_limit_window_seconds: Sliding window length
        max_question_length: Longest question accepted by teach
        max_answer_length: Longest answer accepted by teach
        enable_audit_logging: Log every HTTP request
    """
    # Application settings
    app_name: str = "SimSimiAPI"
    app_env: str = "development"
    log_level: str = "INFO"
    log_dir: Path = PROJECT_ROOT / "logs"
    api_version: str = "v1"

    # Database settings
    database_url: str = "sqlite:///simsimi.db"
    db_connect_retries: int = 3
    db_retry_delay_seconds: float = 1.0
    db_timeout_seconds: int = 5
    seed_default_data: bool = True

    # Safety settings
    rate_limit_per_minute: int = 100
    rate_limit_window_seconds: int = 60
    max_question_length: int = 500
    max_answer_length: int = 1000
    enable_audit_logging: bool = True

    @property
    def api_prefix(self) -> str:
        return f"/api/{self.api_version}"

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env.lower() == "development"


def _get_env(key: str, default: Optional[str] = None) -> str:
    """
    Get environment variable with optional default.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        Environment variable value

    Raises:
        ValueError: If required variable is not set and no default provided
    """
    value = os.environ.get(key, default)
    if value is None:
        raise ValueError(
            f"Required environment variable '{key}' is not set. "
            f"Please check your .env file."
        )
    return value


def _get_bool(key: str, default: str) -> bool:
    return _get_env(key, default).lower() in ("1", "true", "yes")


def default_database_url(app_env: str) -> str:
    """
    Build the embedded SQLite URL used when DATABASE_URL is not set.

    Production deployments keep the file on the persistent disk mounted
    at /data; everything else uses database/ in the project root.
    """
    if app_env.lower() == "production":
        db_dir = Path("/data")
    else:
        db_dir = PROJECT_ROOT / "database"
    return f"sqlite:///{db_dir / 'simsimi.db'}"


def normalize_database_url(database_url: str) -> str:
    """Rewrite provider-style URLs to the SQLAlchemy driver they need."""
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)
    if database_url.startswith("mysql://"):
        database_url = database_url.replace("mysql://", "mysql+pymysql://", 1)
    return database_url


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are read once at startup; call get_settings.cache_clear()
    after changing the environment (tests do this).

    Returns:
        Settings instance with all configuration values
    """
    app_env = _get_env("APP_ENV", "development")

    database_url = os.environ.get("DATABASE_URL") or default_database_url(app_env)

    return Settings(
        # Application
        app_name=_get_env("APP_NAME", "SimSimiAPI"),
        app_env=app_env,
        log_level=_get_env("LOG_LEVEL", "INFO"),
        log_dir=Path(_get_env("LOG_DIR", str(PROJECT_ROOT / "logs"))),
        api_version=_get_env("API_VERSION", "v1"),

        # Database
        database_url=normalize_database_url(database_url),
        db_connect_retries=int(_get_env("DB_CONNECT_RETRIES", "3")),
        db_retry_delay_seconds=float(_get_env("DB_RETRY_DELAY_SECONDS", "1.0")),
        db_timeout_seconds=int(_get_env("DB_TIMEOUT_SECONDS", "5")),
        seed_default_data=_get_bool("SEED_DEFAULT_DATA", "true"),

        # Safety
        rate_limit_per_minute=int(_get_env("RATE_LIMIT_PER_MINUTE", "100")),
        rate_limit_window_seconds=int(_get_env("RATE_LIMIT_WINDOW_SECONDS", "60")),
        max_question_length=int(_get_env("MAX_QUESTION_LENGTH", "500")),
        max_answer_length=int(_get_env("MAX_ANSWER_LENGTH", "1000")),
        enable_audit_logging=_get_bool("ENABLE_AUDIT_LOGGING", "true"),
    )
