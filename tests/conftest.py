import random
from dataclasses import replace
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from simsimi.api.main import create_app
from simsimi.core.config import Settings
from simsimi.database import (
    DatabaseConnection,
    InteractionLogger,
    ResponseStore,
    StatsCollector,
    init_tables,
)
from simsimi.services.conversation_service import ConversationService


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        app_env="testing",
        log_level="WARNING",
        log_dir=tmp_path / "logs",
        database_url=f"sqlite:///{tmp_path / 'simsimi.db'}",
        db_retry_delay_seconds=0.0,
        seed_default_data=False,
        enable_audit_logging=False,
    )


@pytest.fixture
def database(settings: Settings):
    db = DatabaseConnection(settings)
    db.connect()
    init_tables(db)
    yield db
    db.close()


@pytest.fixture
def store(database: DatabaseConnection) -> ResponseStore:
    return ResponseStore(database)


@pytest.fixture
def interaction_logger(database: DatabaseConnection) -> InteractionLogger:
    return InteractionLogger(database)


@pytest.fixture
def service(store, interaction_logger, database, settings) -> ConversationService:
    return ConversationService(
        store=store,
        interaction_logger=interaction_logger,
        stats_collector=StatsCollector(database),
        settings=settings,
        rng=random.Random(0),
    )


@pytest.fixture
def client(settings: Settings):
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def seeded_client(settings: Settings):
    with TestClient(create_app(replace(settings, seed_default_data=True))) as test_client:
        yield test_client
