"""
Database module - Storage access layer.

This module handles:
- Connection management with startup retries
- ORM models for conversations and interaction logs
- The response store (lookup, atomic upsert, search)
- The interaction logger
- Aggregate statistics
- Table creation and default seeding
"""
from simsimi.database.connection import DatabaseConnection
from simsimi.database.models import Base, ConversationEntry, InteractionLogEntry
from simsimi.database.response_store import ResponseStore
from simsimi.database.interaction_log import InteractionLogger
from simsimi.database.stats import StatsCollector, StatsSnapshot
from simsimi.database.init_db import (
    DEFAULT_RESPONSES,
    init_tables,
    seed_default_data,
)

__all__ = [
    # Connection
    "DatabaseConnection",
    # Models
    "Base",
    "ConversationEntry",
    "InteractionLogEntry",
    # Repositories
    "ResponseStore",
    "InteractionLogger",
    "StatsCollector",
    "StatsSnapshot",
    # Init
    "DEFAULT_RESPONSES",
    "init_tables",
    "seed_default_data",
]
