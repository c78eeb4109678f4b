"""
Database Initialization - Create tables and seed default responses.

Run directly to prepare the configured database:
    python -m simsimi.database.init_db
"""
from typing import List, Tuple

from simsimi.core.exceptions import StorageFailure
from simsimi.core.logging_config import get_logger
from simsimi.core.validators import normalize
from simsimi.database.connection import DatabaseConnection
from simsimi.database.models import Base
from simsimi.database.response_store import ResponseStore

logger = get_logger(__name__)

DEFAULT_RESPONSES: List[Tuple[str, str]] = [
    ("hello", "Hello! How are you today?"),
    ("hi", "Hi there! Nice to meet you!"),
    ("how are you", "I'm doing great! Thanks for asking!"),
    ("what is your name", "I'm SimSimi, your friendly chatbot!"),
    ("bye", "Goodbye! See you again soon!"),
    ("thank you", "You're welcome! 😊"),
    ("good morning", "Good morning! Have a wonderful day!"),
    ("good night", "Good night! Sweet dreams! 🌙"),
]


def init_tables(db: DatabaseConnection) -> None:
    """
    Create the conversations and logs tables if they don't exist.

    Raises:
        StorageFailure: If the schema could not be created
    """
    try:
        Base.metadata.create_all(db.engine)
    except Exception as e:
        logger.error(f"Failed to initialize tables: {e}")
        raise StorageFailure("Failed to initialize database tables") from e

    logger.info("Database tables initialized")


def seed_default_data(store: ResponseStore) -> int:
    """
    Upsert the built-in greetings.

    Seeding goes through the normal upsert, so every run re-teaches the
    defaults. Failures are logged and do not stop startup.

    Returns:
        Number of entries written
    """
    seeded = 0
    try:
        for question, answer in DEFAULT_RESPONSES:
            store.upsert(question, normalize(question), answer)
            seeded += 1
    except StorageFailure as e:
        logger.warning(f"Could not seed default data: {e}")
        return seeded

    logger.info(f"Default responses seeded: {seeded}")
    return seeded


if __name__ == "__main__":
    from simsimi.core.config import get_settings
    from simsimi.core.logging_config import setup_logging

    settings = get_settings()
    setup_logging(settings)

    database = DatabaseConnection(settings)
    database.connect()
    init_tables(database)
    if settings.seed_default_data:
        seed_default_data(ResponseStore(database))
    database.close()
