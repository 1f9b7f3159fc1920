"""Storage engine: one contract, in-memory and relational backends."""

import structlog

from studio_api.config import Settings
from studio_api.storage.base import Storage
from studio_api.storage.database import DatabaseStorage
from studio_api.storage.memory import MemoryStorage

logger = structlog.get_logger()


async def build_storage(settings: Settings) -> Storage:
    """Construct the backend selected by configuration.

    A configured ``database_url`` selects the relational backend; otherwise
    state is kept in memory for the life of the process.
    """
    if not settings.database_url:
        logger.info("Using in-memory storage")
        return MemoryStorage()

    from studio_api.db.session import create_engine, create_schema, create_session_factory

    engine = create_engine(settings)
    if settings.auto_create_schema:
        await create_schema(engine)
    logger.info("Using database storage", dialect=engine.dialect.name)
    return DatabaseStorage(create_session_factory(engine), engine=engine)


__all__ = ["DatabaseStorage", "MemoryStorage", "Storage", "build_storage"]
