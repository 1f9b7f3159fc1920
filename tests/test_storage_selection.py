"""Tests for choosing a storage backend from settings."""

from sqlalchemy import text

from studio_api.config import Settings
from studio_api.db.session import create_engine
from studio_api.storage import DatabaseStorage, MemoryStorage, build_storage


async def test_memory_without_database_url():
    storage = await build_storage(Settings(database_url=None))

    assert isinstance(storage, MemoryStorage)
    assert storage.name == "memory"


async def test_database_with_url_creates_schema(tmp_path):
    settings = Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'selected.db'}",
        auto_create_schema=True,
    )

    storage = await build_storage(settings)
    try:
        assert isinstance(storage, DatabaseStorage)
        assert storage.name == "database"
        project = await storage.create_project({"name": "persisted"})
        assert (await storage.get_project(project.id)).name == "persisted"
    finally:
        await storage.close()


async def test_database_contents_survive_reconnect(tmp_path):
    settings = Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'durable.db'}",
        auto_create_schema=True,
    )

    first = await build_storage(settings)
    project = await first.create_project({"name": "durable"})
    await first.close()

    second = await build_storage(settings)
    try:
        assert (await second.get_project(project.id)).name == "durable"
    finally:
        await second.close()


async def test_sqlite_enforces_foreign_keys(tmp_path):
    engine = create_engine(Settings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'fk.db'}"))
    try:
        async with engine.connect() as conn:
            assert (await conn.execute(text("PRAGMA foreign_keys"))).scalar() == 1
    finally:
        await engine.dispose()
