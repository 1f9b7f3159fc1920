"""Relational storage over SQLAlchemy asyncio."""

from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from studio_api.db import models
from studio_api.db.models.base import utcnow
from studio_api.errors import NotFoundError, StorageError
from studio_api.schemas import (
    AiAnalysis,
    AiAnalysisCreate,
    AnalysisType,
    File,
    FileCreate,
    FileTest,
    FileTestCreate,
    FileTestUpdate,
    FileVersion,
    Message,
    MessageCreate,
    Project,
    ProjectCreate,
    ProjectUpdate,
)
from studio_api.storage.base import (
    Storage,
    coerce_analysis_type,
    coerce_content,
    coerce_payload,
)

logger = structlog.get_logger()


class DatabaseStorage(Storage):
    """Storage backed by one table per entity.

    Parents are checked and cascades are applied by this class, children
    first; the schema declares foreign keys without ``ON DELETE`` actions. Any SQLAlchemy failure is
    logged and re-raised as ``StorageError``.
    """

    name = "database"

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        engine: AsyncEngine | None = None,
    ) -> None:
        """Initialize database storage.

        Args:
            session_factory: Factory producing sessions bound to the database
            engine: Engine to dispose of on close, if this storage owns it
        """
        self._session_factory = session_factory
        self._engine = engine

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Run one operation in its own transaction, committed on exit."""
        try:
            async with self._session_factory.begin() as session:
                yield session
        except SQLAlchemyError as e:
            logger.error("Storage operation failed", operation=operation, error=str(e))
            raise StorageError(f"Storage operation failed: {operation}") from e

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            logger.info("Database engine disposed")

    # Projects

    async def create_project(self, data: ProjectCreate | Mapping[str, Any]) -> Project:
        payload = coerce_payload(ProjectCreate, data)
        async with self._transaction("create_project") as session:
            row = models.Project(
                name=payload.name,
                description=payload.description,
                template=payload.template,
                created_at=utcnow(),
            )
            session.add(row)
            await session.flush()
            return _project(row)

    async def get_project(self, project_id: int) -> Project | None:
        async with self._transaction("get_project") as session:
            row = await session.get(models.Project, project_id)
            return _project(row) if row else None

    async def list_projects(self) -> list[Project]:
        async with self._transaction("list_projects") as session:
            result = await session.execute(
                select(models.Project).order_by(
                    models.Project.created_at.desc(), models.Project.id.desc()
                )
            )
            return [_project(row) for row in result.scalars().all()]

    async def update_project(
        self, project_id: int, data: ProjectUpdate | Mapping[str, Any]
    ) -> Project | None:
        payload = coerce_payload(ProjectUpdate, data)
        async with self._transaction("update_project") as session:
            row = await session.get(models.Project, project_id)
            if row is None:
                return None
            for field, value in payload.model_dump(exclude_unset=True).items():
                setattr(row, field, value)
            await session.flush()
            return _project(row)

    async def delete_project(self, project_id: int) -> bool:
        async with self._transaction("delete_project") as session:
            row = await session.get(models.Project, project_id)
            if row is None:
                return False

            file_ids = select(models.File.id).where(models.File.project_id == project_id)
            await _delete_file_children(session, file_ids)
            await _bulk_delete(session, models.File, models.File.project_id == project_id)
            await _bulk_delete(session, models.Message, models.Message.project_id == project_id)
            await _bulk_delete(session, models.Project, models.Project.id == project_id)

        logger.info("Project deleted", project_id=project_id)
        return True

    # Files

    async def create_file(self, data: FileCreate | Mapping[str, Any]) -> File:
        payload = coerce_payload(FileCreate, data)
        now = utcnow()
        async with self._transaction("create_file") as session:
            await _require(session, models.Project, payload.project_id, "Project not found")
            row = models.File(
                project_id=payload.project_id,
                name=payload.name,
                path=payload.path,
                content=payload.content,
                type=payload.type.value,
                created_at=now,
                updated_at=now,
            )
            session.add(row)
            await session.flush()
            return _file(row)

    async def get_file(self, file_id: int) -> File | None:
        async with self._transaction("get_file") as session:
            row = await session.get(models.File, file_id)
            return _file(row) if row else None

    async def list_files_by_project(self, project_id: int) -> list[File]:
        async with self._transaction("list_files_by_project") as session:
            result = await session.execute(
                select(models.File).where(models.File.project_id == project_id)
            )
            return [_file(row) for row in result.scalars().all()]

    async def update_file_content(self, file_id: int, content: str) -> File | None:
        content = coerce_content(content)
        async with self._transaction("update_file_content") as session:
            row = await session.get(models.File, file_id)
            if row is None:
                return None

            # Not serialized against concurrent writers of the same file.
            latest = await session.scalar(
                select(func.max(models.FileVersion.version)).where(
                    models.FileVersion.file_id == file_id
                )
            )
            now = utcnow()
            session.add(
                models.FileVersion(
                    file_id=file_id,
                    content=row.content,
                    version=(latest or 0) + 1,
                    created_at=now,
                )
            )
            row.content = content
            row.updated_at = now
            await session.flush()
            logger.debug("File content updated", file_id=file_id, version=(latest or 0) + 1)
            return _file(row)

    async def delete_file(self, file_id: int) -> bool:
        async with self._transaction("delete_file") as session:
            row = await session.get(models.File, file_id)
            if row is None:
                return False
            await _delete_file_children(session, [file_id])
            await _bulk_delete(session, models.File, models.File.id == file_id)
            return True

    # Versions

    async def list_file_versions(self, file_id: int) -> list[FileVersion]:
        async with self._transaction("list_file_versions") as session:
            result = await session.execute(
                select(models.FileVersion)
                .where(models.FileVersion.file_id == file_id)
                .order_by(models.FileVersion.version.desc())
            )
            return [_version(row) for row in result.scalars().all()]

    async def get_file_version(self, version_id: int) -> FileVersion | None:
        async with self._transaction("get_file_version") as session:
            row = await session.get(models.FileVersion, version_id)
            return _version(row) if row else None

    async def restore_file_version(self, file_id: int, version_id: int) -> File | None:
        async with self._transaction("restore_file_version") as session:
            version = await session.get(models.FileVersion, version_id)
            if version is None or version.file_id != file_id:
                return None
            row = await session.get(models.File, file_id)
            if row is None:
                return None

            row.content = version.content
            row.updated_at = utcnow()
            await session.flush()
            logger.info("File version restored", file_id=file_id, version=version.version)
            return _file(row)

    # Messages

    async def create_message(self, data: MessageCreate | Mapping[str, Any]) -> Message:
        payload = coerce_payload(MessageCreate, data)
        async with self._transaction("create_message") as session:
            await _require(session, models.Project, payload.project_id, "Project not found")
            row = models.Message(
                project_id=payload.project_id,
                role=payload.role.value,
                content=payload.content,
                metadata_=payload.metadata,
                created_at=utcnow(),
            )
            session.add(row)
            await session.flush()
            return _message(row)

    async def list_messages_by_project(self, project_id: int) -> list[Message]:
        async with self._transaction("list_messages_by_project") as session:
            result = await session.execute(
                select(models.Message)
                .where(models.Message.project_id == project_id)
                .order_by(models.Message.created_at.asc(), models.Message.id.asc())
            )
            return [_message(row) for row in result.scalars().all()]

    async def delete_messages_by_project(self, project_id: int) -> bool:
        async with self._transaction("delete_messages_by_project") as session:
            await _bulk_delete(session, models.Message, models.Message.project_id == project_id)
        return True

    # Tests

    async def create_test(self, data: FileTestCreate | Mapping[str, Any]) -> FileTest:
        payload = coerce_payload(FileTestCreate, data)
        now = utcnow()
        async with self._transaction("create_test") as session:
            await _require(session, models.File, payload.file_id, "File not found")
            row = models.FileTest(
                file_id=payload.file_id,
                name=payload.name,
                content=payload.content,
                status=payload.status.value,
                result=payload.result,
                created_at=now,
                updated_at=now,
            )
            session.add(row)
            await session.flush()
            return _test(row)

    async def list_tests_by_file(self, file_id: int) -> list[FileTest]:
        async with self._transaction("list_tests_by_file") as session:
            result = await session.execute(
                select(models.FileTest)
                .where(models.FileTest.file_id == file_id)
                .order_by(models.FileTest.created_at.asc(), models.FileTest.id.asc())
            )
            return [_test(row) for row in result.scalars().all()]

    async def update_test(
        self, test_id: int, data: FileTestUpdate | Mapping[str, Any]
    ) -> FileTest | None:
        payload = coerce_payload(FileTestUpdate, data)
        async with self._transaction("update_test") as session:
            row = await session.get(models.FileTest, test_id)
            if row is None:
                return None
            for field, value in payload.model_dump(exclude_unset=True, mode="json").items():
                setattr(row, field, value)
            row.updated_at = utcnow()
            await session.flush()
            return _test(row)

    async def delete_test(self, test_id: int) -> bool:
        async with self._transaction("delete_test") as session:
            result = await _bulk_delete(session, models.FileTest, models.FileTest.id == test_id)
            return result.rowcount > 0

    # Analyses

    async def create_ai_analysis(
        self, data: AiAnalysisCreate | Mapping[str, Any]
    ) -> AiAnalysis:
        payload = coerce_payload(AiAnalysisCreate, data)
        async with self._transaction("create_ai_analysis") as session:
            await _require(session, models.File, payload.file_id, "File not found")
            row = models.AiAnalysis(
                file_id=payload.file_id,
                analysis_type=payload.analysis_type.value,
                result=payload.result,
                severity=payload.severity,
                suggestions=payload.suggestions,
                metadata_=payload.metadata,
                created_at=utcnow(),
            )
            session.add(row)
            await session.flush()
            return _analysis(row)

    async def list_analyses_by_file(self, file_id: int) -> list[AiAnalysis]:
        async with self._transaction("list_analyses_by_file") as session:
            result = await session.execute(
                select(models.AiAnalysis)
                .where(models.AiAnalysis.file_id == file_id)
                .order_by(models.AiAnalysis.created_at.desc(), models.AiAnalysis.id.desc())
            )
            return [_analysis(row) for row in result.scalars().all()]

    async def get_latest_analysis(
        self, file_id: int, analysis_type: AnalysisType | str
    ) -> AiAnalysis | None:
        kind = coerce_analysis_type(analysis_type)
        async with self._transaction("get_latest_analysis") as session:
            result = await session.execute(
                select(models.AiAnalysis)
                .where(
                    models.AiAnalysis.file_id == file_id,
                    models.AiAnalysis.analysis_type == kind.value,
                )
                .order_by(models.AiAnalysis.created_at.desc(), models.AiAnalysis.id.desc())
                .limit(1)
            )
            row = result.scalar_one_or_none()
            return _analysis(row) if row else None


async def _require(session: AsyncSession, model: type, entity_id: int, message: str) -> None:
    """Raise NotFoundError unless the parent row exists in this transaction."""
    if await session.get(model, entity_id) is None:
        raise NotFoundError(message)


async def _bulk_delete(session: AsyncSession, model: type, *conditions: Any) -> Any:
    return await session.execute(
        delete(model).where(*conditions).execution_options(synchronize_session=False)
    )


async def _delete_file_children(session: AsyncSession, file_ids: Any) -> None:
    """Delete versions, tests and analyses of the given files."""
    for model in (models.FileVersion, models.FileTest, models.AiAnalysis):
        await _bulk_delete(session, model, model.file_id.in_(file_ids))


# Row -> record conversions


def _aware(value: datetime) -> datetime:
    """SQLite returns naive datetimes; stored values are always UTC."""
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def _project(row: models.Project) -> Project:
    return Project(
        id=row.id,
        name=row.name,
        description=row.description,
        template=row.template,
        created_at=_aware(row.created_at),
    )


def _file(row: models.File) -> File:
    return File(
        id=row.id,
        project_id=row.project_id,
        name=row.name,
        path=row.path,
        content=row.content,
        type=row.type,
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


def _version(row: models.FileVersion) -> FileVersion:
    return FileVersion(
        id=row.id,
        file_id=row.file_id,
        content=row.content,
        version=row.version,
        created_at=_aware(row.created_at),
    )


def _message(row: models.Message) -> Message:
    return Message(
        id=row.id,
        project_id=row.project_id,
        role=row.role,
        content=row.content,
        metadata=row.metadata_,
        created_at=_aware(row.created_at),
    )


def _test(row: models.FileTest) -> FileTest:
    return FileTest(
        id=row.id,
        file_id=row.file_id,
        name=row.name,
        content=row.content,
        status=row.status,
        result=row.result,
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


def _analysis(row: models.AiAnalysis) -> AiAnalysis:
    return AiAnalysis(
        id=row.id,
        file_id=row.file_id,
        analysis_type=row.analysis_type,
        result=row.result,
        severity=row.severity,
        suggestions=row.suggestions,
        metadata=row.metadata_,
        created_at=_aware(row.created_at),
    )
