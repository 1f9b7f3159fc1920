"""Process-lifetime storage backed by dictionaries."""

from collections.abc import Mapping
from datetime import datetime, timezone
from itertools import count
from typing import Any

import structlog

from studio_api.errors import NotFoundError
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


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MemoryStorage(Storage):
    """In-memory storage.

    One dict per entity type keyed by id, one counter per type starting at 1.
    Methods never await between reading and writing state, so each operation
    runs as a single block on the event loop. State is lost on restart.
    """

    name = "memory"

    def __init__(self) -> None:
        self._projects: dict[int, Project] = {}
        self._files: dict[int, File] = {}
        self._versions: dict[int, FileVersion] = {}
        self._messages: dict[int, Message] = {}
        self._tests: dict[int, FileTest] = {}
        self._analyses: dict[int, AiAnalysis] = {}

        self._project_ids = count(1)
        self._file_ids = count(1)
        self._version_ids = count(1)
        self._message_ids = count(1)
        self._test_ids = count(1)
        self._analysis_ids = count(1)

    # Projects

    async def create_project(self, data: ProjectCreate | Mapping[str, Any]) -> Project:
        payload = coerce_payload(ProjectCreate, data)
        project = Project(
            id=next(self._project_ids),
            name=payload.name,
            description=payload.description,
            template=payload.template,
            created_at=_now(),
        )
        self._projects[project.id] = project
        logger.debug("Project created", project_id=project.id)
        return project

    async def get_project(self, project_id: int) -> Project | None:
        return self._projects.get(project_id)

    async def list_projects(self) -> list[Project]:
        return sorted(
            self._projects.values(),
            key=lambda p: (p.created_at, p.id),
            reverse=True,
        )

    async def update_project(
        self, project_id: int, data: ProjectUpdate | Mapping[str, Any]
    ) -> Project | None:
        payload = coerce_payload(ProjectUpdate, data)
        project = self._projects.get(project_id)
        if project is None:
            return None

        updated = project.model_copy(update=payload.model_dump(exclude_unset=True))
        self._projects[project_id] = updated
        return updated

    async def delete_project(self, project_id: int) -> bool:
        if self._projects.pop(project_id, None) is None:
            return False

        file_ids = [f.id for f in self._files.values() if f.project_id == project_id]
        for file_id in file_ids:
            self._drop_file(file_id)
        self._drop_messages(project_id)

        logger.info("Project deleted", project_id=project_id, files=len(file_ids))
        return True

    # Files

    async def create_file(self, data: FileCreate | Mapping[str, Any]) -> File:
        payload = coerce_payload(FileCreate, data)
        self._require_project(payload.project_id)
        now = _now()
        file = File(
            id=next(self._file_ids),
            project_id=payload.project_id,
            name=payload.name,
            path=payload.path,
            content=payload.content,
            type=payload.type,
            created_at=now,
            updated_at=now,
        )
        self._files[file.id] = file
        return file

    async def get_file(self, file_id: int) -> File | None:
        return self._files.get(file_id)

    async def list_files_by_project(self, project_id: int) -> list[File]:
        return [f for f in self._files.values() if f.project_id == project_id]

    async def update_file_content(self, file_id: int, content: str) -> File | None:
        content = coerce_content(content)
        file = self._files.get(file_id)
        if file is None:
            return None

        versions = [v.version for v in self._versions.values() if v.file_id == file_id]
        now = _now()
        snapshot = FileVersion(
            id=next(self._version_ids),
            file_id=file_id,
            content=file.content,
            version=max(versions, default=0) + 1,
            created_at=now,
        )
        self._versions[snapshot.id] = snapshot

        updated = file.model_copy(update={"content": content, "updated_at": now})
        self._files[file_id] = updated
        logger.debug("File content updated", file_id=file_id, version=snapshot.version)
        return updated

    async def delete_file(self, file_id: int) -> bool:
        return self._drop_file(file_id)

    # Versions

    async def list_file_versions(self, file_id: int) -> list[FileVersion]:
        return sorted(
            (v for v in self._versions.values() if v.file_id == file_id),
            key=lambda v: v.version,
            reverse=True,
        )

    async def get_file_version(self, version_id: int) -> FileVersion | None:
        return self._versions.get(version_id)

    async def restore_file_version(self, file_id: int, version_id: int) -> File | None:
        file = self._files.get(file_id)
        version = self._versions.get(version_id)
        if file is None or version is None or version.file_id != file_id:
            return None

        restored = file.model_copy(update={"content": version.content, "updated_at": _now()})
        self._files[file_id] = restored
        logger.info("File version restored", file_id=file_id, version=version.version)
        return restored

    # Messages

    async def create_message(self, data: MessageCreate | Mapping[str, Any]) -> Message:
        payload = coerce_payload(MessageCreate, data)
        self._require_project(payload.project_id)
        message = Message(
            id=next(self._message_ids),
            project_id=payload.project_id,
            role=payload.role,
            content=payload.content,
            metadata=payload.metadata,
            created_at=_now(),
        )
        self._messages[message.id] = message
        return message

    async def list_messages_by_project(self, project_id: int) -> list[Message]:
        return sorted(
            (m for m in self._messages.values() if m.project_id == project_id),
            key=lambda m: (m.created_at, m.id),
        )

    async def delete_messages_by_project(self, project_id: int) -> bool:
        self._drop_messages(project_id)
        return True

    # Tests

    async def create_test(self, data: FileTestCreate | Mapping[str, Any]) -> FileTest:
        payload = coerce_payload(FileTestCreate, data)
        self._require_file(payload.file_id)
        now = _now()
        test = FileTest(
            id=next(self._test_ids),
            file_id=payload.file_id,
            name=payload.name,
            content=payload.content,
            status=payload.status,
            result=payload.result,
            created_at=now,
            updated_at=now,
        )
        self._tests[test.id] = test
        return test

    async def list_tests_by_file(self, file_id: int) -> list[FileTest]:
        return sorted(
            (t for t in self._tests.values() if t.file_id == file_id),
            key=lambda t: (t.created_at, t.id),
        )

    async def update_test(
        self, test_id: int, data: FileTestUpdate | Mapping[str, Any]
    ) -> FileTest | None:
        payload = coerce_payload(FileTestUpdate, data)
        test = self._tests.get(test_id)
        if test is None:
            return None

        changes = payload.model_dump(exclude_unset=True)
        changes["updated_at"] = _now()
        updated = test.model_copy(update=changes)
        self._tests[test_id] = updated
        return updated

    async def delete_test(self, test_id: int) -> bool:
        return self._tests.pop(test_id, None) is not None

    # Analyses

    async def create_ai_analysis(
        self, data: AiAnalysisCreate | Mapping[str, Any]
    ) -> AiAnalysis:
        payload = coerce_payload(AiAnalysisCreate, data)
        self._require_file(payload.file_id)
        analysis = AiAnalysis(
            id=next(self._analysis_ids),
            file_id=payload.file_id,
            analysis_type=payload.analysis_type,
            result=payload.result,
            severity=payload.severity,
            suggestions=payload.suggestions,
            metadata=payload.metadata,
            created_at=_now(),
        )
        self._analyses[analysis.id] = analysis
        return analysis

    async def list_analyses_by_file(self, file_id: int) -> list[AiAnalysis]:
        return sorted(
            (a for a in self._analyses.values() if a.file_id == file_id),
            key=lambda a: (a.created_at, a.id),
            reverse=True,
        )

    async def get_latest_analysis(
        self, file_id: int, analysis_type: AnalysisType | str
    ) -> AiAnalysis | None:
        kind = coerce_analysis_type(analysis_type)
        for analysis in await self.list_analyses_by_file(file_id):
            if analysis.analysis_type == kind:
                return analysis
        return None

    # Parents

    def _require_project(self, project_id: int) -> None:
        if project_id not in self._projects:
            raise NotFoundError("Project not found")

    def _require_file(self, file_id: int) -> None:
        if file_id not in self._files:
            raise NotFoundError("File not found")

    # Cascades

    def _drop_file(self, file_id: int) -> bool:
        if self._files.pop(file_id, None) is None:
            return False
        for store in (self._versions, self._tests, self._analyses):
            for key in [k for k, v in store.items() if v.file_id == file_id]:
                del store[key]
        return True

    def _drop_messages(self, project_id: int) -> None:
        for key in [k for k, m in self._messages.items() if m.project_id == project_id]:
            del self._messages[key]
