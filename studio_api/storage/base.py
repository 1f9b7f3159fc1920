"""Storage contract shared by the in-memory and relational backends."""

import json
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from studio_api.errors import ValidationError
from studio_api.schemas import (
    AiAnalysis,
    AiAnalysisCreate,
    AnalysisType,
    File,
    FileContentUpdate,
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

PayloadT = TypeVar("PayloadT", bound=BaseModel)


def coerce_payload(model: type[PayloadT], data: PayloadT | Mapping[str, Any]) -> PayloadT:
    """Validate ``data`` against ``model``.

    Accepts an instance of the model (returned as is) or a mapping using
    either camelCase or snake_case keys.

    Raises:
        ValidationError: If required fields are missing or mistyped
    """
    if isinstance(data, model):
        return data
    if not isinstance(data, Mapping):
        raise ValidationError(f"Expected a mapping for {model.__name__}")
    try:
        return model.model_validate(dict(data))
    except PydanticValidationError as e:
        raise ValidationError(
            f"Invalid {model.__name__} data",
            errors=json.loads(e.json()),
        ) from e


def coerce_content(content: Any) -> str:
    return coerce_payload(FileContentUpdate, {"content": content}).content


def coerce_analysis_type(value: AnalysisType | str) -> AnalysisType:
    try:
        return AnalysisType(value)
    except ValueError as e:
        raise ValidationError(f"Unknown analysis type: {value}") from e


class Storage(ABC):
    """Sole reader and mutator of persisted entities.

    Every operation is awaitable regardless of backend. Missing entities are
    reported as ``None`` (or ``False`` for deletes), never raised. Creating a
    child of a missing project or file raises ``NotFoundError``. Malformed
    payloads raise ``ValidationError``; backend failures raise
    ``StorageError``.

    Concurrent ``update_file_content`` calls on the same file are not
    serialized: a single writer per file is assumed.
    """

    name: str = "abstract"

    # Projects

    @abstractmethod
    async def create_project(self, data: ProjectCreate | Mapping[str, Any]) -> Project:
        """Create a project.

        Args:
            data: Project payload; ``name`` must be a non-empty string

        Returns:
            The stored project with id and ``created_at`` assigned
        """

    @abstractmethod
    async def get_project(self, project_id: int) -> Project | None:
        pass

    @abstractmethod
    async def list_projects(self) -> list[Project]:
        """List all projects, newest first."""

    @abstractmethod
    async def update_project(
        self, project_id: int, data: ProjectUpdate | Mapping[str, Any]
    ) -> Project | None:
        """Merge the supplied fields into a project. ``created_at`` is never touched."""

    @abstractmethod
    async def delete_project(self, project_id: int) -> bool:
        """Delete a project and everything it owns.

        Files and messages go with it, as do the versions, tests and
        analyses of those files.

        Returns:
            False if the project did not exist
        """

    # Files

    @abstractmethod
    async def create_file(self, data: FileCreate | Mapping[str, Any]) -> File:
        """Create a file in an existing project.

        Raises:
            NotFoundError: If the project does not exist
        """

    @abstractmethod
    async def get_file(self, file_id: int) -> File | None:
        pass

    @abstractmethod
    async def list_files_by_project(self, project_id: int) -> list[File]:
        pass

    @abstractmethod
    async def update_file_content(self, file_id: int, content: str) -> File | None:
        """Overwrite a file's content, recording the previous content as a version.

        The snapshot gets ``version = max(existing) + 1`` (1 for the first
        write). This is the only operation that creates versions.

        Args:
            file_id: File to update
            content: New live content

        Returns:
            The updated file, or None if it does not exist
        """

    @abstractmethod
    async def delete_file(self, file_id: int) -> bool:
        """Delete a file with its versions, tests and analyses."""

    # Versions

    @abstractmethod
    async def list_file_versions(self, file_id: int) -> list[FileVersion]:
        """List versions of a file, highest version number first."""

    @abstractmethod
    async def get_file_version(self, version_id: int) -> FileVersion | None:
        pass

    @abstractmethod
    async def restore_file_version(self, file_id: int, version_id: int) -> File | None:
        """Copy a version's content back into its file.

        Restoring is a direct overwrite and does not record a new version.

        Returns:
            The updated file, or None if the file or version is missing or
            the version belongs to a different file
        """

    # Messages

    @abstractmethod
    async def create_message(self, data: MessageCreate | Mapping[str, Any]) -> Message:
        """Append a message to an existing project's history."""

    @abstractmethod
    async def list_messages_by_project(self, project_id: int) -> list[Message]:
        """List a project's messages, oldest first."""

    @abstractmethod
    async def delete_messages_by_project(self, project_id: int) -> bool:
        """Delete all messages of a project. Always returns True."""

    # Tests

    @abstractmethod
    async def create_test(self, data: FileTestCreate | Mapping[str, Any]) -> FileTest:
        """Attach a test record to an existing file."""

    @abstractmethod
    async def list_tests_by_file(self, file_id: int) -> list[FileTest]:
        pass

    @abstractmethod
    async def update_test(
        self, test_id: int, data: FileTestUpdate | Mapping[str, Any]
    ) -> FileTest | None:
        pass

    @abstractmethod
    async def delete_test(self, test_id: int) -> bool:
        pass

    # Analyses

    @abstractmethod
    async def create_ai_analysis(
        self, data: AiAnalysisCreate | Mapping[str, Any]
    ) -> AiAnalysis:
        pass

    @abstractmethod
    async def list_analyses_by_file(self, file_id: int) -> list[AiAnalysis]:
        """List a file's analyses, newest first."""

    @abstractmethod
    async def get_latest_analysis(
        self, file_id: int, analysis_type: AnalysisType | str
    ) -> AiAnalysis | None:
        pass

    async def close(self) -> None:
        """Release backend resources."""
