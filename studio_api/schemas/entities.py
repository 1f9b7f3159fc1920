"""Entity records and their insert payloads.

Records are what storage hands back; ``*Create`` models are the fields a
caller may supply (ids and timestamps are always assigned by storage).
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from studio_api.schemas.analysis import (
    AnalysisResult,
    AnalysisType,
    dump_analysis_result,
    parse_analysis_result,
)


# Largest id an INTEGER column holds; larger references can never match a row.
MAX_ENTITY_ID = 2**31 - 1

EntityRef = Annotated[int, Field(ge=1, le=MAX_ENTITY_ID)]


class FileType(str, Enum):
    """File type enum."""

    FILE = "file"
    FOLDER = "folder"
    TEST = "test"


class MessageRole(str, Enum):
    """Chat message author."""

    USER = "user"
    ASSISTANT = "assistant"


class FileTestStatus(str, Enum):
    """Execution status of a generated test."""

    PENDING = "pending"
    PASSED = "passed"
    FAILED = "failed"


class StudioModel(BaseModel):
    """Base model: camelCase JSON, snake_case attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# Projects


class ProjectCreate(StudioModel):
    name: str = Field(min_length=1, description="Project name")
    description: str | None = None
    template: str | None = None


class ProjectUpdate(StudioModel):
    """Partial project update; only fields present in the payload are applied."""

    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    template: str | None = None

    @field_validator("name")
    @classmethod
    def _name_not_null(cls, value: str | None) -> str:
        if value is None:
            raise ValueError("name cannot be null")
        return value


class Project(StudioModel):
    """Top-level container for files and chat history."""

    id: int
    name: str
    description: str | None = None
    template: str | None = None
    created_at: datetime


# Files


class FileCreate(StudioModel):
    project_id: EntityRef
    name: str = Field(min_length=1)
    path: str
    content: str = ""
    type: FileType


class FileContentUpdate(StudioModel):
    content: str


class File(StudioModel):
    """A pathed text artifact with live content."""

    id: int
    project_id: int
    name: str
    path: str
    content: str
    type: FileType
    created_at: datetime
    updated_at: datetime


class FileVersion(StudioModel):
    """Immutable snapshot of a file's content before an overwrite."""

    id: int
    file_id: int
    content: str
    version: int = Field(ge=1)
    created_at: datetime


# Messages


class MessageCreate(StudioModel):
    project_id: EntityRef
    role: MessageRole
    content: str
    metadata: str | None = None


class Message(StudioModel):
    id: int
    project_id: int
    role: MessageRole
    content: str
    metadata: str | None = None
    created_at: datetime


# Tests


class FileTestCreate(StudioModel):
    file_id: EntityRef
    name: str = Field(min_length=1)
    content: str
    status: FileTestStatus = FileTestStatus.PENDING
    result: str | None = None


class FileTestUpdate(StudioModel):
    name: str | None = Field(default=None, min_length=1)
    content: str | None = None
    status: FileTestStatus | None = None
    result: str | None = None

    @field_validator("name", "content", "status")
    @classmethod
    def _not_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("field cannot be null")
        return value


class FileTest(StudioModel):
    """Execution record of a generated test file."""

    id: int
    file_id: int
    name: str
    content: str
    status: FileTestStatus
    result: str | None = None
    created_at: datetime
    updated_at: datetime


# AI analyses


class AiAnalysisCreate(StudioModel):
    """Analysis payload.

    ``result`` may be given as a mapping or as a JSON string; either way it
    is validated against ``analysis_type`` and normalized to JSON text.
    """

    file_id: EntityRef
    analysis_type: AnalysisType
    result: dict[str, Any] | str
    severity: str | None = None
    suggestions: str | None = None
    metadata: str | None = None

    @model_validator(mode="after")
    def _validate_result(self) -> "AiAnalysisCreate":
        try:
            typed = parse_analysis_result(self.analysis_type, self.result)
        except PydanticValidationError as e:
            raise ValueError(
                f"invalid {self.analysis_type.value} result: {e.error_count()} error(s)"
            ) from e
        self.result = dump_analysis_result(typed)
        return self


class AiAnalysis(StudioModel):
    id: int
    file_id: int
    analysis_type: AnalysisType
    result: str
    severity: str | None = None
    suggestions: str | None = None
    metadata: str | None = None
    created_at: datetime

    def parsed_result(self) -> AnalysisResult:
        """Return the stored result as its typed model."""
        return parse_analysis_result(self.analysis_type, self.result)
