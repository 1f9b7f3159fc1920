"""Entity model for projects, files, versions, messages, tests and analyses."""

from studio_api.schemas.analysis import (
    AnalysisResult,
    AnalysisType,
    validate_analysis_result,
)
from studio_api.schemas.entities import (
    AiAnalysis,
    AiAnalysisCreate,
    EntityRef,
    File,
    FileContentUpdate,
    FileCreate,
    FileTest,
    FileTestCreate,
    FileTestStatus,
    FileTestUpdate,
    FileType,
    FileVersion,
    Message,
    MessageCreate,
    MAX_ENTITY_ID,
    MessageRole,
    Project,
    ProjectCreate,
    ProjectUpdate,
)

__all__ = [
    "AiAnalysis",
    "AiAnalysisCreate",
    "AnalysisResult",
    "AnalysisType",
    "EntityRef",
    "File",
    "FileContentUpdate",
    "FileCreate",
    "FileTest",
    "FileTestCreate",
    "FileTestStatus",
    "FileTestUpdate",
    "FileType",
    "FileVersion",
    "MAX_ENTITY_ID",
    "Message",
    "MessageCreate",
    "MessageRole",
    "Project",
    "ProjectCreate",
    "ProjectUpdate",
    "validate_analysis_result",
]
