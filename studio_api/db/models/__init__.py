"""Database models package."""

from studio_api.db.models.base import Base
from studio_api.db.models.project import Project
from studio_api.db.models.file import File, FileVersion
from studio_api.db.models.message import Message
from studio_api.db.models.file_test import FileTest
from studio_api.db.models.analysis import AiAnalysis

__all__ = [
    "Base",
    "Project",
    "File",
    "FileVersion",
    "Message",
    "FileTest",
    "AiAnalysis",
]
