"""AI analysis result cache."""

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from studio_api.db.models.base import Base


class AiAnalysis(Base):
    """Append-only analysis result, keyed by file and analysis type."""

    __tablename__ = "ai_analyses"
    __table_args__ = (
        Index("ix_ai_analyses_file_id_analysis_type", "file_id", "analysis_type"),
    )

    file_id: Mapped[int] = mapped_column(
        ForeignKey("files.id"),
        nullable=False,
        index=True,
    )
    analysis_type: Mapped[str] = mapped_column(String(50), nullable=False)
    result: Mapped[str] = mapped_column(Text, nullable=False)  # JSON
    severity: Mapped[str | None] = mapped_column(String(20), nullable=True)
    suggestions: Mapped[str | None] = mapped_column(Text, nullable=True)
    metadata_: Mapped[str | None] = mapped_column("metadata", Text, nullable=True)
