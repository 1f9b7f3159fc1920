"""Project model."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from studio_api.db.models.base import Base


class Project(Base):
    """Project row; owns files and messages."""

    __tablename__ = "projects"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    template: Mapped[str | None] = mapped_column(String(100), nullable=True)
