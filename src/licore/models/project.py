"""Project model."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, JSONType

if TYPE_CHECKING:
    from .repository import Repository


class Project(Base):
    """A Bitbucket project and the lint rules applied to its repositories."""

    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    scm_project_key: Mapped[str] = mapped_column(String(64), unique=True, index=True)

    # SwiftLint rule identifiers to run (empty = linter defaults)
    rules: Mapped[list[str]] = mapped_column(JSONType, default=list)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    # Relationships
    repositories: Mapped[list["Repository"]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
    )
