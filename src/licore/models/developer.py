"""Developer model."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .repository import Repository
    from .review_statistics import ReviewStatistics


class Developer(Base):
    """A developer contributing to a repository."""

    __tablename__ = "developers"

    id: Mapped[int] = mapped_column(primary_key=True)
    repository_id: Mapped[int] = mapped_column(
        ForeignKey("repositories.id", ondelete="CASCADE"),
        index=True,
    )

    name: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    # Relationships
    repository: Mapped["Repository"] = relationship(back_populates="developers")
    statistics: Mapped[list["ReviewStatistics"]] = relationship(
        back_populates="developer",
        cascade="all, delete-orphan",
    )
