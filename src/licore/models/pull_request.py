"""Pull request model."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .repository import Repository
    from .review_job import ReviewJob


class PullRequest(Base):
    """A pull request known to the reviewer."""

    __tablename__ = "pull_requests"
    __table_args__ = (
        UniqueConstraint("repository_id", "scm_id", name="uq_repository_pull_request"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    repository_id: Mapped[int] = mapped_column(
        ForeignKey("repositories.id", ondelete="CASCADE"),
        index=True,
    )

    # Bitbucket's pull request id (scoped to the repository)
    scm_id: Mapped[int] = mapped_column(Integer)
    title: Mapped[str] = mapped_column(String(500), default="")
    author_slug: Mapped[str | None] = mapped_column(String(255), nullable=True)
    latest_commit: Mapped[str] = mapped_column(String(40), index=True)

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
    repository: Mapped["Repository"] = relationship(back_populates="pull_requests")
    review_jobs: Mapped[list["ReviewJob"]] = relationship(
        back_populates="pull_request",
        cascade="all, delete-orphan",
    )

    def short_hash(self, length: int = 8) -> str:
        """Commit hash prefix used to key the workspace."""
        return self.latest_commit[:length]
