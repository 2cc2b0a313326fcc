"""Review job model."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, String, Text, func
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .pull_request import PullRequest


class ReviewJobStatus(str, Enum):
    """Status of a review job."""

    PENDING = "pending"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"


class ReviewJob(Base):
    """Tracks one asynchronous review run for a pull request."""

    __tablename__ = "review_jobs"
    # created_at is read back on insert; job responses are built right after
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(primary_key=True)
    pull_request_id: Mapped[int] = mapped_column(
        ForeignKey("pull_requests.id", ondelete="CASCADE"),
        index=True,
    )

    commit: Mapped[str] = mapped_column(String(40))
    status: Mapped[ReviewJobStatus] = mapped_column(
        SQLEnum(ReviewJobStatus),
        default=ReviewJobStatus.PENDING,
        index=True,
    )

    # Error info if failed
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Relationships
    pull_request: Mapped["PullRequest"] = relationship(back_populates="review_jobs")
