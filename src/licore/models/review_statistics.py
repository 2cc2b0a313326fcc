"""Review statistics model."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, JSONType

if TYPE_CHECKING:
    from .developer import Developer


class ReviewStatistics(Base):
    """Per-rule violation counts of one review run."""

    __tablename__ = "review_statistics"

    id: Mapped[int] = mapped_column(primary_key=True)
    developer_id: Mapped[int] = mapped_column(
        ForeignKey("developers.id", ondelete="CASCADE"),
        index=True,
    )
    pull_request_id: Mapped[int | None] = mapped_column(
        ForeignKey("pull_requests.id", ondelete="SET NULL"),
        nullable=True,
    )

    # {"Line Length": 3, "Force Cast": 1}
    violations: Mapped[dict[str, int]] = mapped_column(JSONType, default=dict)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    # Relationships
    developer: Mapped["Developer"] = relationship(back_populates="statistics")
