"""Admin API schemas."""

from datetime import datetime

from pydantic import BaseModel

from ..models import ReviewJobStatus


class ReviewJobResponse(BaseModel):
    """State of a review job."""

    id: int
    pull_request_id: int
    commit: str
    status: ReviewJobStatus
    error_message: str | None
    created_at: datetime
    started_at: datetime | None
    completed_at: datetime | None

    class Config:
        from_attributes = True


class ReviewJobListResponse(BaseModel):
    """Review jobs of a pull request."""

    jobs: list[ReviewJobResponse]


class DeveloperStatisticsResponse(BaseModel):
    """Violation totals of a developer across review runs."""

    developer_id: int
    name: str
    reviews: int
    violations: dict[str, int]
