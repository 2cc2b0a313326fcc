"""Review request/response schemas."""

from pydantic import BaseModel


class ReviewResponse(BaseModel):
    """Response after triggering a review."""

    job_id: int
    status: str
    message: str
