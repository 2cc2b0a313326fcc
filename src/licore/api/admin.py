"""Admin API endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from procrastinate.exceptions import AlreadyEnqueued
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_session
from ..models import Developer, PullRequest, ReviewJob
from ..schemas.admin import (
    DeveloperStatisticsResponse,
    ReviewJobListResponse,
    ReviewJobResponse,
)
from ..schemas.review import ReviewResponse
from ..services.job_manager import create_review_job
from ..services.statistics import developer_totals
from ..tasks.review_tasks import enqueue_review

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/jobs/{job_id}", response_model=ReviewJobResponse)
async def get_job(
    job_id: int,
    session: AsyncSession = Depends(get_session),
) -> ReviewJobResponse:
    """Get a review job."""
    job = await session.get(ReviewJob, job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Review job not found")
    return ReviewJobResponse.model_validate(job)


@router.get("/pull-requests/{pull_request_id}/jobs", response_model=ReviewJobListResponse)
async def list_pull_request_jobs(
    pull_request_id: int,
    session: AsyncSession = Depends(get_session),
) -> ReviewJobListResponse:
    """List review jobs of a pull request, newest first."""
    result = await session.execute(
        select(ReviewJob)
        .where(ReviewJob.pull_request_id == pull_request_id)
        .order_by(ReviewJob.id.desc())
    )
    return ReviewJobListResponse(
        jobs=[ReviewJobResponse.model_validate(j) for j in result.scalars().all()]
    )


@router.post("/pull-requests/{pull_request_id}/review", response_model=ReviewResponse)
async def trigger_review(
    pull_request_id: int,
    session: AsyncSession = Depends(get_session),
) -> ReviewResponse:
    """Manually queue a review of a pull request."""
    pull_request = await session.get(PullRequest, pull_request_id)
    if not pull_request:
        raise HTTPException(status_code=404, detail="Pull request not found")

    job = await create_review_job(session, pull_request)
    await session.commit()

    try:
        await enqueue_review(pull_request)
        message = "Review queued"
    except AlreadyEnqueued:
        message = "Review already queued"

    return ReviewResponse(job_id=job.id, status=job.status.value, message=message)


@router.get("/developers/{developer_id}/statistics", response_model=DeveloperStatisticsResponse)
async def get_developer_statistics(
    developer_id: int,
    session: AsyncSession = Depends(get_session),
) -> DeveloperStatisticsResponse:
    """Violation totals of a developer across all review runs."""
    developer = await session.get(Developer, developer_id)
    if not developer:
        raise HTTPException(status_code=404, detail="Developer not found")

    reviews, violations = await developer_totals(session, developer_id)
    return DeveloperStatisticsResponse(
        developer_id=developer.id,
        name=developer.name,
        reviews=reviews,
        violations=violations,
    )
