"""Developer statistics and review job persistence."""

from collections import Counter
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Developer, ReviewJob, ReviewJobStatus, ReviewStatistics


async def find_developer(
    session: AsyncSession,
    repository_id: int,
    author_slug: str | None = None,
) -> Developer | None:
    """
    Find the developer statistics are attributed to.

    Prefers the developer matching the pull request author, then the first
    developer of the repository.
    """
    if author_slug:
        result = await session.execute(
            select(Developer).where(
                Developer.repository_id == repository_id,
                Developer.slug == author_slug,
            )
        )
        developer = result.scalars().first()
        if developer:
            return developer

    result = await session.execute(
        select(Developer)
        .where(Developer.repository_id == repository_id)
        .order_by(Developer.id)
    )
    return result.scalars().first()


async def save_statistics(
    session: AsyncSession,
    developer_id: int,
    violations: dict[str, int],
    pull_request_id: int | None = None,
) -> ReviewStatistics:
    """Persist the rule counts of one review run."""
    statistics = ReviewStatistics(
        developer_id=developer_id,
        pull_request_id=pull_request_id,
        violations=violations,
    )
    session.add(statistics)
    await session.flush()
    return statistics


async def developer_totals(session: AsyncSession, developer_id: int) -> tuple[int, dict[str, int]]:
    """
    Sum a developer's statistics over all review runs.

    Returns: (review_count, {rule_name: total})
    """
    result = await session.execute(
        select(ReviewStatistics).where(ReviewStatistics.developer_id == developer_id)
    )
    records = result.scalars().all()

    totals: Counter[str] = Counter()
    for record in records:
        totals.update(record.violations or {})
    return len(records), dict(totals)


async def find_review_job(session: AsyncSession, pull_request_id: int) -> ReviewJob | None:
    """Most recent review job of a pull request."""
    result = await session.execute(
        select(ReviewJob)
        .where(ReviewJob.pull_request_id == pull_request_id)
        .order_by(ReviewJob.id.desc())
    )
    return result.scalars().first()


async def set_job_status(
    session: AsyncSession,
    job: ReviewJob,
    status: ReviewJobStatus,
    error_message: str | None = None,
) -> None:
    """Move a job to a new status and stamp its timestamps."""
    job.status = status
    now = datetime.utcnow()
    if status == ReviewJobStatus.RUNNING:
        job.started_at = now
        job.error_message = None
    elif status in (ReviewJobStatus.DONE, ReviewJobStatus.FAILED):
        job.completed_at = now
        job.error_message = error_message
    await session.flush()
