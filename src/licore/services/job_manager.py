"""Register pull requests and review jobs from webhook events."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Developer, Project, PullRequest, Repository, ReviewJob, ReviewJobStatus
from ..schemas.bitbucket_webhooks import PullRequestEvent

logger = logging.getLogger(__name__)


async def register_pull_request(
    session: AsyncSession,
    event: PullRequestEvent,
) -> PullRequest | None:
    """
    Create or update the pull request record of an event.

    Returns None when the event's project is not configured for review.
    """
    pr_data = event.pull_request
    repo_data = pr_data.to_ref.repository

    result = await session.execute(
        select(Project).where(Project.scm_project_key == repo_data.project.key)
    )
    project = result.scalar_one_or_none()
    if not project:
        logger.info(f"Ignoring event for unknown project {repo_data.project.key}")
        return None

    # Find or create repo
    result = await session.execute(
        select(Repository).where(
            Repository.project_id == project.id,
            Repository.slug == repo_data.slug,
        )
    )
    repository = result.scalar_one_or_none()
    if not repository:
        repository = Repository(project_id=project.id, name=repo_data.name, slug=repo_data.slug)
        session.add(repository)
        await session.flush()

    # Make sure the author has a developer record for statistics
    author = pr_data.author.user
    result = await session.execute(
        select(Developer).where(
            Developer.repository_id == repository.id,
            Developer.slug == author.slug,
        )
    )
    if not result.scalar_one_or_none():
        session.add(
            Developer(
                repository_id=repository.id,
                name=author.display_name or author.name,
                slug=author.slug,
            )
        )

    # Find or create pull request
    result = await session.execute(
        select(PullRequest).where(
            PullRequest.repository_id == repository.id,
            PullRequest.scm_id == pr_data.id,
        )
    )
    pull_request = result.scalar_one_or_none()
    if not pull_request:
        pull_request = PullRequest(repository_id=repository.id, scm_id=pr_data.id)
        session.add(pull_request)

    pull_request.title = pr_data.title
    pull_request.author_slug = author.slug
    pull_request.latest_commit = pr_data.from_ref.latest_commit
    await session.flush()

    return pull_request


async def create_review_job(session: AsyncSession, pull_request: PullRequest) -> ReviewJob:
    """
    Create a pending review job for the pull request's head commit.

    A job still pending for the pull request is reused: its queued run will
    review the newest commit anyway.
    """
    result = await session.execute(
        select(ReviewJob)
        .where(ReviewJob.pull_request_id == pull_request.id)
        .order_by(ReviewJob.id.desc())
    )
    job = result.scalars().first()
    if job and job.status == ReviewJobStatus.PENDING:
        job.commit = pull_request.latest_commit
        await session.flush()
        return job

    job = ReviewJob(
        pull_request_id=pull_request.id,
        commit=pull_request.latest_commit,
        status=ReviewJobStatus.PENDING,
    )
    session.add(job)
    await session.flush()
    return job
