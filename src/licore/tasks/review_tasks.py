"""Review task definitions for Procrastinate."""

import logging

from ..config import settings
from ..database import async_session_factory
from ..models import Project, PullRequest, Repository
from ..services.bitbucket_client import BitbucketClient
from ..services.linter import SwiftLintRunner
from ..services.review_pipeline import ReviewPipeline
from .worker import app

logger = logging.getLogger(__name__)


def review_locks(pull_request: PullRequest) -> dict[str, str]:
    """Job locks: one running job per commit, one queued job per pull request."""
    return {
        "lock": f"commit:{pull_request.short_hash(settings.short_hash_length)}",
        "queueing_lock": f"pr:{pull_request.id}",
    }


@app.task(
    name="run_review",
    queue=settings.review_queue,
    retry=settings.review_retry_attempts,
)
async def run_review(pull_request_id: int) -> None:
    """Run the lint review pipeline for a pull request."""
    async with async_session_factory() as session:
        pull_request = await session.get(PullRequest, pull_request_id)
        if not pull_request:
            logger.warning(f"Pull request {pull_request_id} not found!")
            return

        repository = await session.get(Repository, pull_request.repository_id)
        project = await session.get(Project, repository.project_id) if repository else None
        if not repository or not project:
            logger.warning(f"Repository of pull request {pull_request_id} not found!")
            return

        async with BitbucketClient(project.scm_project_key) as scm:
            pipeline = ReviewPipeline(session, scm, SwiftLintRunner())
            result = await pipeline.run(project, repository, pull_request)

        logger.info(
            f"Review of {repository.name}#{pull_request.scm_id} finished: "
            f"{result.outcome.value} ({result.violations} violations)"
        )


async def enqueue_review(pull_request: PullRequest) -> None:
    """Defer a review run for the pull request's head commit."""
    await run_review.configure(**review_locks(pull_request)).defer_async(
        pull_request_id=pull_request.id,
    )
