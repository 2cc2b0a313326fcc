"""Bitbucket webhook endpoints."""

import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from procrastinate.exceptions import AlreadyEnqueued
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_session
from ..schemas.bitbucket_webhooks import PullRequestEvent
from ..services.job_manager import create_review_job, register_pull_request
from ..tasks.review_tasks import enqueue_review
from ..utils.bitbucket_auth import verify_webhook_signature

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])

REVIEW_EVENTS = ("pr:opened", "pr:from_ref_updated", "pr:reopened")


@router.post("/bitbucket")
async def bitbucket_webhook(
    request: Request,
    x_event_key: str = Header(..., alias="X-Event-Key"),
    x_hub_signature: str | None = Header(None, alias="X-Hub-Signature"),
    session: AsyncSession = Depends(get_session),
) -> dict:
    """
    Main Bitbucket Server webhook endpoint.

    Handles: pr:opened, pr:from_ref_updated, pr:reopened, diagnostics:ping
    """
    body = await request.body()

    # Verify signature
    if not verify_webhook_signature(body, x_hub_signature):
        raise HTTPException(status_code=401, detail="Invalid signature")

    if x_event_key == "diagnostics:ping":
        return {"status": "pong"}

    if x_event_key not in REVIEW_EVENTS:
        return {"status": "ignored", "event": x_event_key}

    event = PullRequestEvent(**(await request.json()))
    pull_request = await register_pull_request(session, event)
    if not pull_request:
        await session.commit()
        return {"status": "ignored", "event": x_event_key}

    job = await create_review_job(session, pull_request)
    await session.commit()

    logger.info(
        f"Queueing review for {event.pull_request.to_ref.repository.slug}"
        f"#{pull_request.scm_id} (sha={pull_request.latest_commit[:8]}, event={x_event_key})"
    )
    try:
        await enqueue_review(pull_request)
    except AlreadyEnqueued:
        logger.info(f"Review of pull request {pull_request.id} already queued")

    return {"status": "queued", "job_id": job.id}
