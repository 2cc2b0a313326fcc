"""Procrastinate task definitions."""

from .review_tasks import enqueue_review, run_review
from .worker import app as procrastinate_app

__all__ = [
    "enqueue_review",
    "procrastinate_app",
    "run_review",
]
