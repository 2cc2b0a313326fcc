"""Database models."""

from .base import Base
from .developer import Developer
from .project import Project
from .pull_request import PullRequest
from .repository import Repository
from .review_job import ReviewJob, ReviewJobStatus
from .review_statistics import ReviewStatistics

__all__ = [
    "Base",
    "Developer",
    "Project",
    "PullRequest",
    "Repository",
    "ReviewJob",
    "ReviewJobStatus",
    "ReviewStatistics",
]
