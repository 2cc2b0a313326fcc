"""Pydantic schemas for API validation."""

from .admin import DeveloperStatisticsResponse, ReviewJobListResponse, ReviewJobResponse
from .bitbucket_webhooks import (
    BitbucketParticipant,
    BitbucketProject,
    BitbucketPullRequest,
    BitbucketRef,
    BitbucketRepository,
    BitbucketUser,
    PullRequestEvent,
)
from .review import ReviewResponse

__all__ = [
    "BitbucketParticipant",
    "BitbucketProject",
    "BitbucketPullRequest",
    "BitbucketRef",
    "BitbucketRepository",
    "BitbucketUser",
    "DeveloperStatisticsResponse",
    "PullRequestEvent",
    "ReviewJobListResponse",
    "ReviewJobResponse",
    "ReviewResponse",
]
