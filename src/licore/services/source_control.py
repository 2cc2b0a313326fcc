"""Source control service interface.

The review pipeline depends on SourceControlService, not on a concrete
vendor client, so implementations are swappable (and fakeable in tests).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..models import PullRequest, Repository
from .diff_parser import Diff


class CommentType(str, Enum):
    """Severity of a posted comment, mirrors the linter's severity."""

    WARNING = "warning"
    ERROR = "error"


@dataclass
class Comment:
    """A review comment; ``line`` and ``path`` are unset for general comments."""

    line: int | None
    line_type: str
    rule_description: str
    content: str
    path: str
    type: CommentType
    id: int | None = None

    @property
    def is_inline(self) -> bool:
        return self.line is not None and bool(self.path)


@dataclass
class Task:
    """An open issue tracked on the pull request."""

    description: str
    occurrence: int = 0
    id: int | None = None


class SourceControlService(ABC):
    """Operations the review pipeline needs from the source control server."""

    @abstractmethod
    async def delete_all_comments(self, repository: Repository, pull_request_id: int) -> None:
        """Delete every comment on the pull request."""

    @abstractmethod
    async def get_tasks(
        self, repository: Repository, pull_request: PullRequest
    ) -> list[Task | None]:
        """Return the open tasks of the pull request (may be empty)."""

    @abstractmethod
    async def download_sources(
        self, repository: Repository, pull_request: PullRequest, destination: Path
    ) -> Path:
        """Download the source archive of the head commit to ``destination``."""

    @abstractmethod
    async def get_diff(self, repository: Repository, pull_request_id: int) -> Diff:
        """Return the diff of the pull request."""

    @abstractmethod
    async def post_comment(
        self,
        repository: Repository,
        pull_request: PullRequest,
        comment: Comment,
        diff: Diff,
    ) -> None:
        """Post one inline comment."""

    @abstractmethod
    async def post_general_comment(
        self,
        repository: Repository,
        pull_request: PullRequest,
        comments: list[Comment],
    ) -> None:
        """Post a batch of general comments."""

    @abstractmethod
    async def approve_pull_request(self, repository: Repository, pull_request_id: int) -> None:
        """Approve the pull request."""

    @abstractmethod
    async def mark_needs_rework(self, repository: Repository, pull_request_id: int) -> None:
        """Mark the pull request as needing work."""

    @abstractmethod
    async def resolve_task(self, task_id: int) -> None:
        """Resolve an open task."""

    @abstractmethod
    async def post_tasks(
        self, repository: Repository, pull_request_id: int, tasks: list[Task]
    ) -> int:
        """Create open tasks on the pull request; returns the HTTP status."""
