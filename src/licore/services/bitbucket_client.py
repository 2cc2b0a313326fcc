"""Async Bitbucket Server API client."""

import logging
import re
from pathlib import Path
from typing import Any

import httpx

from ..config import settings
from ..models import PullRequest, Repository
from .diff_parser import Diff, parse_bitbucket_diff
from .source_control import Comment, SourceControlService, Task

logger = logging.getLogger(__name__)

API_PATH = "/rest/api/1.0"
PAGE_LIMIT = 100
TASKS_COMMENT = "**Open tasks** from this review"
TASK_TEXT_RE = re.compile(r"^(?P<description>.+) \((?P<occurrence>\d+)x\)$")


def format_comment(comment: Comment) -> str:
    """Markdown body of a single comment."""
    return f"[{comment.type.value.upper()}] **{comment.rule_description}**: {comment.content}"


def format_general_comments(comments: list[Comment]) -> str:
    """Markdown body listing a batch of general comments."""
    lines = ["## Lint Review", ""]
    lines.extend(f"- {format_comment(comment)}" for comment in comments)
    return "\n".join(lines)


def format_task(task: Task) -> str:
    return f"{task.description} ({task.occurrence}x)"


def parse_task(value: dict[str, Any]) -> Task:
    """Build a Task from a Bitbucket task, reading back the occurrence count."""
    text = value.get("text", "")
    match = TASK_TEXT_RE.match(text)
    if match:
        return Task(
            description=match.group("description"),
            occurrence=int(match.group("occurrence")),
            id=value.get("id"),
        )
    return Task(description=text, id=value.get("id"))


class BitbucketClient(SourceControlService):
    """Async Bitbucket Server API client for one project."""

    def __init__(
        self,
        project_key: str,
        base_url: str | None = None,
        token: str | None = None,
        user_slug: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.project_key = project_key
        self.base_url = (base_url or settings.bitbucket_base_url).rstrip("/")
        self.user_slug = user_slug or settings.bitbucket_user_slug
        self._token = token or settings.bitbucket_token
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "BitbucketClient":
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {self._token}",
                "Accept": "application/json",
            },
            timeout=30.0,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()

    def _repo_path(self, repository: Repository) -> str:
        return f"{API_PATH}/projects/{self.project_key}/repos/{repository.slug}"

    def _pull_request_path(self, repository: Repository, pull_request_id: int) -> str:
        return f"{self._repo_path(repository)}/pull-requests/{pull_request_id}"

    async def _get_paged(
        self,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Collect all values of a paged Bitbucket resource."""
        assert self._client is not None
        values: list[dict[str, Any]] = []
        start = 0
        while True:
            response = await self._client.get(
                path,
                params={**(params or {}), "start": start, "limit": PAGE_LIMIT},
            )
            response.raise_for_status()
            page = response.json()
            values.extend(page.get("values", []))
            if page.get("isLastPage", True):
                break
            start = page["nextPageStart"]
        return values

    async def delete_all_comments(self, repository: Repository, pull_request_id: int) -> None:
        """
        Delete the reviewer's comments on the pull request.

        Only the reviewer user's own comments are deleted; Bitbucket refuses
        deleting other users' comments. Comments Bitbucket keeps because of
        replies or tasks are skipped.
        """
        assert self._client is not None
        pr_path = self._pull_request_path(repository, pull_request_id)
        activities = await self._get_paged(f"{pr_path}/activities")

        deleted = 0
        for activity in activities:
            comment = activity.get("comment")
            if activity.get("action") != "COMMENTED" or not comment:
                continue
            if comment.get("author", {}).get("slug") != self.user_slug:
                continue

            response = await self._client.delete(
                f"{pr_path}/comments/{comment['id']}",
                params={"version": comment.get("version", 0)},
            )
            # Comments with replies or attached tasks cannot be deleted
            if response.status_code == httpx.codes.CONFLICT:
                logger.warning(f"Comment {comment['id']} could not be deleted: 409 Conflict")
                continue
            response.raise_for_status()
            deleted += 1

        logger.info(f"Deleted {deleted} comments from pull request {pull_request_id}")

    async def get_tasks(
        self, repository: Repository, pull_request: PullRequest
    ) -> list[Task | None]:
        """Get the open tasks of the pull request."""
        values = await self._get_paged(
            f"{self._pull_request_path(repository, pull_request.scm_id)}/tasks"
        )
        return [
            parse_task(value)
            for value in values
            if value.get("state") == "OPEN"
        ]

    async def download_sources(
        self, repository: Repository, pull_request: PullRequest, destination: Path
    ) -> Path:
        """Stream a zip archive of the head commit to ``destination``."""
        assert self._client is not None
        async with self._client.stream(
            "GET",
            f"{self._repo_path(repository)}/archive",
            params={"at": pull_request.latest_commit, "format": "zip"},
            headers={"Accept": "application/zip"},
        ) as response:
            response.raise_for_status()
            with destination.open("wb") as f:
                async for chunk in response.aiter_bytes():
                    f.write(chunk)
        return destination

    async def get_diff(self, repository: Repository, pull_request_id: int) -> Diff:
        """Get the pull request diff with hunk/segment structure."""
        assert self._client is not None
        response = await self._client.get(
            f"{self._pull_request_path(repository, pull_request_id)}/diff",
            params={"withComments": "false"},
        )
        response.raise_for_status()
        return parse_bitbucket_diff(response.json())

    async def post_comment(
        self,
        repository: Repository,
        pull_request: PullRequest,
        comment: Comment,
        diff: Diff,
    ) -> None:
        """
        Post a comment anchored to a line of the diff.

        Anchor format:
        {
            "line": 10,
            "lineType": "ADDED",  # ADDED, REMOVED, CONTEXT
            "fileType": "TO",
            "path": "Sources/App/File.swift"
        }
        """
        assert self._client is not None
        anchor: dict[str, Any] = {
            "line": comment.line,
            "lineType": comment.line_type,
            "fileType": "TO",
            "path": comment.path,
            "diffType": "EFFECTIVE",
        }
        if diff.from_hash and diff.to_hash:
            anchor["fromHash"] = diff.from_hash
            anchor["toHash"] = diff.to_hash

        response = await self._client.post(
            f"{self._pull_request_path(repository, pull_request.scm_id)}/comments",
            json={"text": format_comment(comment), "anchor": anchor},
        )
        response.raise_for_status()

    async def _post_text_comment(
        self, repository: Repository, pull_request_id: int, text: str
    ) -> dict[str, Any]:
        assert self._client is not None
        response = await self._client.post(
            f"{self._pull_request_path(repository, pull_request_id)}/comments",
            json={"text": text},
        )
        response.raise_for_status()
        return response.json()

    async def post_general_comment(
        self,
        repository: Repository,
        pull_request: PullRequest,
        comments: list[Comment],
    ) -> None:
        """Post general comments as one summary comment."""
        await self._post_text_comment(
            repository, pull_request.scm_id, format_general_comments(comments)
        )

    async def _set_participant_status(
        self, repository: Repository, pull_request_id: int, status: str
    ) -> None:
        """Set the reviewer user's status: APPROVED, NEEDS_WORK or UNAPPROVED."""
        assert self._client is not None
        response = await self._client.put(
            f"{self._pull_request_path(repository, pull_request_id)}"
            f"/participants/{self.user_slug}",
            json={
                "user": {"slug": self.user_slug},
                "approved": status == "APPROVED",
                "status": status,
            },
        )
        response.raise_for_status()

    async def approve_pull_request(self, repository: Repository, pull_request_id: int) -> None:
        await self._set_participant_status(repository, pull_request_id, "APPROVED")

    async def mark_needs_rework(self, repository: Repository, pull_request_id: int) -> None:
        await self._set_participant_status(repository, pull_request_id, "NEEDS_WORK")

    async def resolve_task(self, task_id: int) -> None:
        assert self._client is not None
        response = await self._client.put(
            f"{API_PATH}/tasks/{task_id}",
            json={"id": task_id, "state": "RESOLVED"},
        )
        response.raise_for_status()

    async def post_tasks(
        self, repository: Repository, pull_request_id: int, tasks: list[Task]
    ) -> int:
        """
        Create tasks anchored to a summary comment.

        Bitbucket tasks must hang off a comment, so one comment is posted
        first and every task is attached to it.
        """
        assert self._client is not None
        anchor = await self._post_text_comment(repository, pull_request_id, TASKS_COMMENT)

        status = httpx.codes.CREATED
        for task in tasks:
            response = await self._client.post(
                f"{API_PATH}/tasks",
                json={
                    "anchor": {"id": anchor["id"], "type": "COMMENT"},
                    "text": format_task(task),
                },
            )
            response.raise_for_status()
            status = response.status_code
        return int(status)
