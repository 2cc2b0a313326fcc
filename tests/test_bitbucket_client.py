"""Tests for the Bitbucket Server client."""

import json

import httpx
import pytest

from licore.models import PullRequest, Repository
from licore.services.bitbucket_client import (
    BitbucketClient,
    format_comment,
    format_general_comments,
    parse_task,
)
from licore.services.diff_parser import Diff, SegmentType
from licore.services.source_control import Comment, CommentType, Task

PR_PATH = "/rest/api/1.0/projects/MOB/repos/ios-app/pull-requests/42"


@pytest.fixture
def repo():
    return Repository(id=1, project_id=1, name="iOS App", slug="ios-app")


@pytest.fixture
def pr():
    return PullRequest(id=1, repository_id=1, scm_id=42, latest_commit="a1b2c3d4" + "0" * 32)


class FakeBitbucket:
    """Records requests and answers from a route table."""

    def __init__(self, routes: dict[tuple[str, str], httpx.Response | list[httpx.Response]]):
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.routes.get((request.method, request.url.path))
        if response is None:
            return httpx.Response(404, json={"errors": [{"message": "not found"}]})
        if isinstance(response, list):
            response = response.pop(0)
        # Fresh response per request
        return httpx.Response(
            response.status_code, headers=response.headers, content=response.content
        )

    def client(self) -> BitbucketClient:
        return BitbucketClient(
            "MOB",
            base_url="https://bitbucket.example.com",
            token="secret",
            user_slug="licore",
            transport=httpx.MockTransport(self),
        )

    def sent(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]


def comment(**overrides) -> Comment:
    values = dict(
        line=10,
        line_type="ADDED",
        rule_description="Line Length",
        content="Line should be 120 characters or less",
        path="Sources/App/Login.swift",
        type=CommentType.WARNING,
    )
    values.update(overrides)
    return Comment(**values)


async def test_get_diff(repo):
    fake = FakeBitbucket(
        {
            ("GET", f"{PR_PATH}/diff"): httpx.Response(
                200,
                json={
                    "fromHash": "f" * 40,
                    "toHash": "t" * 40,
                    "diffs": [
                        {
                            "source": None,
                            "destination": {"toString": "Sources/App/Login.swift"},
                            "hunks": [
                                {
                                    "sourceLine": 0,
                                    "sourceSpan": 0,
                                    "destinationLine": 1,
                                    "destinationSpan": 1,
                                    "segments": [
                                        {
                                            "type": "ADDED",
                                            "lines": [
                                                {"source": 0, "destination": 1, "line": "import UIKit"}
                                            ],
                                        }
                                    ],
                                }
                            ],
                        }
                    ],
                },
            )
        }
    )

    async with fake.client() as bb:
        diff = await bb.get_diff(repo, 42)

    assert diff.to_hash == "t" * 40
    assert diff.files[0].destination == "Sources/App/Login.swift"
    assert diff.files[0].hunks[0].segments[0].type == SegmentType.ADDED
    assert fake.requests[0].headers["Authorization"] == "Bearer secret"


async def test_get_tasks_returns_open_tasks(repo, pr):
    fake = FakeBitbucket(
        {
            ("GET", f"{PR_PATH}/tasks"): httpx.Response(
                200,
                json={
                    "isLastPage": True,
                    "values": [
                        {"id": 7, "text": "Line Length (3x)", "state": "OPEN"},
                        {"id": 8, "text": "Force Cast (1x)", "state": "RESOLVED"},
                        {"id": 9, "text": "Fix the tests", "state": "OPEN"},
                    ],
                },
            )
        }
    )

    async with fake.client() as bb:
        tasks = await bb.get_tasks(repo, pr)

    assert tasks == [
        Task(description="Line Length", occurrence=3, id=7),
        Task(description="Fix the tests", occurrence=0, id=9),
    ]


async def test_delete_all_comments_only_deletes_own_comments(repo):
    fake = FakeBitbucket(
        {
            ("GET", f"{PR_PATH}/activities"): [
                httpx.Response(
                    200,
                    json={
                        "isLastPage": False,
                        "nextPageStart": 2,
                        "values": [
                            {
                                "action": "COMMENTED",
                                "comment": {"id": 1, "version": 0, "author": {"slug": "licore"}},
                            },
                            {"action": "APPROVED"},
                        ],
                    },
                ),
                httpx.Response(
                    200,
                    json={
                        "isLastPage": True,
                        "values": [
                            {
                                "action": "COMMENTED",
                                "comment": {"id": 2, "version": 3, "author": {"slug": "jdoe"}},
                            },
                            {
                                "action": "COMMENTED",
                                "comment": {"id": 3, "version": 1, "author": {"slug": "licore"}},
                            },
                        ],
                    },
                ),
            ],
            ("DELETE", f"{PR_PATH}/comments/1"): httpx.Response(204),
            ("DELETE", f"{PR_PATH}/comments/3"): httpx.Response(204),
        }
    )

    async with fake.client() as bb:
        await bb.delete_all_comments(repo, 42)

    pages = fake.sent("GET", f"{PR_PATH}/activities")
    assert [r.url.params["start"] for r in pages] == ["0", "2"]
    deleted = [r for r in fake.requests if r.method == "DELETE"]
    assert [r.url.path for r in deleted] == [f"{PR_PATH}/comments/1", f"{PR_PATH}/comments/3"]
    assert deleted[1].url.params["version"] == "1"


def own_comment(comment_id: int) -> dict:
    return {
        "action": "COMMENTED",
        "comment": {"id": comment_id, "version": 0, "author": {"slug": "licore"}},
    }


async def test_delete_all_comments_skips_undeletable_comments(repo, caplog):
    fake = FakeBitbucket(
        {
            ("GET", f"{PR_PATH}/activities"): httpx.Response(
                200, json={"isLastPage": True, "values": [own_comment(1), own_comment(3)]}
            ),
            ("DELETE", f"{PR_PATH}/comments/1"): httpx.Response(
                409, json={"errors": [{"message": "This comment has replies"}]}
            ),
            ("DELETE", f"{PR_PATH}/comments/3"): httpx.Response(204),
        }
    )

    async with fake.client() as bb:
        await bb.delete_all_comments(repo, 42)

    deleted = [r.url.path for r in fake.requests if r.method == "DELETE"]
    assert deleted == [f"{PR_PATH}/comments/1", f"{PR_PATH}/comments/3"]
    assert "Comment 1 could not be deleted" in caplog.text


async def test_delete_all_comments_raises_other_errors(repo):
    fake = FakeBitbucket(
        {
            ("GET", f"{PR_PATH}/activities"): httpx.Response(
                200,
                json={"isLastPage": True, "values": [own_comment(1)]},
            ),
            ("DELETE", f"{PR_PATH}/comments/1"): httpx.Response(403, json={}),
        }
    )

    async with fake.client() as bb:
        with pytest.raises(httpx.HTTPStatusError):
            await bb.delete_all_comments(repo, 42)


async def test_post_comment_anchors_to_line(repo, pr):
    fake = FakeBitbucket({("POST", f"{PR_PATH}/comments"): httpx.Response(201, json={"id": 5})})

    async with fake.client() as bb:
        await bb.post_comment(repo, pr, comment(), Diff(from_hash="f" * 40, to_hash="t" * 40))

    body = json.loads(fake.requests[0].content)
    assert body["anchor"] == {
        "line": 10,
        "lineType": "ADDED",
        "fileType": "TO",
        "path": "Sources/App/Login.swift",
        "diffType": "EFFECTIVE",
        "fromHash": "f" * 40,
        "toHash": "t" * 40,
    }
    assert body["text"] == format_comment(comment())


async def test_post_general_comment_is_one_comment(repo, pr):
    fake = FakeBitbucket({("POST", f"{PR_PATH}/comments"): httpx.Response(201, json={"id": 5})})
    comments = [
        comment(line=None, line_type="", path=""),
        comment(line=None, line_type="", path="", rule_description="Force Cast", type=CommentType.ERROR),
    ]

    async with fake.client() as bb:
        await bb.post_general_comment(repo, pr, comments)

    assert len(fake.requests) == 1
    body = json.loads(fake.requests[0].content)
    assert "anchor" not in body
    assert body["text"] == format_general_comments(comments)
    assert "[ERROR] **Force Cast**" in body["text"]


@pytest.mark.parametrize(
    ("method_name", "status"),
    [("approve_pull_request", "APPROVED"), ("mark_needs_rework", "NEEDS_WORK")],
)
async def test_participant_status(repo, method_name, status):
    path = f"{PR_PATH}/participants/licore"
    fake = FakeBitbucket({("PUT", path): httpx.Response(200, json={})})

    async with fake.client() as bb:
        await getattr(bb, method_name)(repo, 42)

    body = json.loads(fake.requests[0].content)
    assert body["status"] == status
    assert body["approved"] is (status == "APPROVED")


async def test_resolve_task():
    fake = FakeBitbucket({("PUT", "/rest/api/1.0/tasks/7"): httpx.Response(200, json={})})

    async with fake.client() as bb:
        await bb.resolve_task(7)

    assert json.loads(fake.requests[0].content) == {"id": 7, "state": "RESOLVED"}


async def test_post_tasks_anchors_tasks_to_summary_comment(repo):
    fake = FakeBitbucket(
        {
            ("POST", f"{PR_PATH}/comments"): httpx.Response(201, json={"id": 99}),
            ("POST", "/rest/api/1.0/tasks"): httpx.Response(201, json={"id": 1}),
        }
    )
    tasks = [Task(description="Line Length", occurrence=2), Task(description="Force Cast", occurrence=1)]

    async with fake.client() as bb:
        status = await bb.post_tasks(repo, 42, tasks)

    assert status == 201
    posted = [json.loads(r.content) for r in fake.sent("POST", "/rest/api/1.0/tasks")]
    assert posted == [
        {"anchor": {"id": 99, "type": "COMMENT"}, "text": "Line Length (2x)"},
        {"anchor": {"id": 99, "type": "COMMENT"}, "text": "Force Cast (1x)"},
    ]


async def test_download_sources(repo, pr, tmp_path):
    archive_path = "/rest/api/1.0/projects/MOB/repos/ios-app/archive"
    fake = FakeBitbucket({("GET", archive_path): httpx.Response(200, content=b"PK\x03\x04zip")})
    destination = tmp_path / "sourceFiles.zip"

    async with fake.client() as bb:
        result = await bb.download_sources(repo, pr, destination)

    assert result == destination
    assert destination.read_bytes() == b"PK\x03\x04zip"
    assert fake.requests[0].url.params["at"] == pr.latest_commit
    assert fake.requests[0].url.params["format"] == "zip"


async def test_http_errors_propagate(repo):
    fake = FakeBitbucket({})

    async with fake.client() as bb:
        with pytest.raises(httpx.HTTPStatusError):
            await bb.get_diff(repo, 42)


def test_parse_task_round_trips_occurrence():
    assert parse_task({"id": 3, "text": "Line Length (12x)"}) == Task("Line Length", 12, 3)
