"""Business logic services."""

from .bitbucket_client import BitbucketClient
from .diff_mapper import classify
from .diff_parser import (
    Diff,
    DiffFile,
    DiffLine,
    Hunk,
    Segment,
    SegmentType,
    parse_bitbucket_diff,
    parse_unified_diff,
)
from .errors import LintError, ReviewError, WorkspaceError
from .job_manager import create_review_job, register_pull_request
from .linter import Linter, Location, Severity, SwiftLintRunner, Violation
from .review_pipeline import ReviewOutcome, ReviewPipeline, ReviewResult
from .source_control import Comment, CommentType, SourceControlService, Task
from .statistics import (
    developer_totals,
    find_developer,
    find_review_job,
    save_statistics,
    set_job_status,
)
from .task_aggregator import aggregate, generate_statistics, generate_tasks
from .workspace import Workspace, WorkspaceLocks, workspace_locks

__all__ = [
    "BitbucketClient",
    "Comment",
    "CommentType",
    "Diff",
    "DiffFile",
    "DiffLine",
    "Hunk",
    "LintError",
    "Linter",
    "Location",
    "ReviewError",
    "ReviewOutcome",
    "ReviewPipeline",
    "ReviewResult",
    "Segment",
    "SegmentType",
    "Severity",
    "SourceControlService",
    "SwiftLintRunner",
    "Task",
    "Violation",
    "Workspace",
    "WorkspaceError",
    "WorkspaceLocks",
    "aggregate",
    "classify",
    "create_review_job",
    "developer_totals",
    "find_developer",
    "find_review_job",
    "generate_statistics",
    "generate_tasks",
    "parse_bitbucket_diff",
    "parse_unified_diff",
    "register_pull_request",
    "save_statistics",
    "set_job_status",
    "workspace_locks",
]
