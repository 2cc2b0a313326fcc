"""Orchestrates the lint review of a pull request."""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..models import Project, PullRequest, Repository, ReviewJob, ReviewJobStatus
from .diff_mapper import InlineFinding, classify
from .errors import WorkspaceError
from .linter import Linter, Violation
from .source_control import Comment, CommentType, SourceControlService, Task
from .statistics import find_developer, find_review_job, save_statistics, set_job_status
from .task_aggregator import generate_statistics, generate_tasks
from .workspace import Workspace, WorkspaceLocks, workspace_locks


class ReviewOutcome(str, Enum):
    """Decision taken on the pull request."""

    APPROVED = "approved"
    NEEDS_WORK = "needs_work"


@dataclass
class ReviewResult:
    """Summary of one pipeline run."""

    outcome: ReviewOutcome
    violations: int
    general_comments: int
    inline_comments: int


def inline_comment(finding: InlineFinding, workspace: Workspace) -> Comment:
    violation, segment = finding
    return Comment(
        line=violation.location.line,
        line_type=segment.type.value,
        rule_description=violation.rule_name,
        content=violation.reason,
        path=workspace.relative_path(violation.location.file),
        type=CommentType(violation.severity.value),
    )


def general_comment(violation: Violation) -> Comment:
    return Comment(
        line=None,
        line_type="",
        rule_description=violation.rule_name,
        content=violation.reason,
        path="",
        type=CommentType(violation.severity.value),
    )


class ReviewPipeline:
    """Runs the review stages of a pull request in order."""

    def __init__(
        self,
        session: AsyncSession,
        scm: SourceControlService,
        linter: Linter,
        workspace_root: str | Path | None = None,
        locks: WorkspaceLocks | None = None,
        logger: logging.Logger | None = None,
    ):
        self.session = session
        self.scm = scm
        self.linter = linter
        self.workspace_root = workspace_root
        self.locks = locks or workspace_locks
        self.logger = logger or logging.getLogger(__name__)

    async def run(
        self,
        project: Project,
        repository: Repository,
        pull_request: PullRequest,
    ) -> ReviewResult:
        """
        Main entry point for reviewing a PR.

        Steps:
        1. Reset the workspace and purge the previous run's comments
        2. Fetch former tasks
        3. Download, unpack and lint the head commit
        4. Map violations onto the diff and post comments
        5. Approve, or request rework and replace the open tasks
        6. Clean up, save statistics and complete the review job

        The run holds the workspace lock of the commit throughout. Any
        collaborator failure marks the review job failed and is re-raised.
        """
        short_hash = pull_request.short_hash(settings.short_hash_length)
        workspace = Workspace(short_hash, self.workspace_root)

        async with self.locks.hold(short_hash):
            job = await find_review_job(self.session, pull_request.id)
            if job:
                await set_job_status(self.session, job, ReviewJobStatus.RUNNING)
                await self.session.commit()

            try:
                result = await self._review(project, repository, pull_request, workspace, job)
            except Exception as e:
                self.logger.error(f"Review of pull request {pull_request.scm_id} failed: {e}")
                if workspace.exists():
                    self._remove_workspace(workspace)
                if job:
                    await set_job_status(self.session, job, ReviewJobStatus.FAILED, str(e))
                await self.session.commit()
                raise

            await self.session.commit()
            return result

    async def _review(
        self,
        project: Project,
        repository: Repository,
        pull_request: PullRequest,
        workspace: Workspace,
        job: ReviewJob | None,
    ) -> ReviewResult:
        self.logger.info(f"Review process started for {repository.name}#{pull_request.scm_id}")

        if workspace.exists():
            self.logger.info("Deleting existing directory...")
            self._remove_workspace(workspace)

        self.logger.info("Deleting older comments...")
        await self.scm.delete_all_comments(repository, pull_request.scm_id)

        self.logger.info("Getting former tasks...")
        former_tasks = await self.scm.get_tasks(repository, pull_request)

        self.logger.info("Creating new directory...")
        try:
            workspace.create()
        except WorkspaceError as e:
            self.logger.warning(str(e))

        self.logger.info("Downloading sources...")
        archive = await self.scm.download_sources(
            repository, pull_request, workspace.archive_path
        )

        self.logger.info("Unzipping...")
        workspace.unzip(archive)

        self.logger.info("Linting...")
        violations = await self.linter.run_linting(workspace, project.rules or [])

        self.logger.info("Getting the diff...")
        diff = await self.scm.get_diff(repository, pull_request.scm_id)

        general, inline = classify(violations, diff, only_added_lines=True)
        self.logger.info(f"General comments: {len(general)}")
        self.logger.info(f"Inline comments: {len(inline)}")

        self.logger.info("Posting inline comments...")
        for finding in inline:
            await self.scm.post_comment(
                repository, pull_request, inline_comment(finding, workspace), diff
            )

        if general:
            self.logger.info("Posting general comments...")
            await self.scm.post_general_comment(
                repository, pull_request, [general_comment(v) for v in general]
            )

        if not general and not inline:
            self.logger.info("Approving pull request...")
            await self.scm.approve_pull_request(repository, pull_request.scm_id)
            outcome = ReviewOutcome.APPROVED
        else:
            self.logger.info("Pull request needs work...")
            await self.scm.mark_needs_rework(repository, pull_request.scm_id)

            await self._resolve_former_tasks(former_tasks)

            self.logger.info("Posting tasks...")
            status = await self.scm.post_tasks(
                repository, pull_request.scm_id, generate_tasks(violations)
            )
            self.logger.info(f"Tasks posted with status {status}")
            outcome = ReviewOutcome.NEEDS_WORK

        self.logger.info("Deleting source folder...")
        self._remove_workspace(workspace)

        await self._persist_statistics(repository, pull_request, violations)
        await self._mark_job_done(job)

        return ReviewResult(
            outcome=outcome,
            violations=len(violations),
            general_comments=len(general),
            inline_comments=len(inline),
        )

    def _remove_workspace(self, workspace: Workspace) -> None:
        """Delete the workspace; failures are logged only."""
        try:
            workspace.remove()
        except WorkspaceError as e:
            self.logger.warning(str(e))

    async def _resolve_former_tasks(self, former_tasks: list[Task | None]) -> None:
        if not former_tasks:
            return

        self.logger.info("Resolving former tasks...")
        for task in former_tasks:
            if task is None:
                self.logger.warning("Task could not be unwrapped!")
                continue
            if task.id is None:
                self.logger.warning(f"Task '{task.description}' has no id!")
                continue
            await self.scm.resolve_task(task.id)

    async def _persist_statistics(
        self,
        repository: Repository,
        pull_request: PullRequest,
        violations: list[Violation],
    ) -> None:
        self.logger.info("Generating review statistics...")
        statistics = generate_statistics(violations)

        developer = await find_developer(self.session, repository.id, pull_request.author_slug)
        if not developer:
            self.logger.warning(f"Developer not found for repository {repository.name}!")
            return

        self.logger.info("Saving review statistics...")
        await save_statistics(self.session, developer.id, statistics, pull_request.id)

    async def _mark_job_done(self, job: ReviewJob | None) -> None:
        if not job:
            self.logger.warning("Review job not found!")
            return

        self.logger.info("Setting job status...")
        await set_job_status(self.session, job, ReviewJobStatus.DONE)
        self.logger.info("Review job ended successfully!")
