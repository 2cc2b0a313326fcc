"""Commit-keyed working directories for review runs."""

import asyncio
import logging
import shutil
import zipfile
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from ..config import settings
from .errors import WorkspaceError

logger = logging.getLogger(__name__)

DIRECTORY_PREFIX = "sources_"


class Workspace:
    """The ``sources_<short hash>`` directory of one commit."""

    def __init__(self, short_hash: str, root: str | Path | None = None):
        self.short_hash = short_hash
        self.root = Path(root if root is not None else settings.workspace_root)
        self.path = self.root / f"{DIRECTORY_PREFIX}{short_hash}"

    @property
    def archive_path(self) -> Path:
        return self.path / settings.archive_name

    def exists(self) -> bool:
        exists = self.path.exists()
        logger.debug(f"Directory {self.path} exists: {exists}")
        return exists

    def create(self) -> None:
        logger.info(f"Creating directory: {self.path}")
        try:
            self.path.mkdir(parents=True)
        except OSError as e:
            raise WorkspaceError(f"Could not create {self.path}: {e}") from e

    def remove(self) -> None:
        logger.info(f"Deleting directory: {self.path}")
        try:
            shutil.rmtree(self.path)
        except OSError as e:
            raise WorkspaceError(f"Could not delete {self.path}: {e}") from e

    def unzip(self, archive: Path | None = None) -> None:
        """Extract an archive into the workspace directory."""
        archive = archive or self.archive_path
        logger.info(f"Unzipping {archive}")
        try:
            with zipfile.ZipFile(archive) as zf:
                zf.extractall(self.path)
        except (OSError, zipfile.BadZipFile) as e:
            raise WorkspaceError(f"Could not unzip {archive}: {e}") from e

    def relative_path(self, file: str) -> str:
        """Repository-relative path of a file inside the workspace."""
        try:
            return Path(file).resolve().relative_to(self.path.resolve()).as_posix()
        except ValueError:
            return file


class WorkspaceLocks:
    """One lock per short hash, so two runs never share a workspace."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._holders: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, short_hash: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(short_hash, asyncio.Lock())
        self._holders[short_hash] = self._holders.get(short_hash, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[short_hash] -= 1
            if not self._holders[short_hash]:
                del self._holders[short_hash]
                del self._locks[short_hash]

    def is_locked(self, short_hash: str) -> bool:
        lock = self._locks.get(short_hash)
        return lock is not None and lock.locked()


workspace_locks = WorkspaceLocks()
