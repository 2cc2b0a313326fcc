"""Linter interface and SwiftLint runner."""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from ..config import settings
from .errors import LintError
from .workspace import Workspace

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".licore-swiftlint.yml"

# SwiftLint exits with 2 when error-severity violations were found
SWIFTLINT_OK_EXIT_CODES = (0, 2)


class Severity(str, Enum):
    """Severity reported by the linter."""

    WARNING = "warning"
    ERROR = "error"


@dataclass
class Location:
    """Where a violation was found."""

    file: str  # Absolute path
    line: int | None = None
    character: int | None = None


@dataclass
class Violation:
    """One issue reported by the linter."""

    rule_id: str
    rule_name: str
    reason: str
    severity: Severity
    location: Location

    @classmethod
    def from_swiftlint(cls, data: dict[str, Any]) -> "Violation":
        """Build from one entry of SwiftLint's JSON reporter output."""
        try:
            severity = Severity(str(data.get("severity", "warning")).lower())
        except ValueError:
            severity = Severity.WARNING

        rule_id = data.get("rule_id", "")
        return cls(
            rule_id=rule_id,
            rule_name=data.get("type") or rule_id,
            reason=data.get("reason", ""),
            severity=severity,
            location=Location(
                file=data.get("file") or "",
                line=data.get("line"),
                character=data.get("character"),
            ),
        )


class Linter(ABC):
    """Runs static analysis over an unpacked workspace."""

    @abstractmethod
    async def run_linting(self, workspace: Workspace, rules: list[str]) -> list[Violation]:
        """Lint the workspace with the given rule identifiers.

        An empty rule list means the linter's default rule set.
        """


def write_config(directory: Path, rules: list[str]) -> Path:
    """Write a SwiftLint configuration restricted to ``rules``."""
    config: dict[str, Any] = {"reporter": "json"}
    if rules:
        config["only_rules"] = list(rules)

    config_path = directory / CONFIG_FILE_NAME
    config_path.write_text(yaml.safe_dump(config, sort_keys=False))
    return config_path


def parse_output(output: str) -> list[Violation]:
    """Parse SwiftLint's JSON reporter output."""
    if not output.strip():
        return []
    try:
        entries = json.loads(output)
    except json.JSONDecodeError as e:
        raise LintError(f"Unreadable SwiftLint output: {e}") from e
    if not isinstance(entries, list):
        raise LintError("SwiftLint output is not a list of violations")
    return [Violation.from_swiftlint(entry) for entry in entries]


class SwiftLintRunner(Linter):
    """Runs the SwiftLint executable as a subprocess."""

    def __init__(self, executable: str | None = None):
        self.executable = executable or settings.swiftlint_path

    async def run_linting(self, workspace: Workspace, rules: list[str]) -> list[Violation]:
        config_path = write_config(workspace.path, rules)

        try:
            process = await asyncio.create_subprocess_exec(
                self.executable,
                "lint",
                "--quiet",
                "--reporter",
                "json",
                "--config",
                str(config_path),
                cwd=str(workspace.path),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise LintError(f"SwiftLint executable not found: {self.executable}") from e

        stdout, stderr = await process.communicate()

        if process.returncode not in SWIFTLINT_OK_EXIT_CODES:
            message = stderr.decode(errors="replace").strip() or "Unknown error"
            raise LintError(f"SwiftLint exited with {process.returncode}: {message}")

        violations = parse_output(stdout.decode(errors="replace"))
        logger.info(f"SwiftLint reported {len(violations)} violations in {workspace.path}")
        return violations
