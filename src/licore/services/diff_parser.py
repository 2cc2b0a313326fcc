"""Diff model with destination-line addressing.

A diff is a list of files, each split into hunks, each hunk into segments:
runs of lines sharing one change type. Two sources are supported:

- Bitbucket Server's JSON diff (``/pull-requests/{id}/diff``)
- a plain unified diff text (``git diff`` output)
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

HUNK_HEADER_RE = re.compile(r"@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@(.*)")
FILE_HEADER_RE = re.compile(r"diff --git a/(.+) b/(.+)")


class SegmentType(str, Enum):
    """Change type of a segment."""

    ADDED = "ADDED"
    REMOVED = "REMOVED"
    CONTEXT = "CONTEXT"


@dataclass
class DiffLine:
    """A single line of a segment."""

    source: int | None  # Line in the base version (None for added lines)
    destination: int | None  # Line in the head version (None for removed lines)
    line: str = ""


@dataclass
class Segment:
    """A run of lines of one change type within a hunk."""

    type: SegmentType
    lines: list[DiffLine] = field(default_factory=list)

    def contains_destination(self, line_number: int) -> bool:
        return any(line.destination == line_number for line in self.lines)


@dataclass
class Hunk:
    """A contiguous change region of a file."""

    source_line: int
    source_span: int
    destination_line: int
    destination_span: int
    segments: list[Segment] = field(default_factory=list)

    @property
    def destination_end(self) -> int:
        """Last destination line covered by this hunk (inclusive)."""
        return self.destination_line + self.destination_span - 1

    def covers(self, line_number: int) -> bool:
        return self.destination_line <= line_number <= self.destination_end


@dataclass
class DiffFile:
    """A file touched by the diff."""

    source: str | None  # None for added files
    destination: str | None  # None for deleted files
    hunks: list[Hunk] = field(default_factory=list)
    is_binary: bool = False

    @property
    def is_deleted(self) -> bool:
        return self.destination is None


@dataclass
class Diff:
    """The changeset between the base and head of a pull request."""

    files: list[DiffFile] = field(default_factory=list)
    from_hash: str | None = None
    to_hash: str | None = None


def _path(value: dict[str, Any] | None) -> str | None:
    if not value:
        return None
    return value.get("toString") or None


def parse_bitbucket_diff(payload: dict[str, Any]) -> Diff:
    """Build a Diff from Bitbucket Server's JSON diff response."""
    files: list[DiffFile] = []

    for file_data in payload.get("diffs", []):
        diff_file = DiffFile(
            source=_path(file_data.get("source")),
            destination=_path(file_data.get("destination")),
            is_binary=bool(file_data.get("binary", False)),
        )

        for hunk_data in file_data.get("hunks") or []:
            hunk = Hunk(
                source_line=hunk_data.get("sourceLine", 0),
                source_span=hunk_data.get("sourceSpan", 0),
                destination_line=hunk_data.get("destinationLine", 0),
                destination_span=hunk_data.get("destinationSpan", 0),
            )
            for segment_data in hunk_data.get("segments") or []:
                segment_type = SegmentType(segment_data["type"])
                segment = Segment(type=segment_type)
                for line_data in segment_data.get("lines") or []:
                    # Bitbucket numbers removed lines on both sides; only
                    # keep destinations of lines that exist in the head
                    segment.lines.append(
                        DiffLine(
                            source=(
                                None
                                if segment_type == SegmentType.ADDED
                                else line_data.get("source")
                            ),
                            destination=(
                                None
                                if segment_type == SegmentType.REMOVED
                                else line_data.get("destination")
                            ),
                            line=line_data.get("line", ""),
                        )
                    )
                hunk.segments.append(segment)
            diff_file.hunks.append(hunk)

        files.append(diff_file)

    return Diff(
        files=files,
        from_hash=payload.get("fromHash"),
        to_hash=payload.get("toHash"),
    )


def _append_line(hunk: Hunk, segment_type: SegmentType, diff_line: DiffLine) -> None:
    """Append to the last segment, opening a new one on change of type."""
    if not hunk.segments or hunk.segments[-1].type != segment_type:
        hunk.segments.append(Segment(type=segment_type))
    hunk.segments[-1].lines.append(diff_line)


def parse_unified_diff(diff_text: str) -> Diff:
    """Parse a unified diff into a Diff."""
    files: list[DiffFile] = []
    current_file: DiffFile | None = None
    current_hunk: Hunk | None = None
    source_line = destination_line = 0
    source_left = destination_left = 0

    for line in diff_text.split("\n"):
        # New file header
        if line.startswith("diff --git"):
            match = FILE_HEADER_RE.match(line)
            current_file = None
            if match:
                current_file = DiffFile(source=match.group(1), destination=match.group(2))
                files.append(current_file)
            current_hunk = None
            continue

        if current_file is None:
            continue

        if current_hunk is None or (source_left <= 0 and destination_left <= 0):
            # File metadata between headers and hunks
            if line.startswith("new file mode"):
                current_file.source = None
            elif line.startswith("deleted file mode"):
                current_file.destination = None
            elif line.startswith("Binary files"):
                current_file.is_binary = True

        # Hunk header
        if line.startswith("@@"):
            match = HUNK_HEADER_RE.match(line)
            if match:
                current_hunk = Hunk(
                    source_line=int(match.group(1)),
                    source_span=int(match.group(2)) if match.group(2) else 1,
                    destination_line=int(match.group(3)),
                    destination_span=int(match.group(4)) if match.group(4) else 1,
                )
                current_file.hunks.append(current_hunk)
                source_line = current_hunk.source_line
                destination_line = current_hunk.destination_line
                source_left = current_hunk.source_span
                destination_left = current_hunk.destination_span
            continue

        # Lines past the hunk's spans (trailing newline, next header) are not content
        if current_hunk is None or (source_left <= 0 and destination_left <= 0):
            continue

        if line.startswith("+"):
            _append_line(
                current_hunk,
                SegmentType.ADDED,
                DiffLine(source=None, destination=destination_line, line=line[1:]),
            )
            destination_line += 1
            destination_left -= 1
        elif line.startswith("-"):
            _append_line(
                current_hunk,
                SegmentType.REMOVED,
                DiffLine(source=source_line, destination=None, line=line[1:]),
            )
            source_line += 1
            source_left -= 1
        elif line.startswith(" ") or line == "":
            # Context line (some tools strip the blank prefix of empty lines)
            _append_line(
                current_hunk,
                SegmentType.CONTEXT,
                DiffLine(source=source_line, destination=destination_line, line=line[1:]),
            )
            source_line += 1
            destination_line += 1
            source_left -= 1
            destination_left -= 1

    return Diff(files=files)
