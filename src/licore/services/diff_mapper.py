"""Map linter violations onto diff segments."""

from .diff_parser import Diff, DiffFile, Hunk, Segment, SegmentType
from .linter import Violation

InlineFinding = tuple[Violation, Segment]


def path_matches(violation_path: str, diff_path: str) -> bool:
    """Whether a diff-relative path is a suffix of an absolute violation path.

    The match is on path components, so ``Foo.swift`` does not match
    ``/work/BarFoo.swift``.
    """
    diff_path = diff_path.lstrip("/")
    return violation_path == diff_path or violation_path.endswith("/" + diff_path)


def find_file(diff: Diff, violation_path: str) -> DiffFile | None:
    return next(
        (
            diff_file
            for diff_file in diff.files
            if diff_file.destination and path_matches(violation_path, diff_file.destination)
        ),
        None,
    )


def find_hunk(diff_file: DiffFile, line: int) -> Hunk | None:
    return next((hunk for hunk in diff_file.hunks if hunk.covers(line)), None)


def find_segment(hunk: Hunk, line: int, only_added_lines: bool = False) -> Segment | None:
    return next(
        (
            segment
            for segment in hunk.segments
            if (not only_added_lines or segment.type == SegmentType.ADDED)
            and segment.contains_destination(line)
        ),
        None,
    )


def classify(
    violations: list[Violation],
    diff: Diff,
    only_added_lines: bool = False,
) -> tuple[list[Violation], list[InlineFinding]]:
    """
    Split violations into general and inline findings.

    A violation is inline when its file, hunk and segment can all be found in
    the diff; the first match wins at every level. Everything else, including
    violations without a line number, is general.

    Returns: (general, inline)
    """
    general: list[Violation] = []
    inline: list[InlineFinding] = []

    for violation in violations:
        line = violation.location.line
        if line is None:
            general.append(violation)
            continue

        diff_file = find_file(diff, violation.location.file)
        if diff_file is None:
            general.append(violation)
            continue

        hunk = find_hunk(diff_file, line)
        if hunk is None:
            general.append(violation)
            continue

        segment = find_segment(hunk, line, only_added_lines)
        if segment is None:
            general.append(violation)
            continue

        inline.append((violation, segment))

    return general, inline
