"""Reduce violations to per-rule counts."""

from collections import Counter

from .linter import Violation
from .source_control import Task


def aggregate(violations: list[Violation]) -> dict[str, int]:
    """Count violations per rule name, in order of first occurrence."""
    return dict(Counter(violation.rule_name for violation in violations))


def generate_tasks(violations: list[Violation]) -> list[Task]:
    """One open task per violated rule."""
    return [
        Task(description=rule_name, occurrence=count)
        for rule_name, count in aggregate(violations).items()
    ]


def generate_statistics(violations: list[Violation]) -> dict[str, int]:
    """Rule name to count mapping stored as review statistics."""
    return aggregate(violations)
