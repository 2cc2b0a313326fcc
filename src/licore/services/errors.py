"""Exceptions raised by review services."""


class ReviewError(Exception):
    """Base class for review pipeline failures."""


class WorkspaceError(ReviewError):
    """A workspace directory or archive operation failed."""


class LintError(ReviewError):
    """The linter could not be run or its output could not be read."""
