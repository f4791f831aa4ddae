"""Error taxonomy for a jiragit run.

A cancelled prompt is not an error: it is represented by a ``None`` answer.
"""

from __future__ import annotations


class JiraGitError(Exception):
    """Base class for errors that end the current action."""


class ConfigValidationError(JiraGitError):
    """The configuration file is missing fields, malformed or invalid."""


class TrackerError(JiraGitError):
    """A Jira API call failed (HTTP error, network error or unexpected body)."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class VcsError(JiraGitError):
    """The git command exited with a non-zero status."""

    def __init__(self, message: str, *, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode
