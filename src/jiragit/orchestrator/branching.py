"""Branch naming."""

from __future__ import annotations

import re

_SPACE_RUNS = re.compile(r" +")


def slugify(issue_key: str, text: str) -> str:
    """Build the default branch name for an issue.

    ``"ABC-123"`` and ``"Fix login bug"`` give ``"abc-123-fix-login-bug"``.
    Only spaces are collapsed; other characters are kept as typed, so git may
    still reject the name.
    """

    return _SPACE_RUNS.sub("-", f"{issue_key}-{text}").lower()
