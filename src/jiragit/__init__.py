"""jiragit.

Pick or create a Jira issue and check out a matching git branch:
- configuration loaded from a per-user JSON file
- structured logging
- Jira issue search/creation and `git checkout -b`
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
