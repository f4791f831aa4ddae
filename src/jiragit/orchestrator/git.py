"""Local git operations."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from jiragit.orchestrator.errors import VcsError

logger = logging.getLogger(__name__)


class GitGateway:
    """Runs git in a working directory (the current one by default)."""

    def __init__(self, *, cwd: Path | None = None, git_executable: str = "git") -> None:
        self._cwd = cwd
        self._git = git_executable

    def create_and_switch_branch(self, name: str) -> None:
        """Create branch ``name`` from HEAD and check it out."""

        cmd = [self._git, "checkout", "-b", name]
        try:
            result = subprocess.run(
                cmd,
                cwd=self._cwd,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            raise VcsError(f"Could not run {self._git}: {e}") from e

        if result.returncode != 0:
            detail = (result.stderr or result.stdout or "").strip()
            raise VcsError(
                f"git checkout -b {name} failed: {detail or f'exit status {result.returncode}'}",
                returncode=result.returncode,
            )

        logger.info("Branch created", extra={"branch": name})
