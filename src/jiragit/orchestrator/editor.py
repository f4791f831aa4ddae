"""Opening files in the user's editor."""

from __future__ import annotations

from pathlib import Path

import click


def open_in_editor(path: Path) -> None:
    """Open ``path`` in ``$VISUAL``/``$EDITOR`` and wait for the editor to exit.

    Raises:
        click.ClickException: the editor could not be started or failed.
    """

    click.edit(filename=str(path))
