"""Console script entrypoint.

The implementation lives in `jiragit.orchestrator.main`.
"""

from __future__ import annotations

from jiragit.orchestrator.main import main

__all__ = ["main"]


if __name__ == "__main__":
    raise SystemExit(main())
