"""CLI entrypoint for jiragit.

The command takes no arguments besides ``--version``/``--help``; everything
else is prompt-driven. This module is the error boundary of a run: each error
kind is reported on stderr and mapped to an exit code.
"""

from __future__ import annotations

import argparse
import logging
import sys

from pydantic import ValidationError

from jiragit import __version__
from jiragit.orchestrator.config import ConfigStore, JiraConfig, JiraGitSettings
from jiragit.orchestrator.errors import ConfigValidationError, TrackerError, VcsError
from jiragit.orchestrator.flows import Orchestrator
from jiragit.orchestrator.git import GitGateway
from jiragit.orchestrator.jira.client import JiraClient
from jiragit.orchestrator.logging import configure_logging
from jiragit.orchestrator.prompts import Prompter

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2
EXIT_TRACKER_ERROR = 3
EXIT_VCS_ERROR = 4
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jiragit",
        description=(
            "Pick one of your Jira issues (or create a new one) and check out a git branch "
            "named after it"
        ),
    )
    parser.add_argument("--version", action="version", version=f"jiragit {__version__}")
    return parser


def build_orchestrator(settings: JiraGitSettings) -> Orchestrator:
    def client_factory(config: JiraConfig) -> JiraClient:
        return JiraClient(
            host=config.base_url,
            email=config.email,
            token=config.token,
            timeout=settings.http_timeout,
        )

    return Orchestrator(
        config_store=ConfigStore(settings.config_path),
        prompter=Prompter(),
        git=GitGateway(),
        client_factory=client_factory,
    )


def main(argv: list[str] | None = None) -> int:
    build_parser().parse_args(argv)

    try:
        settings = JiraGitSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Settings error (check your environment and .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return EXIT_CONFIG_ERROR

    configure_logging(settings.log_level)

    try:
        snapshot = build_orchestrator(settings).run()
        logger.info("Run finished", extra=snapshot.to_json())
        return EXIT_OK

    except ConfigValidationError as e:
        logger.error("Invalid configuration", extra={"path": str(settings.config_path)})
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    except TrackerError as e:
        logger.error("Jira request failed", extra={"status_code": e.status_code})
        print(f"Jira error: {e}", file=sys.stderr)
        return EXIT_TRACKER_ERROR

    except VcsError as e:
        logger.error("git failed", extra={"returncode": e.returncode})
        print(f"git error: {e}", file=sys.stderr)
        return EXIT_VCS_ERROR

    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return EXIT_INTERRUPTED

    except Exception:
        logger.exception("Command failed")
        print("Unexpected error; rerun with LOG_LEVEL=DEBUG for details", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    raise SystemExit(main())
