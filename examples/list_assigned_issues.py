#!/usr/bin/env python3
"""Programmatic example: list your open sprint issues and their branch names.

This demonstrates using the jiragit components directly, without prompts:

* load settings from the environment / `.env`
* load the Jira config file
* search 'To Do' issues assigned to you in open sprints
* print the branch name jiragit would suggest for each
"""

from __future__ import annotations

import argparse
from typing import Sequence

from jiragit.orchestrator.branching import slugify
from jiragit.orchestrator.config import ConfigStore, JiraGitSettings
from jiragit.orchestrator.errors import JiraGitError
from jiragit.orchestrator.jira.client import JiraClient
from jiragit.orchestrator.logging import configure_logging


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="List assigned Jira issues (programmatic example).")
    parser.add_argument(
        "--urls",
        action="store_true",
        help="Also print the browse URL of each issue",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = JiraGitSettings()
    configure_logging(settings.log_level)

    store = ConfigStore(settings.config_path)
    if not store.exists():
        print(f"No config file at {store.path}; run `jiragit` once to create it.")
        return 2

    try:
        config = store.load()
        with JiraClient(
            host=config.base_url,
            email=config.email,
            token=config.token,
            timeout=settings.http_timeout,
        ) as client:
            issues = client.search_assigned_open_issues()
    except JiraGitError as exc:
        print(str(exc))
        return 1

    if not issues:
        print("No open issues assigned to you.")
        return 0

    for issue in issues:
        print(f"{issue.key}: {issue.summary}")
        print(f"  branch: {slugify(issue.key, issue.summary)}")
        if args.urls:
            print(f"  url:    {config.issue_url(issue.key)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
