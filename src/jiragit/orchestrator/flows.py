"""The interactive issue-to-branch flow.

One run either writes a default config file and stops, or lets the user pick
an action:

- checkout existing issue: pick one of the 'To Do' issues assigned to the user
  in an open sprint and branch off it
- create new issue: create an issue in the configured project, assign it to the
  user, and branch off it

An issue created remotely stays created even if the branch step is cancelled
or fails.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import click

from jiragit.orchestrator.branching import slugify
from jiragit.orchestrator.config import ConfigStore, JiraConfig
from jiragit.orchestrator.editor import open_in_editor
from jiragit.orchestrator.git import GitGateway
from jiragit.orchestrator.jira.client import Issue, IssueType, JiraClient
from jiragit.orchestrator.prompts import (
    AutocompleteStep,
    Choice,
    ConfirmStep,
    Prompter,
    SelectStep,
    TextStep,
)
from jiragit.orchestrator.workflow.state_machine import (
    Action,
    RunSnapshot,
    RunState,
    transition,
)

logger = logging.getLogger(__name__)

ACTION_CHOICES: tuple[Choice, ...] = (
    Choice(title="Create new issue", value=Action.CREATE_NEW_ISSUE),
    Choice(title="Choose existing issue", value=Action.CHECKOUT_EXISTING_ISSUE),
)

ClientFactory = Callable[[JiraConfig], JiraClient]


def _info(text: str) -> None:
    click.secho(text, fg="blue")


class Orchestrator:
    """Sequences config loading, Jira calls, prompts and the git step."""

    def __init__(
        self,
        *,
        config_store: ConfigStore,
        prompter: Prompter,
        git: GitGateway,
        client_factory: ClientFactory,
        editor: Callable[[Path], None] = open_in_editor,
    ) -> None:
        self._config_store = config_store
        self._prompter = prompter
        self._git = git
        self._client_factory = client_factory
        self._editor = editor

    def run(self) -> RunSnapshot:
        snapshot = RunSnapshot()

        if not self._config_store.exists():
            snapshot = transition(current=snapshot, to=RunState.CONFIG_MISSING)
            return self._init_config(snapshot)

        snapshot = transition(current=snapshot, to=RunState.CONFIG_PRESENT)
        config = self._config_store.load()

        action = self._prompter.ask(
            SelectStep(name="action", message="Choose action", choices=ACTION_CHOICES)
        )
        if action is None:
            logger.info("Action selection cancelled")
            return transition(current=snapshot, to=RunState.ABORTED)

        snapshot = transition(current=snapshot, to=RunState.ACTION_SELECTED, action=action)
        logger.info("Action selected", extra={"action": action.value})

        with self._client_factory(config) as client:
            if action is Action.CHECKOUT_EXISTING_ISSUE:
                return self.checkout_existing_issue(snapshot, client=client, config=config)
            return self.create_new_issue(snapshot, client=client, config=config)

    def _init_config(self, snapshot: RunSnapshot) -> RunSnapshot:
        path = self._config_store.create_default()
        snapshot = transition(current=snapshot, to=RunState.WROTE_DEFAULT_CONFIG)
        _info(f'Created a config file in path "{path}"')

        should_open = self._prompter.ask(
            ConfirmStep(name="shouldOpenFile", message="Do you want to open it now?", default=True)
        )
        if should_open:
            try:
                self._editor(path)
            except click.ClickException as e:
                logger.warning("Editor failed", extra={"path": str(path), "error": e.format_message()})
                click.echo(f"Could not open an editor: {e.format_message()}", err=True)

        _info("Please edit your file and rerun the jiragit command")
        return transition(current=snapshot, to=RunState.TERMINATED)

    def _ask_branch_name(self, issue_key: str, text: str) -> str | None:
        return self._prompter.ask(
            TextStep(
                name="branchName",
                message="Creating a new branch",
                initial=slugify(issue_key, text),
            )
        )

    def checkout_existing_issue(
        self, snapshot: RunSnapshot, *, client: JiraClient, config: JiraConfig
    ) -> RunSnapshot:
        issues = client.search_assigned_open_issues()
        choices = [Choice(title=i.key, value=i, description=i.summary) for i in issues]

        issue: Issue | None = self._prompter.ask(
            AutocompleteStep(name="issue", message="Select an issue", choices=choices)
        )
        if issue is None:
            logger.info("Issue selection cancelled")
            return transition(current=snapshot, to=RunState.ABORTED)

        branch_name = self._ask_branch_name(issue.key, issue.summary)
        if branch_name is None:
            logger.info("Branch creation cancelled", extra={"issue_key": issue.key})
            return transition(current=snapshot, to=RunState.ABORTED, issue_key=issue.key)

        _info(config.issue_url(issue.key))
        self._git.create_and_switch_branch(branch_name)
        return transition(
            current=snapshot,
            to=RunState.BRANCH_CREATED,
            issue_key=issue.key,
            branch_name=branch_name,
        )

    def create_new_issue(
        self, snapshot: RunSnapshot, *, client: JiraClient, config: JiraConfig
    ) -> RunSnapshot:
        issue_types = client.list_issue_types()
        issue_type: IssueType | None = self._prompter.ask(
            SelectStep(
                name="issueType",
                message="Choose Jira issue type",
                choices=[
                    Choice(title=t.name, value=t, description=t.description) for t in issue_types
                ],
            )
        )
        if issue_type is None:
            logger.info("Issue type selection cancelled")
            return transition(current=snapshot, to=RunState.ABORTED)

        answers = self._prompter.ask_all(
            [
                TextStep(name="summary", message="Enter Jira issue summary"),
                TextStep(name="description", message="Enter Jira issue description"),
            ]
        )
        summary = answers.get("summary")
        if summary is None:
            logger.info("Issue summary cancelled")
            return transition(current=snapshot, to=RunState.ABORTED)
        description = answers.get("description")

        current_user = client.get_current_user()
        new_issue = client.create_issue(
            issue_type_id=issue_type.id,
            project_key=config.project_key,
            assignee_account_id=current_user.account_id,
            summary=summary,
            description=description,
        )
        _info(config.issue_url(new_issue.key))

        branch_name = self._ask_branch_name(new_issue.key, summary)
        if branch_name is None:
            logger.info(
                "Branch creation cancelled; issue was already created",
                extra={"issue_key": new_issue.key},
            )
            return transition(current=snapshot, to=RunState.ABORTED, issue_key=new_issue.key)

        self._git.create_and_switch_branch(branch_name)
        return transition(
            current=snapshot,
            to=RunState.BRANCH_CREATED,
            issue_key=new_issue.key,
            branch_name=branch_name,
        )
