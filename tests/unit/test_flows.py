"""Unit tests for the interactive issue-to-branch flow (Jira, git and prompts mocked)."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, Mock

import click
import pytest

from conftest import ACCEPT_DEFAULT, ScriptedPrompter
from jiragit.orchestrator.config import ConfigStore, JiraConfig
from jiragit.orchestrator.errors import ConfigValidationError, TrackerError, VcsError
from jiragit.orchestrator.flows import Orchestrator
from jiragit.orchestrator.git import GitGateway
from jiragit.orchestrator.jira.client import CurrentUser, Issue, IssueType, JiraClient
from jiragit.orchestrator.prompts import AutocompleteStep, SelectStep, TextStep
from jiragit.orchestrator.workflow.state_machine import Action, RunState


@pytest.fixture
def jira() -> MagicMock:
    client = MagicMock(spec=JiraClient)
    client.__enter__.return_value = client
    return client


@pytest.fixture
def git() -> Mock:
    return Mock(spec=GitGateway)


def _orchestrator(
    *,
    config_path: Path,
    prompter: ScriptedPrompter,
    git: Mock,
    jira: MagicMock,
    editor: Callable[[Path], None] | None = None,
) -> tuple[Orchestrator, Mock]:
    factory = Mock(return_value=jira)
    kwargs: dict[str, Any] = {}
    if editor is not None:
        kwargs["editor"] = editor
    orchestrator = Orchestrator(
        config_store=ConfigStore(config_path),
        prompter=prompter,
        git=git,
        client_factory=factory,
        **kwargs,
    )
    return orchestrator, factory


def test_first_run_writes_config_and_stops(
    tmp_path: Path,
    make_prompter: Callable[..., ScriptedPrompter],
    git: Mock,
    jira: MagicMock,
    capsys: pytest.CaptureFixture[str],
) -> None:
    config_path = tmp_path / "jiragit.config.json"
    editor = Mock()
    prompter = make_prompter(shouldOpenFile=True)
    orchestrator, factory = _orchestrator(
        config_path=config_path, prompter=prompter, git=git, jira=jira, editor=editor
    )

    snapshot = orchestrator.run()

    assert snapshot.state is RunState.TERMINATED
    raw = json.loads(config_path.read_text(encoding="utf-8"))
    assert set(raw) == {"email", "token", "host", "projectKey"}
    assert [step.name for step in prompter.steps] == ["shouldOpenFile"]
    editor.assert_called_once_with(config_path)
    factory.assert_not_called()
    git.create_and_switch_branch.assert_not_called()
    out = capsys.readouterr().out
    assert str(config_path) in out
    assert "rerun" in out


def test_first_run_does_not_open_editor_when_declined(
    tmp_path: Path, make_prompter: Callable[..., ScriptedPrompter], git: Mock, jira: MagicMock
) -> None:
    editor = Mock()
    orchestrator, _ = _orchestrator(
        config_path=tmp_path / "jiragit.config.json",
        prompter=make_prompter(shouldOpenFile=False),
        git=git,
        jira=jira,
        editor=editor,
    )

    assert orchestrator.run().state is RunState.TERMINATED
    editor.assert_not_called()


def test_first_run_survives_editor_failure(
    tmp_path: Path,
    make_prompter: Callable[..., ScriptedPrompter],
    git: Mock,
    jira: MagicMock,
    capsys: pytest.CaptureFixture[str],
) -> None:
    editor = Mock(side_effect=click.ClickException("Editing failed"))
    orchestrator, _ = _orchestrator(
        config_path=tmp_path / "jiragit.config.json",
        prompter=make_prompter(shouldOpenFile=True),
        git=git,
        jira=jira,
        editor=editor,
    )

    assert orchestrator.run().state is RunState.TERMINATED
    assert "Editing failed" in capsys.readouterr().err


def test_invalid_config_stops_before_any_remote_call(
    tmp_path: Path,
    config_data: dict[str, str],
    make_prompter: Callable[..., ScriptedPrompter],
    git: Mock,
    jira: MagicMock,
) -> None:
    config_path = tmp_path / "jiragit.config.json"
    config_path.write_text(
        json.dumps({k: v for k, v in config_data.items() if k != "host"}), encoding="utf-8"
    )
    prompter = make_prompter(action=Action.CHECKOUT_EXISTING_ISSUE)
    orchestrator, factory = _orchestrator(
        config_path=config_path, prompter=prompter, git=git, jira=jira
    )

    with pytest.raises(ConfigValidationError, match="host"):
        orchestrator.run()

    factory.assert_not_called()
    assert prompter.steps == []


def test_cancelled_action_aborts(
    config_file: Path, make_prompter: Callable[..., ScriptedPrompter], git: Mock, jira: MagicMock
) -> None:
    orchestrator, factory = _orchestrator(
        config_path=config_file, prompter=make_prompter(), git=git, jira=jira
    )

    snapshot = orchestrator.run()

    assert snapshot.state is RunState.ABORTED
    factory.assert_not_called()


def test_checkout_existing_issue_with_default_branch_name(
    config_file: Path,
    make_prompter: Callable[..., ScriptedPrompter],
    git: Mock,
    jira: MagicMock,
    capsys: pytest.CaptureFixture[str],
) -> None:
    issue = Issue(key="ABC-123", summary="Fix login bug")
    jira.search_assigned_open_issues.return_value = [issue]
    prompter = make_prompter(
        action=Action.CHECKOUT_EXISTING_ISSUE, issue=issue, branchName=ACCEPT_DEFAULT
    )
    orchestrator, factory = _orchestrator(
        config_path=config_file, prompter=prompter, git=git, jira=jira
    )

    snapshot = orchestrator.run()

    assert snapshot.state is RunState.BRANCH_CREATED
    assert snapshot.issue_key == "ABC-123"
    assert snapshot.branch_name == "abc-123-fix-login-bug"
    git.create_and_switch_branch.assert_called_once_with("abc-123-fix-login-bug")

    (config,) = factory.call_args.args
    assert isinstance(config, JiraConfig)
    jira.close.assert_not_called()
    jira.__exit__.assert_called_once()

    action_step = prompter.step("action")
    assert isinstance(action_step, SelectStep)
    assert {c.value for c in action_step.choices} == set(Action)

    issue_step = prompter.step("issue")
    assert isinstance(issue_step, AutocompleteStep)
    assert [(c.title, c.description) for c in issue_step.choices] == [
        ("ABC-123", "Fix login bug")
    ]
    assert "https://acme.atlassian.net/browse/ABC-123" in capsys.readouterr().out


def test_checkout_existing_issue_with_edited_branch_name(
    config_file: Path, make_prompter: Callable[..., ScriptedPrompter], git: Mock, jira: MagicMock
) -> None:
    issue = Issue(key="ABC-123", summary="Fix login bug")
    jira.search_assigned_open_issues.return_value = [issue]
    prompter = make_prompter(
        action=Action.CHECKOUT_EXISTING_ISSUE, issue=issue, branchName="feature/abc-123"
    )
    orchestrator, _ = _orchestrator(config_path=config_file, prompter=prompter, git=git, jira=jira)

    orchestrator.run()

    git.create_and_switch_branch.assert_called_once_with("feature/abc-123")


def test_checkout_with_no_issues_presents_empty_list(
    config_file: Path, make_prompter: Callable[..., ScriptedPrompter], git: Mock, jira: MagicMock
) -> None:
    jira.search_assigned_open_issues.return_value = []
    prompter = make_prompter(action=Action.CHECKOUT_EXISTING_ISSUE)
    orchestrator, _ = _orchestrator(config_path=config_file, prompter=prompter, git=git, jira=jira)

    snapshot = orchestrator.run()

    assert snapshot.state is RunState.ABORTED
    issue_step = prompter.step("issue")
    assert isinstance(issue_step, AutocompleteStep)
    assert list(issue_step.choices) == []
    git.create_and_switch_branch.assert_not_called()


def test_checkout_cancelled_branch_name_has_no_side_effects(
    config_file: Path,
    make_prompter: Callable[..., ScriptedPrompter],
    git: Mock,
    jira: MagicMock,
    capsys: pytest.CaptureFixture[str],
) -> None:
    issue = Issue(key="ABC-123", summary="Fix login bug")
    jira.search_assigned_open_issues.return_value = [issue]
    prompter = make_prompter(action=Action.CHECKOUT_EXISTING_ISSUE, issue=issue)
    orchestrator, _ = _orchestrator(config_path=config_file, prompter=prompter, git=git, jira=jira)

    snapshot = orchestrator.run()

    assert snapshot.state is RunState.ABORTED
    assert snapshot.issue_key == "ABC-123"
    git.create_and_switch_branch.assert_not_called()
    assert "browse" not in capsys.readouterr().out


def _setup_new_issue(jira: MagicMock) -> IssueType:
    bug = IssueType(id="10001", name="Bug", description="A problem")
    jira.list_issue_types.return_value = [bug, IssueType(id="10002", name="Task")]
    jira.get_current_user.return_value = CurrentUser(account_id="5b10ac8d")
    jira.create_issue.return_value = Issue(key="ABC-456", summary="Crash on save")
    return bug


def test_create_new_issue_and_cancel_branch_leaves_issue_created(
    config_file: Path,
    make_prompter: Callable[..., ScriptedPrompter],
    git: Mock,
    jira: MagicMock,
    capsys: pytest.CaptureFixture[str],
) -> None:
    bug = _setup_new_issue(jira)
    prompter = make_prompter(
        action=Action.CREATE_NEW_ISSUE,
        issueType=bug,
        summary="Crash on save",
        description="Saving a file crashes the app",
        branchName=None,
    )
    orchestrator, _ = _orchestrator(config_path=config_file, prompter=prompter, git=git, jira=jira)

    snapshot = orchestrator.run()

    assert snapshot.state is RunState.ABORTED
    assert snapshot.issue_key == "ABC-456"
    jira.create_issue.assert_called_once_with(
        issue_type_id="10001",
        project_key="ABC",
        assignee_account_id="5b10ac8d",
        summary="Crash on save",
        description="Saving a file crashes the app",
    )
    git.create_and_switch_branch.assert_not_called()
    assert "https://acme.atlassian.net/browse/ABC-456" in capsys.readouterr().out

    branch_step = prompter.step("branchName")
    assert isinstance(branch_step, TextStep)
    assert branch_step.initial == "abc-456-crash-on-save"


def test_create_new_issue_and_branch(
    config_file: Path, make_prompter: Callable[..., ScriptedPrompter], git: Mock, jira: MagicMock
) -> None:
    bug = _setup_new_issue(jira)
    prompter = make_prompter(
        action=Action.CREATE_NEW_ISSUE,
        issueType=bug,
        summary="Crash on save",
        description=None,
        branchName=ACCEPT_DEFAULT,
    )
    orchestrator, _ = _orchestrator(config_path=config_file, prompter=prompter, git=git, jira=jira)

    snapshot = orchestrator.run()

    assert snapshot.state is RunState.BRANCH_CREATED
    assert snapshot.action is Action.CREATE_NEW_ISSUE
    assert jira.create_issue.call_args.kwargs["description"] is None
    git.create_and_switch_branch.assert_called_once_with("abc-456-crash-on-save")

    type_step = prompter.step("issueType")
    assert isinstance(type_step, SelectStep)
    assert [c.title for c in type_step.choices] == ["Bug", "Task"]


@pytest.mark.parametrize("cancelled", ["issueType", "summary"])
def test_create_new_issue_cancelled_before_remote_write(
    cancelled: str,
    config_file: Path,
    make_prompter: Callable[..., ScriptedPrompter],
    git: Mock,
    jira: MagicMock,
) -> None:
    bug = _setup_new_issue(jira)
    answers: dict[str, Any] = {
        "action": Action.CREATE_NEW_ISSUE,
        "issueType": bug,
        "summary": "Crash on save",
    }
    answers[cancelled] = None
    orchestrator, _ = _orchestrator(
        config_path=config_file, prompter=make_prompter(**answers), git=git, jira=jira
    )

    assert orchestrator.run().state is RunState.ABORTED
    jira.create_issue.assert_not_called()
    git.create_and_switch_branch.assert_not_called()


def test_branch_failure_propagates_without_retry(
    config_file: Path, make_prompter: Callable[..., ScriptedPrompter], git: Mock, jira: MagicMock
) -> None:
    issue = Issue(key="ABC-123", summary="Fix login bug")
    jira.search_assigned_open_issues.return_value = [issue]
    git.create_and_switch_branch.side_effect = VcsError(
        "fatal: a branch named 'abc-123-fix-login-bug' already exists", returncode=128
    )
    prompter = make_prompter(
        action=Action.CHECKOUT_EXISTING_ISSUE, issue=issue, branchName=ACCEPT_DEFAULT
    )
    orchestrator, _ = _orchestrator(config_path=config_file, prompter=prompter, git=git, jira=jira)

    with pytest.raises(VcsError):
        orchestrator.run()

    assert git.create_and_switch_branch.call_count == 1
    jira.__exit__.assert_called_once()


def test_tracker_failure_propagates(
    config_file: Path, make_prompter: Callable[..., ScriptedPrompter], git: Mock, jira: MagicMock
) -> None:
    jira.list_issue_types.side_effect = TrackerError("HTTP 401", status_code=401)
    orchestrator, _ = _orchestrator(
        config_path=config_file,
        prompter=make_prompter(action=Action.CREATE_NEW_ISSUE),
        git=git,
        jira=jira,
    )

    with pytest.raises(TrackerError):
        orchestrator.run()

    git.create_and_switch_branch.assert_not_called()


def test_default_editor_opens_config_with_click(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    edit = Mock(return_value=None)
    monkeypatch.setattr(click, "edit", edit)
    config_path = tmp_path / "jiragit.config.json"
    orchestrator = Orchestrator(
        config_store=ConfigStore(config_path),
        prompter=ScriptedPrompter({"shouldOpenFile": True}),
        git=Mock(spec=GitGateway),
        client_factory=Mock(),
    )

    orchestrator.run()

    edit.assert_called_once_with(filename=str(config_path))
