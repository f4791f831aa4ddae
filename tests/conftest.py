"""Test configuration and fixtures."""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import pytest

from jiragit.orchestrator.config import JiraConfig
from jiragit.orchestrator.prompts import Prompter, PromptStep, TextStep

ACCEPT_DEFAULT = object()
"""Scripted answer meaning 'press Enter on a text step with an initial value'."""


class ScriptedPrompter(Prompter):
    """Answers prompt steps by name and records every step it was asked."""

    def __init__(self, answers: Mapping[str, Any]) -> None:
        self._answers = dict(answers)
        self.steps: list[PromptStep] = []

    def ask(self, step: PromptStep) -> Any | None:
        self.steps.append(step)
        answer = self._answers.get(step.name)
        if answer is ACCEPT_DEFAULT:
            assert isinstance(step, TextStep)
            return step.initial
        return answer

    def step(self, name: str) -> PromptStep:
        for step in self.steps:
            if step.name == name:
                return step
        raise AssertionError(f"Prompt step {name!r} was never asked")


@pytest.fixture
def make_prompter() -> Callable[..., ScriptedPrompter]:
    def _make(**answers: Any) -> ScriptedPrompter:
        return ScriptedPrompter(answers)

    return _make


@pytest.fixture
def config_data() -> dict[str, str]:
    return {
        "email": "dev@acme.io",
        "token": "test-token",
        "host": "https://acme.atlassian.net",
        "projectKey": "ABC",
    }


@pytest.fixture
def jira_config(config_data: dict[str, str]) -> JiraConfig:
    return JiraConfig.model_validate(config_data)


@pytest.fixture
def config_file(tmp_path: Path, config_data: dict[str, str]) -> Path:
    """A valid config file on disk."""
    path = tmp_path / "jiragit.config.json"
    path.write_text(json.dumps(config_data), encoding="utf-8")
    return path
