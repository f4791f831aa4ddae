from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


class Action(str, Enum):
    CHECKOUT_EXISTING_ISSUE = "CheckoutExistingIssue"
    CREATE_NEW_ISSUE = "CreateNewIssue"


class RunState(str, Enum):
    START = "start"
    CONFIG_MISSING = "config_missing"
    CONFIG_PRESENT = "config_present"
    WROTE_DEFAULT_CONFIG = "wrote_default_config"
    ACTION_SELECTED = "action_selected"
    BRANCH_CREATED = "branch_created"
    ABORTED = "aborted"
    TERMINATED = "terminated"


ALLOWED_TRANSITIONS: dict[RunState, set[RunState]] = {
    RunState.START: {RunState.CONFIG_MISSING, RunState.CONFIG_PRESENT},
    RunState.CONFIG_MISSING: {RunState.WROTE_DEFAULT_CONFIG},
    RunState.WROTE_DEFAULT_CONFIG: {RunState.TERMINATED},
    RunState.CONFIG_PRESENT: {RunState.ACTION_SELECTED, RunState.ABORTED},
    RunState.ACTION_SELECTED: {RunState.BRANCH_CREATED, RunState.ABORTED},
    RunState.BRANCH_CREATED: set(),
    RunState.ABORTED: set(),
    RunState.TERMINATED: set(),
}

TERMINAL_STATES: frozenset[RunState] = frozenset(
    {RunState.BRANCH_CREATED, RunState.ABORTED, RunState.TERMINATED}
)


class IllegalTransitionError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class RunSnapshot:
    """Where a run is, and what it has acted on so far.

    Fields stay ``None`` until the run reaches the step that sets them.
    """

    state: RunState = RunState.START
    action: Action | None = None
    issue_key: str | None = None
    branch_name: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def to_json(self) -> dict[str, object]:
        out: dict[str, object] = {"state": self.state.value}
        if self.action is not None:
            out["action"] = self.action.value
        if self.issue_key is not None:
            out["issue_key"] = self.issue_key
        if self.branch_name is not None:
            out["branch_name"] = self.branch_name
        return out


def transition(*, current: RunSnapshot, to: RunState, **changes: object) -> RunSnapshot:
    allowed = ALLOWED_TRANSITIONS.get(current.state, set())
    if to not in allowed:
        raise IllegalTransitionError(f"Illegal transition: {current.state.value} -> {to.value}")
    return replace(current, state=to, **changes)
