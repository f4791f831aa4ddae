"""Jira REST API (v2) client wrapper.

Keeps HTTP calls out of the interactive flow and makes tests easy: a
``requests.Session`` can be injected.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import TracebackType
from typing import Any

import requests

from jiragit import __version__
from jiragit.orchestrator.errors import TrackerError

logger = logging.getLogger(__name__)

ASSIGNED_OPEN_ISSUES_JQL = (
    "assignee in (currentUser()) and sprint in openSprints() "
    "and statusCategory in ('To Do') order by created DESC"
)


@dataclass(frozen=True, slots=True)
class Issue:
    """Minimal issue metadata."""

    key: str
    summary: str
    description: str | None = None


@dataclass(frozen=True, slots=True)
class IssueType:
    id: str
    name: str
    description: str | None = None


@dataclass(frozen=True, slots=True)
class CurrentUser:
    account_id: str
    display_name: str | None = None


def _optional_str(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _error_detail(resp: requests.Response) -> str:
    """Extract Jira's error text from a response body, if there is any."""

    try:
        data = resp.json()
    except ValueError:
        return resp.text.strip()[:200]

    if not isinstance(data, dict):
        return ""

    messages: list[str] = []
    error_messages = data.get("errorMessages")
    if isinstance(error_messages, list):
        messages.extend(str(m) for m in error_messages if m)
    errors = data.get("errors")
    if isinstance(errors, dict):
        messages.extend(f"{field}: {msg}" for field, msg in errors.items())
    return "; ".join(messages)


class JiraClient:
    """Small wrapper around the Jira REST API for the operations jiragit needs."""

    def __init__(
        self,
        *,
        host: str,
        email: str,
        token: str,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        if not host:
            raise ValueError("Jira host is required")
        if not email or not token:
            raise ValueError("Jira email and API token are required")

        self._base_url = host.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.auth = (email, token)
        self._session.headers.update(
            {
                "Accept": "application/json",
                "Content-Type": "application/json",
                "User-Agent": f"jiragit/{__version__}",
            }
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def _api_url(self, path: str) -> str:
        return f"{self._base_url}/rest/api/2/{path.lstrip('/')}"

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        url = self._api_url(path)
        try:
            resp = self._session.request(
                method, url, params=params, json=json, timeout=self._timeout
            )
        except requests.RequestException as e:
            raise TrackerError(f"{method} {url} failed: {e}") from e

        if not 200 <= resp.status_code < 300:
            detail = _error_detail(resp)
            message = f"{method} {url} returned HTTP {resp.status_code}"
            if detail:
                message = f"{message}: {detail}"
            raise TrackerError(message, status_code=resp.status_code)

        try:
            return resp.json()
        except ValueError as e:
            raise TrackerError(
                f"{method} {url} returned a non-JSON body", status_code=resp.status_code
            ) from e

    @staticmethod
    def _parse_issue(item: object) -> Issue | None:
        if not isinstance(item, dict):
            return None
        key = item.get("key")
        if not isinstance(key, str) or not key.strip():
            return None

        fields = item.get("fields")
        if not isinstance(fields, dict):
            fields = {}

        summary = fields.get("summary")
        if not isinstance(summary, str):
            summary = ""

        return Issue(key=key, summary=summary, description=_optional_str(fields.get("description")))

    def search_assigned_open_issues(self) -> list[Issue]:
        """Return 'To Do' issues assigned to the current user in open sprints, newest first.

        Jira Cloud serves the search at ``search/jql``. Jira Server and Data
        Center only have ``search``, so a 404 from the first is retried there.
        """

        params = {"jql": ASSIGNED_OPEN_ISSUES_JQL, "fields": "summary,description"}
        try:
            data = self._request("GET", "search/jql", params=params)
        except TrackerError as e:
            if e.status_code != 404:
                raise
            logger.debug("search/jql not found; using the legacy search endpoint")
            data = self._request("GET", "search", params=params)

        if not isinstance(data, dict):
            raise TrackerError("Unexpected search response: expected an object")

        raw_issues = data.get("issues")
        if not isinstance(raw_issues, list):
            return []

        issues = [issue for issue in map(self._parse_issue, raw_issues) if issue is not None]
        logger.info("Assigned issues fetched", extra={"count": len(issues)})
        return issues

    def list_issue_types(self) -> list[IssueType]:
        """Return all issue types visible to the user. Types without a name are dropped."""

        data = self._request("GET", "issuetype")
        if not isinstance(data, list):
            raise TrackerError("Unexpected issue type response: expected a list")

        issue_types: list[IssueType] = []
        for item in data:
            if not isinstance(item, dict):
                continue
            name = item.get("name")
            type_id = item.get("id")
            if not isinstance(name, str) or not name.strip():
                continue
            if type_id is None:
                continue
            issue_types.append(
                IssueType(
                    id=str(type_id),
                    name=name,
                    description=_optional_str(item.get("description")),
                )
            )
        return issue_types

    def get_current_user(self) -> CurrentUser:
        data = self._request("GET", "myself")
        if not isinstance(data, dict):
            raise TrackerError("Unexpected user response: expected an object")

        account_id = data.get("accountId")
        if not isinstance(account_id, str) or not account_id.strip():
            raise TrackerError("Unexpected user response: missing accountId")
        return CurrentUser(account_id=account_id, display_name=_optional_str(data.get("displayName")))

    def create_issue(
        self,
        *,
        issue_type_id: str,
        project_key: str,
        assignee_account_id: str,
        summary: str,
        description: str | None,
    ) -> Issue:
        payload: dict[str, Any] = {
            "fields": {
                "issuetype": {"id": issue_type_id},
                "project": {"key": project_key},
                "assignee": {"id": assignee_account_id},
                "summary": summary,
                "description": description or "",
            }
        }
        data = self._request("POST", "issue", json=payload)
        if not isinstance(data, dict):
            raise TrackerError("Unexpected create issue response: expected an object")

        key = data.get("key")
        if not isinstance(key, str) or not key.strip():
            raise TrackerError("Unexpected create issue response: missing key")

        logger.info("Issue created", extra={"key": key, "project": project_key})
        return Issue(key=key, summary=summary, description=description or None)

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> JiraClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
