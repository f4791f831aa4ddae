"""Jira REST API access."""

from jiragit.orchestrator.jira.client import CurrentUser, Issue, IssueType, JiraClient

__all__ = ["CurrentUser", "Issue", "IssueType", "JiraClient"]
