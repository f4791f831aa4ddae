"""Interactive issue-to-branch flow.

Provides:
- Settings and the per-user Jira config file
- Structured logging
- A Jira REST client, prompt steps and a git gateway
- The orchestrator that sequences them
"""
