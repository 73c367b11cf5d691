"""
Shared pytest fixtures for jira-rest tests.
"""

import pytest

JIRA_REST_ENV_VARS = (
    "JIRA_REST_URL",
    "JIRA_REST_USERNAME",
    "JIRA_REST_PASSWORD",
    "JIRA_REST_PROXY_URL",
    "JIRA_REST_TIMEOUT",
    "JIRA_REST_TRACE",
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep JIRA_REST_* variables of the developer shell out of the tests."""
    for name in JIRA_REST_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
