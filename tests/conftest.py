"""Shared pytest fixtures for the business value report test suite."""

import pytest

ENV_VARS = (
    'JIRA_BASE_URL',
    'JIRA_EMAIL',
    'JIRA_API_TOKEN',
    'JIRA_SPRINT_FIELD',
    'JIRA_MAX_RESULTS',
    'JIRA_TIMEOUT',
    'ADF_MAX_DEPTH',
    'TABLE_WIDTH',
    'LOG_FILE',
    'LOG_LEVEL',
)


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path):
    """Start every test from a clean environment and write logs under tmp_path."""
    from config import settings

    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv('LOG_FILE', str(tmp_path / 'test.log'))
    settings.reset_settings()
    yield
    settings.reset_settings()
    for handler in settings._handlers:
        settings.log.removeHandler(handler)
        handler.close()
    settings._handlers.clear()


@pytest.fixture
def jira_env(monkeypatch):
    """Complete Jira credentials in the environment."""
    monkeypatch.setenv('JIRA_BASE_URL', 'https://example.atlassian.net')
    monkeypatch.setenv('JIRA_EMAIL', 'dev@example.com')
    monkeypatch.setenv('JIRA_API_TOKEN', 'secret-token')
