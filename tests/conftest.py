"""Shared pytest fixtures for jira-bridge tests.

Fixture Organization:
    - Environment fixtures: isolate tests from JIRA_* / LOG_* variables
    - Client fixtures: JiraClient instances for mocked request tests

Response builders live in jira_test_helpers.py.
"""

import os
import sys
from pathlib import Path

import pytest

from jira_bridge.client import JiraClient
from jira_bridge.config import reset_config

# Add tests directory to sys.path so test modules can import jira_test_helpers
tests_dir = Path(__file__).parent
if str(tests_dir) not in sys.path:
    sys.path.insert(0, str(tests_dir))

_ENV_PREFIXES = ("JIRA_", "LOG_LEVEL", "LOG_FORMAT")


@pytest.fixture
def clean_env(monkeypatch):
    """Remove Jira and logging settings from the environment."""
    for key in list(os.environ.keys()):
        if key.upper().startswith(_ENV_PREFIXES):
            monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def jira_client():
    """Create JiraClient instance for testing."""
    return JiraClient(
        instance_url="https://test.atlassian.net",
        email="test@example.com",
        api_token="test-token-123",
    )
