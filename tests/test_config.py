"""Unit tests for jira-bridge configuration with pydantic-settings."""

import pytest
from pydantic import SecretStr, ValidationError

from jira_bridge.config import DEFAULT_ISSUE_FIELDS, JiraConfig, get_config, reset_config


@pytest.mark.usefixtures("clean_env")
class TestJiraConfig:
    """Test JiraConfig with pydantic-settings BaseSettings."""

    def test_default_config_values(self):
        """Defaults apply when nothing is configured."""
        config = JiraConfig(_env_file=None)

        assert config.jira_host == ""
        assert config.jira_email == ""
        assert config.jira_api_token.get_secret_value() == ""
        assert config.jira_api_version == "3"
        assert config.log_level == "INFO"
        assert config.log_format == "json"
        assert config.is_configured() is False
        assert config.get_custom_fields() == DEFAULT_ISSUE_FIELDS

    def test_env_variables_loaded(self, monkeypatch):
        """JIRA_* environment variables populate the config."""
        monkeypatch.setenv("JIRA_HOST", "company.atlassian.net/")
        monkeypatch.setenv("JIRA_EMAIL", "dev@example.com")
        monkeypatch.setenv("JIRA_API_TOKEN", "secret-token")

        config = JiraConfig(_env_file=None)

        assert config.jira_host == "company.atlassian.net"
        assert config.get_instance_url() == "https://company.atlassian.net"
        assert isinstance(config.jira_api_token, SecretStr)
        assert config.jira_api_token.get_secret_value() == "secret-token"
        assert config.is_configured() is True

    def test_token_not_in_repr(self, monkeypatch):
        """SecretStr keeps the token out of repr."""
        monkeypatch.setenv("JIRA_API_TOKEN", "secret-token")
        config = JiraConfig(_env_file=None)
        assert "secret-token" not in repr(config)

    def test_explicit_scheme_kept(self):
        config = JiraConfig(_env_file=None, jira_host="http://jira.local:8080")
        assert config.get_instance_url() == "http://jira.local:8080"

    def test_custom_fields_parsed(self, monkeypatch):
        """Comma-separated JIRA_CUSTOM_FIELDS becomes a list."""
        monkeypatch.setenv("JIRA_CUSTOM_FIELDS", "summary, customfield_10010 ,status")
        config = JiraConfig(_env_file=None)
        assert config.get_custom_fields() == ["summary", "customfield_10010", "status"]

    def test_custom_fields_empty_entry_rejected(self, monkeypatch):
        monkeypatch.setenv("JIRA_CUSTOM_FIELDS", "summary,,status")
        with pytest.raises(ValidationError, match="JIRA_CUSTOM_FIELDS"):
            JiraConfig(_env_file=None)

    def test_invalid_api_version(self, monkeypatch):
        monkeypatch.setenv("JIRA_API_VERSION", "4")
        with pytest.raises(ValidationError):
            JiraConfig(_env_file=None)

    def test_log_level_case_insensitive(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert JiraConfig(_env_file=None).log_level == "DEBUG"

    def test_invalid_log_format(self, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "xml")
        with pytest.raises(ValidationError):
            JiraConfig(_env_file=None)

    def test_config_is_frozen(self):
        config = JiraConfig(_env_file=None)
        with pytest.raises(ValidationError):
            config.jira_host = "other.atlassian.net"


@pytest.mark.usefixtures("clean_env")
class TestConfigSingleton:
    """get_config() caching."""

    def test_same_instance(self):
        assert get_config() is get_config()

    def test_reset_reloads(self, monkeypatch):
        first = get_config()
        monkeypatch.setenv("JIRA_HOST", "reloaded.atlassian.net")
        reset_config()
        second = get_config()
        assert second is not first
        assert second.jira_host == "reloaded.atlassian.net"
