"""Configuration management with pydantic-settings for jira-bridge.

Loads from (in order of precedence):
1. Environment variables (highest priority)
2. .env file in the working directory
3. Default values (lowest priority)

The config is frozen after load.

References:
- Pydantic Settings: https://docs.pydantic.dev/latest/concepts/pydantic_settings/
"""

from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = [
    "DEFAULT_ISSUE_FIELDS",
    "JiraConfig",
    "get_config",
    "reset_config",
]

# Fields requested from Jira when the caller does not name any
DEFAULT_ISSUE_FIELDS = [
    "summary",
    "description",
    "status",
    "priority",
    "assignee",
    "issuetype",
    "parent",
    "subtasks",
]


class JiraConfig(BaseSettings):
    """Configuration for the Jira Cloud connection.

    Attributes:
        jira_host: Jira Cloud host (e.g., company.atlassian.net), scheme optional
        jira_email: Jira account email for Basic Auth
        jira_api_token: Jira API token (stored as SecretStr)
        jira_api_version: REST API version segment (default "3")
        jira_custom_fields: Comma-separated issue fields to fetch by default
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format (json for production, text for development)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        validate_default=True,
        frozen=True,
        extra="ignore",
    )

    jira_host: str = Field(
        default="",
        description="Jira Cloud host, e.g. company.atlassian.net",
    )

    jira_email: str = Field(
        default="",
        description="Jira account email for Basic Auth",
    )

    jira_api_token: SecretStr = Field(
        default=SecretStr(""),
        description="Jira API token for authentication (stored securely)",
    )

    jira_api_version: str = Field(
        default="3",
        pattern="^[23]$",
        description="Jira REST API version",
    )

    jira_custom_fields: str = Field(
        default="",
        description="Comma-separated issue fields to fetch by default (empty = built-in list)",
    )

    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )

    log_format: str = Field(
        default="json",
        pattern="^(json|text)$",
        description="Log format: json (production), text (development)",
    )

    @field_validator("jira_host", mode="before")
    @classmethod
    def strip_host(cls, v):
        """Drop surrounding whitespace and trailing slashes."""
        if isinstance(v, str):
            return v.strip().rstrip("/")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator("jira_custom_fields", mode="before")
    @classmethod
    def validate_custom_fields(cls, v):
        """Validate format: field,field,... with no empty entries."""
        if not v:
            return v
        fields = [f.strip() for f in v.split(",")]
        if any(not f for f in fields):
            raise ValueError(
                f"Invalid JIRA_CUSTOM_FIELDS: '{v}'. Expected comma-separated field names."
            )
        return v

    def is_configured(self) -> bool:
        """Whether host and credentials are all present."""
        return bool(
            self.jira_host
            and self.jira_email
            and self.jira_api_token.get_secret_value()
        )

    def get_instance_url(self) -> str:
        """Get the Jira base URL, defaulting the scheme to https."""
        if self.jira_host.startswith(("http://", "https://")):
            return self.jira_host
        return f"https://{self.jira_host}"

    def get_custom_fields(self) -> list[str]:
        """Parse jira_custom_fields into a list, or return the default fields."""
        if not self.jira_custom_fields:
            return list(DEFAULT_ISSUE_FIELDS)
        return [f.strip() for f in self.jira_custom_fields.split(",")]


@lru_cache(maxsize=1)
def get_config() -> JiraConfig:
    """Get global configuration singleton.

    First call loads from environment + .env file, subsequent calls return the
    cached instance.

    Raises:
        ValidationError: If configuration values are invalid.
    """
    return JiraConfig()


def reset_config() -> None:
    """Reset configuration singleton (tests only)."""
    get_config.cache_clear()
