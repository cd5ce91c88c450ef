"""Pydantic models for Jira request arguments.

Validates the structured arguments accepted by JiraClient operations before
any request is sent. Field names are snake_case; the camelCase names used by
tool-call payloads (projectKey, maxResults, ...) are accepted as aliases.

Validation failures raise pydantic.ValidationError.
"""

import re
from typing import Annotated, Any, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

__all__ = [
    "AddCommentArgs",
    "CommentVisibility",
    "CreateIssueArgs",
    "GetIssuesArgs",
    "SearchIssuesArgs",
    "TransitionIssueArgs",
    "UpdateIssueArgs",
]

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _validate_email(value: str) -> str:
    if not _EMAIL_RE.match(value):
        raise ValueError(f"Invalid email address: '{value}'")
    return value


EmailStr = Annotated[str, AfterValidator(_validate_email)]


class _JiraArgs(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )


class CreateIssueArgs(_JiraArgs):
    """Arguments for creating an issue or subtask.

    Attributes:
        project_key: Project the issue is created in
        summary: Issue title
        issue_type: Issue type name (Task, Story, Bug, ...)
        description: Dialect text, converted to ADF before sending
        assignee: Assignee email, resolved to an account id
        labels: Labels to set
        components: Component names to set
        priority: Priority name
        parent: Parent issue key (subtasks)
        custom_fields: Extra raw fields merged into the payload

    Example:
        >>> CreateIssueArgs(projectKey="PROJ", summary="Fix login", issueType="Bug")
    """

    project_key: str = Field(..., min_length=1)
    summary: str = Field(..., min_length=1)
    issue_type: str = Field(..., min_length=1)
    description: str | None = None
    assignee: EmailStr | None = None
    labels: list[str] | None = None
    components: list[str] | None = None
    priority: str | None = None
    parent: str | None = None
    custom_fields: dict[str, Any] = Field(default_factory=dict)


class UpdateIssueArgs(_JiraArgs):
    """Arguments for updating an existing issue.

    ``status`` is applied through a workflow transition, not a field update.
    """

    issue_key: str = Field(..., min_length=1)
    summary: str | None = None
    description: str | None = None
    assignee: EmailStr | None = None
    status: str | None = None
    priority: str | None = None
    labels: list[str] | None = None
    components: list[str] | None = None
    custom_fields: dict[str, Any] = Field(default_factory=dict)


class GetIssuesArgs(_JiraArgs):
    """Arguments for listing issues by project key and/or JQL."""

    project_key: str | None = Field(default=None, min_length=1)
    jql: str | None = None
    max_results: int = Field(default=50, ge=1, le=100)
    fields: list[str] | None = None

    @model_validator(mode="after")
    def require_project_or_jql(self) -> "GetIssuesArgs":
        if self.project_key is None and self.jql is None:
            raise ValueError("Either projectKey or jql must be provided")
        return self


class SearchIssuesArgs(_JiraArgs):
    """Arguments for a free JQL search across projects."""

    jql: str = Field(..., min_length=1)
    max_results: int = Field(default=50, ge=1, le=100)
    fields: list[str] | None = None


class TransitionIssueArgs(_JiraArgs):
    """Arguments for moving an issue through its workflow.

    Either transition_id or transition_name must be given; a name is matched
    case-insensitively against the issue's available transitions.
    """

    issue_key: str = Field(..., min_length=1)
    transition_id: str | None = None
    transition_name: str | None = None
    comment: str | None = None
    fields: dict[str, Any] | None = None

    @model_validator(mode="after")
    def require_transition(self) -> "TransitionIssueArgs":
        if self.transition_id is None and self.transition_name is None:
            raise ValueError("Either transitionId or transitionName must be provided")
        return self


class CommentVisibility(_JiraArgs):
    type: Literal["group", "role"]
    value: str


class AddCommentArgs(_JiraArgs):
    """Arguments for adding a comment; body is dialect text."""

    issue_key: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)
    visibility: CommentVisibility | None = None
