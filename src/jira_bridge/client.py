"""Jira Cloud REST API client.

Provides an async httpx-based client for the Jira Cloud REST API with Basic
Auth. Issue descriptions and comment bodies are written as dialect text and
converted to Atlassian Document Format (ADF) before sending; JQL is built
with format_jql so user-supplied values are quoted.

Reference: https://developer.atlassian.com/cloud/jira/platform/rest/v3/intro/
"""

import base64
import logging
from typing import Any

import httpx

from .adf_converter import text_to_adf
from .config import DEFAULT_ISSUE_FIELDS, JiraConfig, get_config
from .jql import format_jql
from .logging_config import configure_logging
from .schemas import (
    AddCommentArgs,
    CreateIssueArgs,
    GetIssuesArgs,
    SearchIssuesArgs,
    TransitionIssueArgs,
    UpdateIssueArgs,
)

logger = logging.getLogger("jira_bridge.client")

__all__ = [
    "JiraAuthError",
    "JiraClient",
    "JiraClientError",
    "JiraNotFoundError",
    "JiraPermissionError",
    "JiraValidationError",
]


class JiraClientError(Exception):
    """Raised when a Jira API request fails.

    Wraps httpx errors and HTTP error responses for consistent error handling.

    Attributes:
        status_code: HTTP status of the failed response, None for transport
            errors and client-side lookups.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class JiraAuthError(JiraClientError):
    """HTTP 401: credentials rejected."""


class JiraPermissionError(JiraClientError):
    """HTTP 403: authenticated but not allowed."""


class JiraNotFoundError(JiraClientError):
    """HTTP 404, or a user/transition lookup that matched nothing."""


class JiraValidationError(JiraClientError):
    """HTTP 400: Jira rejected the request payload or JQL."""


def _error_detail(response: httpx.Response) -> str:
    """Extract Jira's errorMessages/errors from an error response."""
    try:
        data = response.json()
    except ValueError:
        return response.text[:200]
    if not isinstance(data, dict):
        return str(data)[:200]
    messages = list(data.get("errorMessages") or [])
    messages.extend(f"{k}: {v}" for k, v in (data.get("errors") or {}).items())
    return "; ".join(messages) or response.reason_phrase


class JiraClient:
    """Jira Cloud REST API client using httpx with Basic Auth.

    Uses a long-lived httpx.AsyncClient with connection pooling. Reuse one
    instance across requests.

    Attributes:
        base_url: Jira instance URL (e.g., https://company.atlassian.net)
        api_url: REST API root (base_url + /rest/api/<version>)
        auth_header: Basic Auth header (base64 encoded email:api_token)
        default_fields: Issue fields requested when the caller names none

    Example:
        >>> async with JiraClient("https://company.atlassian.net", "user@example.com", "token") as client:
        ...     issue = await client.create_issue(
        ...         CreateIssueArgs(projectKey="PROJ", summary="Fix login", issueType="Bug")
        ...     )
    """

    def __init__(
        self,
        instance_url: str,
        email: str,
        api_token: str,
        api_version: str = "3",
        default_fields: list[str] | None = None,
    ) -> None:
        """Initialize Jira client with authentication.

        Args:
            instance_url: Jira instance URL (e.g., https://company.atlassian.net)
            email: Jira account email for Basic Auth
            api_token: Jira API token for authentication
            api_version: REST API version; "3" sends ADF, "2" sends plain text
            default_fields: Issue fields fetched by default
        """
        self.base_url = instance_url.rstrip("/")
        self.api_version = api_version
        self.api_url = f"{self.base_url}/rest/api/{api_version}"
        self.default_fields = list(default_fields or DEFAULT_ISSUE_FIELDS)

        credentials = f"{email}:{api_token}"
        encoded = base64.b64encode(credentials.encode()).decode()
        self.auth_header = f"Basic {encoded}"

        timeout_config = httpx.Timeout(
            connect=3.0,
            read=15.0,
            write=5.0,
            pool=3.0,
        )

        limits = httpx.Limits(
            max_keepalive_connections=20,
            max_connections=100,
            keepalive_expiry=10.0,
        )

        self.client = httpx.AsyncClient(
            timeout=timeout_config,
            limits=limits,
            headers={
                "Authorization": self.auth_header,
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
        )

    @classmethod
    def from_config(cls, config: JiraConfig | None = None) -> "JiraClient":
        """Build a client from JiraConfig (the global config by default).

        Also applies the config's log_level and log_format to the
        jira_bridge logger.

        Raises:
            JiraClientError: If host, email or API token is missing.
        """
        config = config or get_config()
        configure_logging(config.log_level, config.log_format)
        if not config.is_configured():
            raise JiraClientError(
                "Missing required configuration: JIRA_HOST, JIRA_EMAIL, and JIRA_API_TOKEN are required"
            )
        return cls(
            instance_url=config.get_instance_url(),
            email=config.jira_email,
            api_token=config.jira_api_token.get_secret_value(),
            api_version=config.jira_api_version,
            default_fields=config.get_custom_fields(),
        )

    def _rich_text(self, text: str) -> Any:
        """Description/comment payload: ADF for API v3, plain text for v2."""
        if self.api_version == "3":
            return text_to_adf(text)
        return text

    def _error(
        self,
        error: httpx.HTTPError | ValueError,
        operation: str,
        not_found: str | None = None,
        **context: Any,
    ) -> JiraClientError:
        """Log a failed request and translate it into a JiraClientError.

        A ValueError means the response arrived but its body was not JSON
        (e.g. an SSO or proxy HTML page).
        """
        code = f"JIRA_{operation.upper()}"

        if isinstance(error, ValueError):
            logger.error(
                f"jira_{operation}_invalid_response", extra={**context, "error": str(error)}
            )
            return JiraClientError(f"{code}_INVALID_RESPONSE: {error}")

        if isinstance(error, httpx.TimeoutException):
            logger.error(f"jira_{operation}_timeout", extra={**context, "error": str(error)})
            return JiraClientError(f"{code}_TIMEOUT")

        if not isinstance(error, httpx.HTTPStatusError):
            logger.error(f"jira_{operation}_error", extra={**context, "error": str(error)})
            return JiraClientError(f"{code}_ERROR: {error}")

        status = error.response.status_code
        detail = _error_detail(error.response)
        logger.error(
            f"jira_{operation}_failed",
            extra={**context, "status_code": status, "error": detail},
        )
        if status == 401:
            return JiraAuthError(
                "Authentication failed. Check your Jira credentials.", status
            )
        if status == 403:
            return JiraPermissionError(
                f"Permission denied for {operation}: {detail}", status
            )
        if status == 404:
            return JiraNotFoundError(not_found or f"Not found: {detail}", status)
        if status == 400:
            return JiraValidationError(f"Invalid request for {operation}: {detail}", status)
        return JiraClientError(f"{code}_ERROR: HTTP {status}: {detail}", status)

    async def test_connection(self) -> dict[str, Any]:
        """Test Jira API connectivity and authentication.

        Sends GET request to /myself to verify credentials. Never raises.

        Returns:
            dict with keys:
                - success (bool): True if authenticated successfully
                - user_email (str | None): Authenticated user's email
                - error (str | None): Error message if failed
        """
        try:
            response = await self.client.get(f"{self.api_url}/myself")
            response.raise_for_status()
            data = response.json()
            return {
                "success": True,
                "user_email": data.get("emailAddress"),
                "error": None,
            }
        except httpx.TimeoutException as e:
            logger.error("jira_connection_timeout", extra={"error": str(e)})
            return {"success": False, "user_email": None, "error": f"Connection timeout: {e}"}
        except httpx.HTTPStatusError as e:
            logger.error(
                "jira_connection_failed",
                extra={"status_code": e.response.status_code, "error": str(e)},
            )
            return {
                "success": False,
                "user_email": None,
                "error": f"HTTP {e.response.status_code}: {e}",
            }
        except httpx.HTTPError as e:
            logger.error("jira_connection_error", extra={"error": str(e)})
            return {"success": False, "user_email": None, "error": f"Connection error: {e}"}
        except ValueError as e:
            logger.error("jira_connection_invalid_response", extra={"error": str(e)})
            return {
                "success": False,
                "user_email": None,
                "error": f"Invalid response (not JSON): {e}",
            }

    async def find_user_account_id(self, email: str) -> str:
        """Resolve a user's account ID from their email address.

        Raises:
            JiraNotFoundError: If no user has exactly this email
            JiraClientError: If the request fails
        """
        try:
            response = await self.client.get(
                f"{self.api_url}/user/search", params={"query": email}
            )
            response.raise_for_status()
            users = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise self._error(e, "find_user") from e

        for user in users:
            if user.get("emailAddress") == email:
                return user["accountId"]
        raise JiraNotFoundError(f'User with email "{email}" not found')

    async def _resolve_assignee(self, email: str) -> str | None:
        # Issue writes continue without an assignee when the lookup fails
        try:
            return await self.find_user_account_id(email)
        except JiraClientError as e:
            logger.warning(
                "jira_assignee_lookup_failed",
                extra={"assignee": email, "error": str(e)},
            )
            return None

    async def _search(
        self, jql: str, max_results: int, fields: list[str] | None
    ) -> list[dict[str, Any]]:
        payload = {
            "jql": jql,
            "maxResults": max_results,
            "fields": fields or self.default_fields,
        }
        try:
            response = await self.client.post(f"{self.api_url}/search/jql", json=payload)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise self._error(e, "search_issues", jql=jql) from e

        issues = data.get("issues", [])
        logger.info(
            "jira_search_issues_complete",
            extra={"jql": jql, "total_issues": len(issues)},
        )
        return issues

    async def get_issues(self, args: GetIssuesArgs) -> list[dict[str, Any]]:
        """Get issues in a project, optionally narrowed by extra JQL.

        The project key is substituted through format_jql so keys needing
        quotes are quoted. Without a project key the JQL is used as given.

        Raises:
            JiraValidationError: If Jira rejects the JQL
            JiraClientError: If the request fails
        """
        if args.project_key is None:
            jql = args.jql or ""
        elif args.jql:
            jql = format_jql(
                f"project = ${{projectKey}} AND {args.jql}",
                {"projectKey": args.project_key},
            )
        else:
            jql = format_jql("project = ${projectKey}", {"projectKey": args.project_key})
        return await self._search(jql, args.max_results, args.fields)

    async def search_issues(self, args: SearchIssuesArgs) -> list[dict[str, Any]]:
        """Run a JQL search across all projects."""
        return await self._search(args.jql, args.max_results, args.fields)

    async def _common_fields(
        self, args: CreateIssueArgs | UpdateIssueArgs
    ) -> dict[str, Any]:
        fields: dict[str, Any] = dict(args.custom_fields)
        if args.summary:
            fields["summary"] = args.summary
        if args.description:
            fields["description"] = self._rich_text(args.description)
        if args.assignee:
            account_id = await self._resolve_assignee(args.assignee)
            if account_id:
                fields["assignee"] = {"id": account_id}
        if args.priority:
            fields["priority"] = {"name": args.priority}
        return fields

    async def create_issue(self, args: CreateIssueArgs) -> dict[str, Any]:
        """Create a new issue or subtask.

        Returns:
            Jira's create response (id, key, self)

        Raises:
            JiraValidationError: If Jira rejects the issue data
            JiraClientError: If the request fails
        """
        fields = await self._common_fields(args)
        fields["project"] = {"key": args.project_key}
        fields["issuetype"] = {"name": args.issue_type}
        if args.parent:
            fields["parent"] = {"key": args.parent}
        if args.labels:
            fields["labels"] = args.labels
        if args.components:
            fields["components"] = [{"name": name} for name in args.components]

        try:
            response = await self.client.post(f"{self.api_url}/issue", json={"fields": fields})
            response.raise_for_status()
            issue = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise self._error(e, "create_issue", project_key=args.project_key) from e

        logger.info(
            "jira_issue_created",
            extra={"project_key": args.project_key, "issue_key": issue.get("key")},
        )
        return issue

    async def update_issue(self, args: UpdateIssueArgs) -> dict[str, Any]:
        """Update an existing issue and return its refreshed state.

        A status change goes through transition_issue() before the field
        update. Labels and components given here replace the current values.

        Raises:
            JiraNotFoundError: If the issue or status transition does not exist
            JiraClientError: If a request fails
        """
        fields = await self._common_fields(args)
        if args.labels is not None:
            fields["labels"] = args.labels
        if args.components is not None:
            fields["components"] = [{"name": name} for name in args.components]

        if args.status:
            await self.transition_issue(
                TransitionIssueArgs(issue_key=args.issue_key, transition_name=args.status)
            )

        not_found = f"Issue {args.issue_key} not found"
        try:
            response = await self.client.put(
                f"{self.api_url}/issue/{args.issue_key}", json={"fields": fields}
            )
            response.raise_for_status()
            response = await self.client.get(
                f"{self.api_url}/issue/{args.issue_key}",
                params={"fields": ",".join(self.default_fields)},
            )
            response.raise_for_status()
            issue = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise self._error(
                e, "update_issue", not_found=not_found, issue_key=args.issue_key
            ) from e

        logger.info("jira_issue_updated", extra={"issue_key": args.issue_key})
        return issue

    async def get_transitions(self, issue_key: str) -> list[dict[str, Any]]:
        """List the workflow transitions currently available for an issue."""
        try:
            response = await self.client.get(f"{self.api_url}/issue/{issue_key}/transitions")
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise self._error(
                e,
                "get_transitions",
                not_found=f"Issue {issue_key} not found",
                issue_key=issue_key,
            ) from e
        return data.get("transitions", [])

    async def transition_issue(self, args: TransitionIssueArgs) -> dict[str, str]:
        """Move an issue to a new status.

        Raises:
            JiraNotFoundError: If the issue or the named transition does not exist
            JiraClientError: If a request fails
        """
        transition_id = args.transition_id
        if transition_id is None:
            transitions = await self.get_transitions(args.issue_key)
            wanted = (args.transition_name or "").lower()
            match = next((t for t in transitions if t.get("name", "").lower() == wanted), None)
            if match is None:
                available = ", ".join(t.get("name", "") for t in transitions)
                raise JiraNotFoundError(
                    f'Transition "{args.transition_name}" not found. '
                    f"Available transitions: {available}"
                )
            transition_id = match["id"]

        payload: dict[str, Any] = {"transition": {"id": transition_id}}
        if args.comment:
            payload["update"] = {
                "comment": [{"add": {"body": self._rich_text(args.comment)}}]
            }
        if args.fields:
            payload["fields"] = args.fields

        try:
            response = await self.client.post(
                f"{self.api_url}/issue/{args.issue_key}/transitions", json=payload
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise self._error(
                e,
                "transition_issue",
                not_found=f"Issue {args.issue_key} not found",
                issue_key=args.issue_key,
            ) from e

        logger.info(
            "jira_issue_transitioned",
            extra={"issue_key": args.issue_key, "transition_id": transition_id},
        )
        return {"message": f"Issue {args.issue_key} transitioned successfully"}

    async def add_comment(self, args: AddCommentArgs) -> dict[str, Any]:
        """Add a comment to an issue.

        Returns:
            The created comment as returned by Jira
        """
        payload: dict[str, Any] = {"body": self._rich_text(args.body)}
        if args.visibility is not None:
            payload["visibility"] = args.visibility.model_dump()

        try:
            response = await self.client.post(
                f"{self.api_url}/issue/{args.issue_key}/comment", json=payload
            )
            response.raise_for_status()
            comment = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise self._error(
                e,
                "add_comment",
                not_found=f"Issue {args.issue_key} not found",
                issue_key=args.issue_key,
            ) from e

        logger.info("jira_comment_added", extra={"issue_key": args.issue_key})
        return comment

    async def close(self) -> None:
        """Close the HTTP client connection."""
        if getattr(self, "client", None) is not None:
            await self.client.aclose()

    async def __aenter__(self) -> "JiraClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
