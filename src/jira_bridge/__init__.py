"""jira-bridge - plain text and JQL helpers for Jira Cloud.

Provides:
- Conversion of Markdown-like text into Atlassian Document Format (ADF)
- JQL templating with safe value quoting
- An async Jira REST client that applies both to issue and comment writes

Python Version: 3.10+ required
"""

# Logging Configuration - configure before other imports
from .logging_config import StructuredFormatter, configure_logging

configure_logging()

from .__version__ import __version__
from .adf_converter import convert, document_to_adf, parse_inline, text_to_adf
from .client import (
    JiraAuthError,
    JiraClient,
    JiraClientError,
    JiraNotFoundError,
    JiraPermissionError,
    JiraValidationError,
)
from .config import JiraConfig, get_config, reset_config
from .document import (
    BulletList,
    CodeBlock,
    Document,
    Heading,
    ListItem,
    MarkedText,
    MarkType,
    OrderedList,
    Paragraph,
    PlainText,
)
from .jql import format_jql, quote_jql_value

__all__ = [
    "BulletList",
    "CodeBlock",
    "Document",
    "Heading",
    "JiraAuthError",
    "JiraClient",
    "JiraClientError",
    "JiraConfig",
    "JiraNotFoundError",
    "JiraPermissionError",
    "JiraValidationError",
    "ListItem",
    "MarkType",
    "MarkedText",
    "OrderedList",
    "Paragraph",
    "PlainText",
    "StructuredFormatter",
    "__version__",
    "configure_logging",
    "convert",
    "document_to_adf",
    "format_jql",
    "get_config",
    "parse_inline",
    "quote_jql_value",
    "reset_config",
    "text_to_adf",
]
