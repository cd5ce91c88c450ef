"""JQL templating with value quoting.

Substitutes ``${key}`` placeholders in a JQL template with values quoted for
JQL. Only the first occurrence of each placeholder is replaced; callers rely
on this, so repeated placeholders need one mapping entry per occurrence.

Reference: https://support.atlassian.com/jira-software-cloud/docs/use-advanced-search-with-jira-query-language-jql/
"""

import logging
import re
from collections.abc import Mapping
from typing import Any

logger = logging.getLogger("jira_bridge.jql")

__all__ = ["format_jql", "format_jql_value", "quote_jql_value"]

# Characters that force a string value into double quotes
_NEEDS_QUOTING_RE = re.compile(r"[ \"'\\]")


def quote_jql_value(value: str) -> str:
    """Quote a string for JQL when it contains a space, quote or backslash.

    Embedded double quotes are backslash-escaped; other characters pass
    through untouched.

    Example:
        >>> quote_jql_value("In Progress")
        '"In Progress"'
        >>> quote_jql_value("PROJ")
        'PROJ'
    """
    if _NEEDS_QUOTING_RE.search(value):
        escaped = value.replace('"', '\\"')
        return f'"{escaped}"'
    return value


def format_jql_value(value: Any) -> str:
    """Render one substitution value as JQL text.

    - str: quoted via quote_jql_value()
    - list/tuple: each element rendered, joined with ", "
    - bool / None: JQL literals true, false, null
    - anything else: str(value), unquoted
    """
    if isinstance(value, str):
        return quote_jql_value(value)
    if isinstance(value, (list, tuple)):
        return ", ".join(
            quote_jql_value(item) if isinstance(item, str) else _scalar(item)
            for item in value
        )
    return _scalar(value)


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def format_jql(template: str, values: Mapping[str, Any] | None = None) -> str:
    """Fill ``${key}`` placeholders in a JQL template.

    Entries are applied in mapping order against the progressively rewritten
    query. For each entry only the first occurrence of its placeholder is
    replaced. Placeholders without an entry are left verbatim.

    Args:
        template: JQL containing ``${key}`` placeholders.
        values: Substitution values keyed by placeholder name.

    Returns:
        The formatted JQL string.

    Example:
        >>> format_jql("project = ${p} AND status = ${s}", {"p": "ABC", "s": "In Progress"})
        'project = ABC AND status = "In Progress"'
    """
    query = template
    for key, value in (values or {}).items():
        placeholder = f"${{{key}}}"
        if placeholder not in query:
            logger.debug("jql_placeholder_missing", extra={"placeholder": key})
            continue
        query = query.replace(placeholder, format_jql_value(value), 1)
    return query
