"""Template linting.

Rendering is fail-soft: malformed tags are silently dropped. This module
reports those problems up front so template authors can fix them.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

_TAG_RE = re.compile(r"\{\{([^{}]*)\}\}")
_IF_RE = re.compile(r"#if\s+([A-Za-z0-9_]+)\s*")
_IDENTIFIER_RE = re.compile(r"[A-Za-z0-9_]+")


class IssueKind(Enum):
    """Kind of template problem."""

    UNTERMINATED_IF = "unterminated_if"
    UNMATCHED_ENDIF = "unmatched_endif"
    NESTED_IF = "nested_if"
    INVALID_PLACEHOLDER = "invalid_placeholder"


@dataclass
class TemplateIssue:
    """A problem found in a template.

    Attributes:
        kind: Issue category
        message: Human-readable description
        line: 1-based line number of the offending tag
    """

    kind: IssueKind
    message: str
    line: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "line": self.line,
        }

    def __str__(self) -> str:
        return f"line {self.line}: {self.message}"


def validate_template(text: str) -> list[TemplateIssue]:
    """Check a template for malformed placeholder tags.

    Args:
        text: Template content

    Returns:
        Issues in document order (empty if the template is well-formed)
    """
    issues: list[TemplateIssue] = []
    open_key: str | None = None
    open_line = 0

    for match in _TAG_RE.finditer(text):
        body = match.group(1)
        line = text.count("\n", 0, match.start()) + 1

        if body.startswith("#if"):
            if_match = _IF_RE.fullmatch(body)
            if if_match is None:
                issues.append(
                    TemplateIssue(IssueKind.INVALID_PLACEHOLDER, f"Invalid conditional tag: {{{{{body}}}}}", line)
                )
                continue
            if open_key is not None:
                issues.append(
                    TemplateIssue(
                        IssueKind.NESTED_IF,
                        f"Nested {{{{#if {if_match.group(1)}}}}} inside {{{{#if {open_key}}}}} is not supported",
                        line,
                    )
                )
                continue
            open_key = if_match.group(1)
            open_line = line

        elif body == "/if":
            if open_key is None:
                issues.append(TemplateIssue(IssueKind.UNMATCHED_ENDIF, "{{/if}} without matching {{#if}}", line))
            open_key = None

        elif not _IDENTIFIER_RE.fullmatch(body):
            issues.append(TemplateIssue(IssueKind.INVALID_PLACEHOLDER, f"Invalid placeholder: {{{{{body}}}}}", line))

    if open_key is not None:
        issues.append(
            TemplateIssue(
                IssueKind.UNTERMINATED_IF,
                f"{{{{#if {open_key}}}}} is never closed with {{{{/if}}}}",
                open_line,
            )
        )

    return issues
