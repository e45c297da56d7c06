"""Template renderer for SOP documents.

Merges a flat data record into an HTML template using a small placeholder
language:

- ``{{key}}`` is replaced by the (escaped) value of ``key``
- ``{{#if key}}...{{/if}}`` keeps its body only when ``key`` is truthy

Rendering is a pure function of (template, data). It never raises for
malformed templates or missing data; anomalies render as empty output.
"""

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

from markupsafe import escape

logger = logging.getLogger(__name__)

# Fields whose values are HTML fragments built by the caller (lists, tables)
RAW_MARKUP_FIELDS: frozenset[str] = frozenset(
    {
        "procedure",
        "change_history_rows",
        "abbreviations",
        "references",
        "annexures",
    }
)

# Non-greedy body: the first {{/if}} closes the block (no nesting)
_CONDITIONAL_RE = re.compile(r"\{\{#if\s+([A-Za-z0-9_]+)\s*\}\}(.*?)\{\{/if\}\}", re.DOTALL)
_VARIABLE_RE = re.compile(r"\{\{([A-Za-z0-9_]+)\}\}")
_RESIDUAL_RE = re.compile(r"\{\{[^{}]+\}\}")
_MARKUP_HINT_RE = re.compile(r"^[ \t]*<|&[a-z]+;|&#[0-9]+;", re.IGNORECASE)

# Stray single-brace cleanup
_EMPTY_BRACES_RE = re.compile(r"\{\s*\}")
_WRAPPED_TEXT_RE = re.compile(r"\{\s*([^{}]+?)\s*\}")
_RAW_TEXT_ELEMENT_RE = re.compile(r"(<(style|script)\b[^>]*>.*?</\2\s*>)", re.DOTALL | re.IGNORECASE)


def escape_html(text: str) -> str:
    """Escape ``& < > " '`` for safe inclusion in HTML."""
    return str(escape(text))


def is_truthy(value: Any) -> bool:
    """Evaluate a data value for a ``{{#if}}`` block.

    Args:
        value: Value from the data record (may be None)

    Returns:
        True for non-blank strings, non-empty sequences/mappings,
        non-zero numbers and True
    """
    if value is None or isinstance(value, bool):
        return bool(value)
    if isinstance(value, str):
        return value.strip() != ""
    if isinstance(value, int | float):
        return value != 0
    if isinstance(value, Mapping | list | tuple | set | frozenset):
        return len(value) > 0
    return str(value).strip() != ""


class TemplateRenderer:
    """Renders SOP templates with a flat data record.

    Usage:
        renderer = TemplateRenderer()
        html = renderer.render(template_html, record.to_view_data())
    """

    def __init__(
        self,
        raw_fields: Iterable[str] | None = None,
        sniff_markup: bool = False,
    ) -> None:
        """Initialize the renderer.

        Args:
            raw_fields: Field names whose values are trusted markup
                (defaults to RAW_MARKUP_FIELDS)
            sniff_markup: Also skip escaping for values that look like
                markup already (leading tag or HTML entity)
        """
        self.raw_fields = frozenset(RAW_MARKUP_FIELDS if raw_fields is None else raw_fields)
        self.sniff_markup = sniff_markup

    def render(self, template: str | None, data: Mapping[str, Any] | None) -> str:
        """Render a template with the given data record.

        Args:
            template: Template HTML
            data: Flat key/value record

        Returns:
            Rendered HTML with no leftover placeholder tokens
        """
        if not template:
            return ""

        data = data or {}

        html = _CONDITIONAL_RE.sub(
            lambda m: m.group(2) if is_truthy(data.get(m.group(1))) else "",
            template,
        )

        def substitute(match: re.Match[str]) -> str:
            key = match.group(1)
            if key not in data:
                return match.group(0)
            return self.stringify(key, data[key])

        html = _VARIABLE_RE.sub(substitute, html)
        # Unwrapping stray braces can form new tokens, e.g. "{{a{b}}}"
        while True:
            cleaned = _strip_stray_braces(_RESIDUAL_RE.sub("", html))
            if cleaned == html:
                break
            html = cleaned

        logger.debug("Rendered template (%d characters)", len(html))
        return html

    def stringify(self, key: str, value: Any) -> str:
        """Convert a data value into the text substituted for ``{{key}}``.

        Args:
            key: Field name
            value: Field value

        Returns:
            Substitution text
        """
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, int | float):
            if isinstance(value, float) and value.is_integer():
                return str(int(value))
            return str(value)
        if isinstance(value, list | tuple):
            return "\n".join(self.stringify(key, item) for item in value)
        return self._escape_for(key, str(value))

    def _escape_for(self, key: str, text: str) -> str:
        if key in self.raw_fields:
            return text
        if self.sniff_markup and _MARKUP_HINT_RE.search(text):
            return text
        return escape_html(text)


def _strip_stray_braces(html: str) -> str:
    """Remove stray ``{ }`` and unwrap ``{ text }`` in the document text.

    Unlike the rest of the document, `<style>` and `<script>` element contents
    are left untouched so that CSS rules and scripts keep their braces.
    """
    parts = _RAW_TEXT_ELEMENT_RE.split(html)
    cleaned: list[str] = []

    # split() yields [text, element, tag_name, text, element, tag_name, ...]
    for index, part in enumerate(parts):
        position = index % 3
        if position == 0:
            part = _EMPTY_BRACES_RE.sub("", part)
            part = _WRAPPED_TEXT_RE.sub(r"\1", part)
            cleaned.append(part)
        elif position == 1:
            cleaned.append(part)

    return "".join(cleaned)


_default_renderer = TemplateRenderer()


def render(template: str | None, data: Mapping[str, Any] | None) -> str:
    """Render a template with the default renderer settings."""
    return _default_renderer.render(template, data)
