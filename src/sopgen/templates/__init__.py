"""SOPGen template rendering.

This module provides the placeholder renderer for SOP templates, template
loading and linting, and the printable page wrapper. Rendering is
deterministic: the same template and data always produce the same output.
"""

from sopgen.templates.loader import TemplateLoader, TemplateNotFoundError, TemplateValidationError
from sopgen.templates.page import PageRenderer
from sopgen.templates.renderer import RAW_MARKUP_FIELDS, TemplateRenderer, render
from sopgen.templates.validation import IssueKind, TemplateIssue, validate_template

__all__ = [
    "RAW_MARKUP_FIELDS",
    "IssueKind",
    "PageRenderer",
    "TemplateIssue",
    "TemplateLoader",
    "TemplateNotFoundError",
    "TemplateRenderer",
    "TemplateValidationError",
    "render",
    "validate_template",
]
