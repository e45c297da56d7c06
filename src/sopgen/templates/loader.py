"""Template loading by name.

Templates are looked up in a user templates directory first, then among the
built-in templates shipped in ``sopgen/templates/sop``. Loaded templates are
cached by name until the cache is cleared.
"""

import logging
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path

from sopgen.templates.validation import TemplateIssue, validate_template

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIX = ".html"


class TemplateNotFoundError(Exception):
    """Raised when a template name cannot be resolved."""

    def __init__(self, name: str, message: str | None = None) -> None:
        self.name = name
        self.message = message or f"Template not found: {name}"
        super().__init__(self.message)


class TemplateValidationError(Exception):
    """Raised in strict mode when a template has malformed tags."""

    def __init__(self, name: str, issues: list[TemplateIssue]) -> None:
        self.name = name
        self.issues = issues
        details = "; ".join(str(issue) for issue in issues)
        super().__init__(f"Template {name} is invalid: {details}")


def _builtin_dir() -> Traversable:
    return resources.files("sopgen.templates") / "sop"


class TemplateLoader:
    """Loads HTML templates by name.

    Usage:
        loader = TemplateLoader(Path("my_templates"))
        html = loader.load("standard.html")
    """

    def __init__(self, templates_dir: Path | None = None, strict: bool = False) -> None:
        """Initialize template loader.

        Args:
            templates_dir: Optional directory with user templates
            strict: Raise TemplateValidationError for malformed templates
                instead of logging warnings
        """
        self.templates_dir = templates_dir
        self.strict = strict
        self._cache: dict[str, str] = {}

    def list_templates(self) -> list[str]:
        """List available template names.

        Returns:
            Sorted template names (user and built-in)
        """
        names = {
            entry.name
            for entry in _builtin_dir().iterdir()
            if entry.is_file() and entry.name.endswith(TEMPLATE_SUFFIX)
        }

        if self.templates_dir is not None and self.templates_dir.is_dir():
            names.update(path.name for path in self.templates_dir.glob(f"*{TEMPLATE_SUFFIX}"))

        return sorted(names)

    def load(self, name: str) -> str:
        """Load a template by name.

        Args:
            name: Template file name (e.g., "standard.html")

        Returns:
            Template content

        Raises:
            TemplateNotFoundError: If the name is invalid or unknown
            TemplateValidationError: If strict and the template is malformed
        """
        if name in self._cache:
            return self._cache[name]

        if not name or "/" in name or "\\" in name or name in {".", ".."}:
            raise TemplateNotFoundError(name, f"Invalid template name: {name!r}")

        content = self._read(name)

        issues = validate_template(content)
        if issues:
            if self.strict:
                raise TemplateValidationError(name, issues)
            for issue in issues:
                logger.warning("Template %s: %s", name, issue)

        self._cache[name] = content
        logger.debug("Loaded template %s (%d characters)", name, len(content))
        return content

    def clear_cache(self) -> None:
        """Forget all cached templates."""
        self._cache.clear()

    def _read(self, name: str) -> str:
        if self.templates_dir is not None:
            path = self.templates_dir / name
            if path.is_file():
                return path.read_text(encoding="utf-8")

        builtin = _builtin_dir() / name
        if builtin.is_file():
            return builtin.read_text(encoding="utf-8")

        raise TemplateNotFoundError(name)
