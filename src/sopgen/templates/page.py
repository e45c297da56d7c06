"""Printable page wrapper for rendered SOP documents.

Rendered SOP templates are HTML fragments. The page renderer wraps a fragment
in a standalone A4 document (print CSS, title) using a Jinja2 package template,
so the result can be opened in a browser and printed or converted to PDF.
"""

import logging
from datetime import UTC, datetime
from pathlib import Path

from jinja2 import Environment, PackageLoader, select_autoescape
from markupsafe import Markup

logger = logging.getLogger(__name__)

PAGE_TEMPLATE = "page.html.j2"


def format_datetime(dt: datetime | str | None) -> str:
    """Format datetime for display in documents.

    Args:
        dt: Datetime object or ISO string

    Returns:
        Formatted date string
    """
    if dt is None:
        return ""

    if isinstance(dt, str):
        try:
            dt = datetime.fromisoformat(dt)
        except ValueError:
            return dt

    # Ensure UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)

    return dt.strftime("%Y-%m-%d %H:%M UTC")


class PageRenderer:
    """Wraps rendered SOP fragments in a standalone HTML page.

    Usage:
        page = PageRenderer().render(fragment, title="Autoclave Operation")
    """

    def __init__(self) -> None:
        """Initialize the page renderer."""
        self._env = Environment(
            loader=PackageLoader("sopgen", "templates"),
            autoescape=select_autoescape(["html", "xml", "j2"]),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

    def render(
        self,
        body: str,
        title: str = "",
        generated_at: datetime | str | None = None,
    ) -> str:
        """Render a complete HTML page around a document fragment.

        Args:
            body: Rendered SOP fragment (trusted markup)
            title: Page title (escaped)
            generated_at: Optional generation timestamp shown in a footer;
                omitted by default so output stays reproducible

        Returns:
            Standalone HTML document
        """
        template = self._env.get_template(PAGE_TEMPLATE)
        page = template.render(
            title=title or "Standard Operating Procedure",
            body=Markup(body),
            generated_at=format_datetime(generated_at),
        )
        logger.debug("Rendered page (%d characters)", len(page))
        return page

    def render_to_file(
        self,
        body: str,
        output_path: Path,
        title: str = "",
        generated_at: datetime | str | None = None,
    ) -> Path:
        """Render a page and write it to a file.

        Args:
            body: Rendered SOP fragment
            output_path: Path to write output file
            title: Page title
            generated_at: Optional generation timestamp

        Returns:
            Path to written file
        """
        content = self.render(body, title=title, generated_at=generated_at)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding="utf-8")
        logger.info("Wrote SOP document to %s", output_path)

        return output_path
