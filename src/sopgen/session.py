"""Editing session state.

An SOPSession holds the selected template and the SOP record being edited.
Every mutation re-renders the document, mirroring a live preview.
"""

import logging
from typing import Any

from sopgen.models.sop import SOPRecord
from sopgen.templates.loader import TemplateLoader
from sopgen.templates.renderer import TemplateRenderer

logger = logging.getLogger(__name__)


class SOPSession:
    """Current template and SOP record of one editing session.

    Usage:
        session = SOPSession(TemplateLoader())
        session.select_template("standard.html")
        session.select_record(catalog.load_record("biotech", "autoclave"))
        html = session.update_field("institute", "Institute of Science")
    """

    def __init__(
        self,
        loader: TemplateLoader,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        """Initialize an empty session.

        Args:
            loader: Template loader
            renderer: Template renderer (default settings if omitted)
        """
        self.loader = loader
        self.renderer = renderer or TemplateRenderer()
        self.template_name: str | None = None
        self.template: str = ""
        self.record: SOPRecord | None = None

    def select_template(self, name: str) -> str:
        """Select a template by name and re-render."""
        self.template = self.loader.load(name)
        self.template_name = name
        logger.debug("Selected template %s", name)
        return self.render()

    def select_record(self, record: SOPRecord) -> str:
        """Replace the current SOP record and re-render."""
        self.record = record
        return self.render()

    def update_field(self, name: str, value: Any) -> str:
        """Update one record field and re-render."""
        self._require_record().set_field(name, value)
        return self.render()

    def toggle_section(self, name: str, enabled: bool) -> str:
        """Enable or disable an optional section and re-render."""
        self._require_record().toggle_section(name, enabled)
        return self.render()

    def toggle_field(self, name: str, enabled: bool) -> str:
        """Show or hide a document-control field and re-render."""
        self._require_record().toggle_field(name, enabled)
        return self.render()

    def render(self) -> str:
        """Render the current document.

        Returns:
            Rendered HTML, or an empty string while no template is selected
        """
        if not self.template:
            return ""

        data = self.record.to_view_data() if self.record is not None else {}
        return self.renderer.render(self.template, data)

    def _require_record(self) -> SOPRecord:
        if self.record is None:
            raise RuntimeError("No SOP selected")
        return self.record
