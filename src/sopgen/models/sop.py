"""SOP document entities.

This module contains the typed SOP record edited by the user:
- SectionToggles: Optional document sections that can be switched on/off
- FieldToggles: Document-control fields that can be hidden
- ChangeHistoryEntry: One row of the change history table
- Signatory: Prepared/checked/approved sign-off block
- SOPRecord: The full document, convertible to a flat view data record
"""

from dataclasses import asdict, dataclass, field, fields
from typing import Any

from markupsafe import escape

DEFAULT_RESPONSIBILITY = (
    "Laboratory In-charge, faculty members, technical staff, and authorized users "
    "are responsible for implementation and compliance of this SOP."
)

SIGNATORY_ROLES = ("prepared", "checked", "approved")

# Flat form-field suffix -> Signatory attribute
_SIGNATORY_PARTS = {"by": "name", "desig": "designation", "date": "date"}


def _split_lines(value: str | list[str] | None) -> list[str]:
    """Normalize newline text or a list into non-blank lines."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split("\n")
    return [str(line).strip() for line in value if str(line).strip()]


def _text_to_markup(text: str) -> str:
    """Escape text and convert newlines to <br> tags."""
    return "<br>".join(str(escape(line)) for line in text.strip().split("\n"))


@dataclass
class SectionToggles:
    """Optional document sections.

    Attributes:
        doc_control: Document control table
        applicability: Applicability section
        abbreviations: Abbreviations section
        references: References section
        annexures: Annexures section
        change_history: Change history table
    """

    doc_control: bool = True
    applicability: bool = False
    abbreviations: bool = False
    references: bool = False
    annexures: bool = False
    change_history: bool = False


@dataclass
class FieldToggles:
    """Document-control fields that can be hidden from the output."""

    sop_number: bool = True
    effective_date: bool = True
    revision_date: bool = True
    copy_type: bool = True


def _set_toggle(toggles: SectionToggles | FieldToggles, name: str, enabled: bool) -> None:
    if name not in {f.name for f in fields(toggles)}:
        raise KeyError(f"Unknown toggle: {name}")
    setattr(toggles, name, enabled)


@dataclass
class ChangeHistoryEntry:
    """Single row of the SOP change history.

    Attributes:
        date: Date of the change
        revision: Revision number
        description: What changed
    """

    date: str = ""
    revision: str = ""
    description: str = ""

    @classmethod
    def parse(cls, line: str) -> "ChangeHistoryEntry":
        """Parse a ``date|revision|description`` line.

        Missing cells are empty; cells beyond the third are ignored.
        """
        cells = [cell.strip() for cell in line.split("|")]
        cells += [""] * (3 - len(cells))
        return cls(date=cells[0], revision=cells[1], description=cells[2])

    def to_row(self) -> str:
        """Render as an escaped HTML table row."""
        return (
            f"<tr><td>{escape(self.date)}</td>"
            f"<td>{escape(self.revision)}</td>"
            f"<td>{escape(self.description)}</td></tr>"
        )


@dataclass
class Signatory:
    """Sign-off block entry."""

    name: str = ""
    designation: str = ""
    date: str = ""


@dataclass
class SOPRecord:
    """A Standard Operating Procedure document being edited.

    The record is typed; free-form fields that templates may reference
    (e.g. custom annexure text) live in ``extra``.
    """

    institute: str = ""
    department: str = ""
    title: str = ""
    sop_number: str = ""

    revision_no: str = "00"
    effective_date: str = ""
    revision_date: str = ""
    next_review_date: str = ""
    copy_type: str = "CONTROLLED"

    purpose: str = ""
    scope: str = ""
    responsibility: str = DEFAULT_RESPONSIBILITY
    procedure: list[str] = field(default_factory=list)
    precautions: str = ""

    applicability: str = ""
    abbreviations: str = ""
    references: str = ""
    annexures: str = ""

    change_history: list[ChangeHistoryEntry] = field(default_factory=list)

    prepared: Signatory = field(default_factory=Signatory)
    checked: Signatory = field(default_factory=Signatory)
    approved: Signatory = field(default_factory=Signatory)

    sections: SectionToggles = field(default_factory=SectionToggles)
    shown_fields: FieldToggles = field(default_factory=FieldToggles)

    extra: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_raw(
        cls,
        department: str,
        raw: dict[str, Any],
        defaults: dict[str, str] | None = None,
    ) -> "SOPRecord":
        """Build a record from a catalog SOP document.

        Args:
            department: Department key the SOP belongs to
            raw: Parsed SOP JSON (``meta`` and ``sections`` objects)
            defaults: Initial values for other fields (institute, copy_type, ...)

        Returns:
            New SOPRecord
        """
        meta = raw.get("meta") or {}
        sections = raw.get("sections") or {}

        record = cls(
            department=department,
            title=meta.get("title") or "",
            purpose=sections.get("purpose") or "",
            scope=sections.get("scope") or "",
            responsibility=sections.get("responsibility") or DEFAULT_RESPONSIBILITY,
            procedure=_split_lines(sections.get("procedure")),
            precautions=sections.get("precautions") or "",
        )

        for name, value in (defaults or {}).items():
            if value:
                record.set_field(name, value)

        return record

    def set_field(self, name: str, value: Any) -> None:
        """Update a single field the way a form input would.

        Args:
            name: Field name (signatories use flat names like ``prepared_by``)
            value: New value; list fields accept newline text or lists
        """
        role, _, part = name.partition("_")

        if name == "procedure":
            self.procedure = _split_lines(value)
        elif name == "change_history":
            self.change_history = [ChangeHistoryEntry.parse(line) for line in _split_lines(value)]
        elif role in SIGNATORY_ROLES and part in _SIGNATORY_PARTS:
            setattr(getattr(self, role), _SIGNATORY_PARTS[part], "" if value is None else str(value))
        elif name in _TEXT_FIELDS:
            setattr(self, name, "" if value is None else str(value))
        else:
            self.extra[name] = "" if value is None else str(value)

    def toggle_section(self, name: str, enabled: bool) -> None:
        """Enable or disable an optional section."""
        _set_toggle(self.sections, name, enabled)

    def toggle_field(self, name: str, enabled: bool) -> None:
        """Show or hide a document-control field."""
        _set_toggle(self.shown_fields, name, enabled)

    def to_view_data(self) -> dict[str, Any]:
        """Flatten the record into the data record consumed by templates.

        Hidden fields and disabled sections render as empty strings. List
        fields are pre-rendered into escaped markup.

        Returns:
            Template key -> value mapping
        """
        sections = self.sections
        shown = self.shown_fields

        data: dict[str, Any] = dict(self.extra)
        data.update(
            {
                "institute": self.institute,
                "department": self.department,
                "title": self.title,
                "sop_number": self.sop_number if shown.sop_number else "",
                "revision_no": self.revision_no,
                "effective_date": self.effective_date if shown.effective_date else "",
                "revision_date": self.revision_date if shown.revision_date else "",
                "next_review_date": self.next_review_date,
                "copy_type": self.copy_type if shown.copy_type else "",
                "doc_control": sections.doc_control,
                "purpose": self.purpose,
                "scope": self.scope,
                "responsibility": self.responsibility,
                "precautions": self.precautions,
                "procedure": "".join(f"<li>{escape(step)}</li>" for step in self.procedure),
                "applicability": self.applicability if sections.applicability else "",
                "abbreviations": _text_to_markup(self.abbreviations) if sections.abbreviations else "",
                "references": _text_to_markup(self.references) if sections.references else "",
                "annexures": _text_to_markup(self.annexures) if sections.annexures else "",
                "change_history_rows": (
                    "".join(entry.to_row() for entry in self.change_history)
                    if sections.change_history
                    else ""
                ),
            }
        )

        for role in SIGNATORY_ROLES:
            signatory: Signatory = getattr(self, role)
            data[f"{role}_by"] = signatory.name
            data[f"{role}_desig"] = signatory.designation
            data[f"{role}_date"] = signatory.date

        return data

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)


_TEXT_FIELDS = frozenset(f.name for f in fields(SOPRecord) if f.type is str)
