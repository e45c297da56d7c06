"""SOPGen data models.

This module exports the SOP document entities:
- SOPRecord: The SOP document being edited
- SectionToggles / FieldToggles: Visibility switches
- ChangeHistoryEntry: Change history row
- Signatory: Sign-off block entry
"""

from sopgen.models.sop import (
    ChangeHistoryEntry,
    FieldToggles,
    SectionToggles,
    Signatory,
    SOPRecord,
)

__all__ = [
    "SOPRecord",
    "SectionToggles",
    "FieldToggles",
    "ChangeHistoryEntry",
    "Signatory",
]
