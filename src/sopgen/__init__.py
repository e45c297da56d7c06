"""SOPGen - Standard Operating Procedure document generator.

SOPGen turns catalog SOP data into printable HTML documents. A department and
SOP are picked from a static JSON catalog, document fields are filled in, and
the record is merged into an HTML template.

Core principles:
- Reproducibility: Same template and data always produce the same document
- Fail-soft rendering: Malformed templates or missing data never abort a render
- Safe output: Field values are HTML-escaped unless declared as markup
"""

__version__ = "0.1.0"
__author__ = "SOPGen Contributors"
