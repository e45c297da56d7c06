"""Test fixtures for SOPGen.

This package provides a sample SOP catalog and templates for integration
and end-to-end testing.

Sample data:
- data/: Catalog with biotech and chemistry departments
- templates/: User templates (well-formed and malformed)
"""

from pathlib import Path

# Path to fixtures directory
FIXTURES_DIR = Path(__file__).parent

# Sample catalog root
DATA_DIR = FIXTURES_DIR / "data"

# User templates directory
TEMPLATES_DIR = FIXTURES_DIR / "templates"
