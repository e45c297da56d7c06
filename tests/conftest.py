"""Shared pytest fixtures for SOPGen tests.

Fixtures are organized by category:
- Path fixtures: Sample catalog and template directories
- Configuration fixtures: Test configs for various scenarios
- Record fixtures: Pre-built SOP records for testing renderers
"""

from pathlib import Path
from typing import Any

import pytest

from sopgen.models.sop import ChangeHistoryEntry, Signatory, SOPRecord

# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def data_dir(fixtures_dir: Path) -> Path:
    """Return the path to the sample SOP catalog."""
    return fixtures_dir / "data"


@pytest.fixture
def templates_dir(fixtures_dir: Path) -> Path:
    """Return the path to user template fixtures."""
    return fixtures_dir / "templates"


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def minimal_config() -> dict[str, Any]:
    """Return a minimal valid SOPGen configuration."""
    return {
        "catalog": {
            "data_dir": "data",
        }
    }


@pytest.fixture
def full_config() -> dict[str, Any]:
    """Return a complete SOPGen configuration with all options."""
    return {
        "catalog": {
            "data_dir": "catalog",
        },
        "templates": {
            "dir": "my_templates",
            "default": "compact.html",
            "strict": True,
        },
        "rendering": {
            "raw_fields": ["procedure", "change_history_rows"],
            "sniff_markup": True,
        },
        "output": {
            "path": "out/sop.html",
            "standalone": False,
        },
        "defaults": {
            "institute": "Institute of Science",
            "copy_type": "MASTER",
            "revision_no": "01",
        },
    }


# =============================================================================
# Record Fixtures
# =============================================================================


@pytest.fixture
def sample_record() -> SOPRecord:
    """Return a filled-in SOP record."""
    return SOPRecord(
        institute="Institute of Science",
        department="biotech",
        title="Operation of Autoclave",
        sop_number="BT-SOP-001",
        effective_date="2024-01-15",
        revision_date="2025-01-15",
        purpose="Sterilization of media & glassware.",
        scope="Biotechnology laboratory.",
        procedure=["Check water level.", "Load <material>."],
        precautions="Never open under pressure.",
        abbreviations="SOP: Standard Operating Procedure\nQA: Quality Assurance",
        change_history=[ChangeHistoryEntry("2024-01-15", "00", "First issue")],
        prepared=Signatory("A. Rao", "Technician", "2024-01-10"),
        approved=Signatory("Dr. S. Iyer", "Head of Department", "2024-01-14"),
    )
