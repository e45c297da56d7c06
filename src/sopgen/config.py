"""SOPGen configuration system.

Configuration is YAML-based with minimal CLI overrides (--template, --output).
Supports environment variable substitution (${VAR}) in config files.

Configuration file discovery (in priority order):
1. CLI --config argument
2. ./.sopgen/config.yaml
3. ./sopgen.yaml
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from sopgen.templates.renderer import RAW_MARKUP_FIELDS

# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass
class CatalogConfig:
    """Catalog configuration.

    Attributes:
        data_dir: Directory containing departments.json and department folders
    """

    data_dir: str = "data"


@dataclass
class TemplatesConfig:
    """Template selection configuration.

    Attributes:
        dir: Optional directory with user templates (shadows built-ins)
        default: Template used when none is given on the command line
        strict: Reject templates with malformed tags instead of warning
    """

    dir: str | None = None
    default: str = "standard.html"
    strict: bool = False

    def __post_init__(self) -> None:
        """Validate template configuration."""
        if not self.default.endswith(".html"):
            raise ValueError(f"Default template must be an .html file (got {self.default})")


@dataclass
class RenderingConfig:
    """Renderer configuration.

    Attributes:
        raw_fields: Fields whose values are trusted markup (not escaped)
        sniff_markup: Skip escaping for values that already look like markup
    """

    raw_fields: list[str] = field(default_factory=lambda: sorted(RAW_MARKUP_FIELDS))
    sniff_markup: bool = False

    def __post_init__(self) -> None:
        """Validate field names."""
        if not isinstance(self.raw_fields, list | tuple) or not all(
            isinstance(name, str) for name in self.raw_fields
        ):
            raise ValueError(f"raw_fields must be a list of field names, got: {self.raw_fields!r}")
        self.raw_fields = list(self.raw_fields)

        invalid = [name for name in self.raw_fields if not re.fullmatch(r"[A-Za-z0-9_]+", name)]
        if invalid:
            raise ValueError(f"Invalid raw field names: {invalid}")


@dataclass
class OutputConfig:
    """Output configuration.

    Attributes:
        path: Output file path
        standalone: Wrap the document in a printable HTML page
    """

    path: str = "sop.html"
    standalone: bool = True


@dataclass
class DefaultsConfig:
    """Initial values for fields not provided by SOP documents.

    Attributes:
        institute: Institute name
        copy_type: Copy type label (e.g., CONTROLLED, UNCONTROLLED)
        revision_no: Initial revision number
    """

    institute: str = ""
    copy_type: str = "CONTROLLED"
    revision_no: str = "00"

    def to_dict(self) -> dict[str, str]:
        """Convert to record field values."""
        return {
            "institute": self.institute,
            "copy_type": self.copy_type,
            "revision_no": self.revision_no,
        }


@dataclass
class SOPGenConfig:
    """Top-level SOPGen configuration.

    Attributes:
        catalog: Catalog location
        templates: Template selection
        rendering: Escaping policy
        output: Output path and page wrapping
        defaults: Initial field values
    """

    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    templates: TemplatesConfig = field(default_factory=TemplatesConfig)
    rendering: RenderingConfig = field(default_factory=RenderingConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)

    # Runtime overrides (set by CLI)
    _config_path: Path | None = field(default=None, repr=False)

    @property
    def config_path(self) -> Path | None:
        """Get the path to the config file that was loaded."""
        return self._config_path


# =============================================================================
# Environment Variable Substitution
# =============================================================================


def substitute_env_vars(value: Any) -> Any:
    """Substitute environment variables in config values.

    Supports ${VAR} syntax for environment variable substitution.
    Example: ${SOP_DATA_DIR} -> value of SOP_DATA_DIR

    Args:
        value: Config value (string, dict, list, or other)

    Returns:
        Value with environment variables substituted
    """
    if isinstance(value, str):
        pattern = re.compile(r"\$\{([^}]+)\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                raise ValueError(f"Environment variable not set: {var_name}")
            return env_value

        return pattern.sub(replace_var, value)

    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [substitute_env_vars(v) for v in value]

    return value


# =============================================================================
# Config File Discovery
# =============================================================================


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find configuration file in standard locations.

    Search order:
    1. ./.sopgen/config.yaml
    2. ./sopgen.yaml

    Args:
        start_path: Starting directory for search (defaults to cwd)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_path is None:
        start_path = Path.cwd()

    start_path = start_path.resolve()

    candidates = [
        start_path / ".sopgen" / "config.yaml",
        start_path / "sopgen.yaml",
    ]

    for candidate in candidates:
        if candidate.exists():
            return candidate

    return None


# =============================================================================
# Config Loading
# =============================================================================


def load_config_from_dict(data: dict[str, Any]) -> SOPGenConfig:
    """Load configuration from a dictionary.

    Args:
        data: Configuration dictionary

    Returns:
        SOPGenConfig instance
    """
    data = substitute_env_vars(data)

    config = SOPGenConfig()

    if "catalog" in data:
        catalog_data = data["catalog"] or {}
        config.catalog = CatalogConfig(
            data_dir=str(catalog_data.get("data_dir", config.catalog.data_dir)),
        )

    if "templates" in data:
        templates_data = data["templates"] or {}
        config.templates = TemplatesConfig(
            dir=templates_data.get("dir"),
            default=templates_data.get("default", config.templates.default),
            strict=bool(templates_data.get("strict", False)),
        )

    if "rendering" in data:
        rendering_data = data["rendering"] or {}
        config.rendering = RenderingConfig(
            raw_fields=rendering_data.get("raw_fields", config.rendering.raw_fields),
            sniff_markup=bool(rendering_data.get("sniff_markup", False)),
        )

    if "output" in data:
        output_data = data["output"] or {}
        config.output = OutputConfig(
            path=output_data.get("path", config.output.path),
            standalone=bool(output_data.get("standalone", True)),
        )

    if "defaults" in data:
        defaults_data = data["defaults"] or {}
        config.defaults = DefaultsConfig(
            institute=str(defaults_data.get("institute", "")),
            copy_type=str(defaults_data.get("copy_type", "CONTROLLED")),
            revision_no=str(defaults_data.get("revision_no", "00")),
        )

    return config


def load_config(
    config_path: Path | None = None,
    auto_discover: bool = True,
) -> SOPGenConfig:
    """Load configuration from file.

    Args:
        config_path: Explicit path to config file
        auto_discover: Whether to search for config file if not specified

    Returns:
        SOPGenConfig instance

    Raises:
        FileNotFoundError: If config_path specified but doesn't exist
    """
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        found_path = config_path
    elif auto_discover:
        found_path = find_config_file()
    else:
        found_path = None

    if found_path is not None:
        with open(found_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        config = load_config_from_dict(data)
        config._config_path = found_path
    else:
        config = SOPGenConfig()

    return config


def create_default_config() -> str:
    """Create default configuration YAML content.

    Returns:
        YAML string with default configuration and comments
    """
    return '''# SOPGen Configuration

# SOP catalog (departments.json + one folder per department)
catalog:
  data_dir: "data"

# Templates
templates:
  # dir: ".sopgen/templates"   # user templates, shadow built-ins by name
  default: "standard.html"     # standard.html, compact.html
  strict: false                # reject templates with malformed {{#if}} tags

# Escaping policy
rendering:
  # Fields holding pre-rendered markup (lists, tables); never escaped
  raw_fields:
    - abbreviations
    - annexures
    - change_history_rows
    - procedure
    - references
  sniff_markup: false          # also skip escaping for values that look like HTML

# Output settings
output:
  path: "sop.html"
  standalone: true             # wrap in a printable A4 page

# Initial field values
defaults:
  institute: ""
  copy_type: "CONTROLLED"
  revision_no: "00"
'''
