"""SOPGen CLI interface.

Commands:
- departments: List catalog departments
- sops: List the SOPs of a department
- templates: List available document templates
- render: Generate an SOP document
- validate: Lint an SOP template
- init: Initialize SOPGen configuration

Global options:
- --config: Path to configuration file
- --verbose: Enable verbose output with timestamps
- --quiet: Suppress info messages
- --ci: JSON log output
- --version: Show version and exit
"""

import json
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

import typer
import yaml

from sopgen import __version__
from sopgen.config import SOPGenConfig, create_default_config, load_config
from sopgen.utils.logging import configure_from_cli, get_logger

if TYPE_CHECKING:
    from sopgen.catalog import Catalog

# Create Typer app
app = typer.Typer(
    name="sopgen",
    help="Standard Operating Procedure document generator",
    add_completion=False,
    no_args_is_help=True,
)

_logger = get_logger("sopgen.cli")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"sopgen {__version__}")
        raise typer.Exit()


def _get_config(ctx: typer.Context) -> SOPGenConfig:
    return ctx.obj if isinstance(ctx.obj, SOPGenConfig) else SOPGenConfig()


@app.callback()
def main(
    ctx: typer.Context,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output with timestamps",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress info messages (warnings and errors only)",
        ),
    ] = False,
    ci: Annotated[
        bool,
        typer.Option(
            "--ci",
            help="Enable CI mode with JSON log output",
        ),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """SOPGen - Standard Operating Procedure document generator.

    Pick a department and SOP from the catalog, fill in document fields,
    and render a printable HTML document from a template.
    """
    configure_from_cli(verbose=verbose, quiet=quiet, ci=ci)

    try:
        ctx.obj = load_config(config_path=config)
        if ctx.obj.config_path:
            _logger.debug(f"Loaded config from: {ctx.obj.config_path}")
    except FileNotFoundError as e:
        _logger.error(str(e))
        raise typer.Exit(1)
    except (ValueError, yaml.YAMLError) as e:
        _logger.error(f"Failed to load config: {e}")
        raise typer.Exit(1)


# =============================================================================
# catalog commands
# =============================================================================


DataDirOption = Annotated[
    Path | None,
    typer.Option(
        "--data-dir",
        "-d",
        help="Catalog directory (overrides config)",
        file_okay=False,
    ),
]

JsonOption = Annotated[
    bool,
    typer.Option(
        "--json",
        help="Output results as JSON",
    ),
]


def _open_catalog(ctx: typer.Context, data_dir: Path | None) -> "Catalog":
    from sopgen.catalog import Catalog

    return Catalog(data_dir or Path(_get_config(ctx).catalog.data_dir))


def _echo_entries(entries: list[Any], json_output: bool) -> None:
    if json_output:
        typer.echo(json.dumps([entry.to_dict() for entry in entries], indent=2))
        return

    for entry in entries:
        typer.echo(f"  {entry.key:<24} {entry.name}")


@app.command()
def departments(
    ctx: typer.Context,
    data_dir: DataDirOption = None,
    json_output: JsonOption = False,
) -> None:
    """List catalog departments."""
    from sopgen.catalog import CatalogError

    try:
        entries = _open_catalog(ctx, data_dir).departments()
    except CatalogError as e:
        _logger.error(str(e))
        raise typer.Exit(1)

    _echo_entries(entries, json_output)


@app.command()
def sops(
    ctx: typer.Context,
    department: Annotated[str, typer.Argument(help="Department key")],
    data_dir: DataDirOption = None,
    json_output: JsonOption = False,
) -> None:
    """List the SOPs of a department."""
    from sopgen.catalog import CatalogError

    try:
        entries = _open_catalog(ctx, data_dir).sops(department)
    except CatalogError as e:
        _logger.error(str(e))
        raise typer.Exit(1)

    _echo_entries(entries, json_output)


@app.command()
def templates(ctx: typer.Context) -> None:
    """List available document templates."""
    from sopgen.templates import TemplateLoader

    config = _get_config(ctx)
    loader = TemplateLoader(Path(config.templates.dir) if config.templates.dir else None)

    for name in loader.list_templates():
        marker = " (default)" if name == config.templates.default else ""
        typer.echo(f"  {name}{marker}")


# =============================================================================
# render command
# =============================================================================


def _parse_assignments(assignments: list[str]) -> dict[str, str]:
    values: dict[str, str] = {}
    for assignment in assignments:
        name, sep, value = assignment.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"Expected KEY=VALUE for --set, got {assignment!r}")
        # Allow multi-line values (procedure, change history) from the shell
        values[name.strip()] = value.replace("\\n", "\n")
    return values


def _load_values_file(path: Path) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Values file must contain a mapping: {path}")
    return data


@app.command()
def render(
    ctx: typer.Context,
    department: Annotated[str, typer.Argument(help="Department key")],
    sop: Annotated[str, typer.Argument(help="SOP key")],
    template: Annotated[
        str | None,
        typer.Option(
            "--template",
            "-t",
            help="Template name (overrides config)",
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output file path (overrides config)",
        ),
    ] = None,
    data_dir: DataDirOption = None,
    values: Annotated[
        Path | None,
        typer.Option(
            "--values",
            help="YAML file with field values",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    assignments: Annotated[
        list[str] | None,
        typer.Option(
            "--set",
            "-s",
            help="Field value as KEY=VALUE (repeatable, \\n for new lines)",
        ),
    ] = None,
    enable: Annotated[
        list[str] | None,
        typer.Option(
            "--enable",
            help="Enable an optional section (repeatable)",
        ),
    ] = None,
    disable: Annotated[
        list[str] | None,
        typer.Option(
            "--disable",
            help="Disable an optional section (repeatable)",
        ),
    ] = None,
    hide: Annotated[
        list[str] | None,
        typer.Option(
            "--hide",
            help="Hide a document-control field (repeatable)",
        ),
    ] = None,
    fragment: Annotated[
        bool,
        typer.Option(
            "--fragment",
            help="Write the bare document fragment instead of a printable page",
        ),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            help="Print the document instead of writing a file",
        ),
    ] = False,
) -> None:
    """Generate an SOP document.

    Loads the SOP from the catalog, applies field values and section
    toggles, and renders it with the selected template.

    Exit codes:
        0: Document generated successfully
        1: Error during generation
    """
    from sopgen.catalog import CatalogError
    from sopgen.session import SOPSession
    from sopgen.templates import (
        PageRenderer,
        TemplateLoader,
        TemplateNotFoundError,
        TemplateRenderer,
        TemplateValidationError,
    )

    config = _get_config(ctx)
    template_name = template or config.templates.default
    output_path = output or Path(config.output.path)
    standalone = config.output.standalone and not fragment

    loader = TemplateLoader(
        Path(config.templates.dir) if config.templates.dir else None,
        strict=config.templates.strict,
    )
    renderer = TemplateRenderer(
        raw_fields=config.rendering.raw_fields,
        sniff_markup=config.rendering.sniff_markup,
    )
    session = SOPSession(loader, renderer)

    try:
        record = _open_catalog(ctx, data_dir).load_record(department, sop, config.defaults.to_dict())
        session.select_record(record)

        field_values: dict[str, Any] = _load_values_file(values) if values else {}
        field_values.update(_parse_assignments(assignments or []))
        for name, value in field_values.items():
            session.update_field(name, value)

        for name in enable or []:
            session.toggle_section(name, True)
        for name in disable or []:
            session.toggle_section(name, False)
        for name in hide or []:
            session.toggle_field(name, False)

        html = session.select_template(template_name)
    except (CatalogError, TemplateNotFoundError, TemplateValidationError, ValueError, yaml.YAMLError) as e:
        _logger.error(str(e))
        raise typer.Exit(1)
    except KeyError as e:
        _logger.error(f"{e.args[0]}")
        raise typer.Exit(1)

    _logger.info(f"Rendered {department}/{sop} with {template_name}")

    if standalone:
        html = PageRenderer().render(html, title=record.title)

    if dry_run:
        typer.echo(html)
        _logger.info("Dry run complete - no files written")
        return

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(html, encoding="utf-8")
    typer.echo(f"📄 SOP written to: {output_path}")


# =============================================================================
# validate command
# =============================================================================


@app.command()
def validate(
    template: Annotated[
        Path,
        typer.Argument(
            help="Path to SOP template to validate",
            exists=True,
            dir_okay=False,
        ),
    ],
    json_output: JsonOption = False,
) -> None:
    """Validate an SOP template.

    Reports unterminated or nested {{#if}} blocks, stray {{/if}} tags and
    malformed placeholders.
    """
    from sopgen.templates import validate_template

    _logger.info(f"Validating template: {template}")

    issues = validate_template(template.read_text(encoding="utf-8"))

    if json_output:
        typer.echo(json.dumps([issue.to_dict() for issue in issues], indent=2))
    elif issues:
        typer.echo(f"❌ Template has {len(issues)} issue(s): {template}")
        for issue in issues:
            typer.echo(f"   • {issue}")
    else:
        typer.echo(f"✅ Template is valid: {template}")

    if issues:
        raise typer.Exit(1)


# =============================================================================
# init command
# =============================================================================


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            help="Overwrite existing config",
        ),
    ] = False,
) -> None:
    """Initialize SOPGen configuration.

    Creates .sopgen/config.yaml and a user templates directory.
    """
    sopgen_dir = Path(".sopgen")
    sopgen_dir.mkdir(exist_ok=True)

    templates_dir = sopgen_dir / "templates"
    templates_dir.mkdir(exist_ok=True)

    config_file = sopgen_dir / "config.yaml"

    if config_file.exists() and not force:
        _logger.error(f"Config already exists: {config_file}")
        _logger.info("Use --force to overwrite")
        raise typer.Exit(1)

    config_file.write_text(create_default_config(), encoding="utf-8")
    _logger.info(f"Created config: {config_file}")

    typer.echo("✅ SOPGen configuration initialized")
    typer.echo(f"   Config: {config_file}")
    typer.echo(f"   Templates: {templates_dir}/")


if __name__ == "__main__":
    app()
