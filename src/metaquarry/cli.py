"""Command-line interface for MetaQuarry."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import click
import structlog
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from metaquarry import __version__
from metaquarry.api import extract_all, parse_manifest
from metaquarry.config import FORMAT_NAMES, Config, LazyConfig, settings
from metaquarry.errors import ErrorCode, MetaQuarryError
from metaquarry.observability import configure_logging

console = Console()
err_console = Console(stderr=True)
logger = structlog.get_logger(__name__)

FORMAT_DESCRIPTIONS: Dict[str, str] = {
    "meta": "Standard <meta name> tags, title, charset, language, canonical",
    "open_graph": "Open Graph og:* and article/book/profile/fb properties",
    "twitter": "Twitter Card twitter:* tags",
    "json_ld": "application/ld+json script blocks",
    "microdata": "itemscope / itemprop items",
    "microformats": "h-* microformats2 and classic vcard/hentry/... roots",
    "rdfa": "RDFa subject/predicate/object triples",
    "dublin_core": "DC.* and DCTERMS.* meta tags",
    "manifest": "Web App Manifest link (and supplied manifest)",
    "oembed": "oEmbed JSON/XML endpoint discovery",
    "rel_links": "Every rel/href pair grouped by rel token",
}


def _fail(error: MetaQuarryError) -> None:
    err_console.print(f"[red]Error ({error.code.name}): {error.message}[/red]")
    sys.exit(2 if error.code == ErrorCode.INTERNAL else 1)


def _dump(value: Any, pretty: bool) -> str:
    return json.dumps(value, ensure_ascii=False, indent=2 if pretty else None)


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", type=click.Path(exists=True, dir_okay=False), help="Configuration file path")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level (overrides the configuration file)",
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], log_level: Optional[str]) -> None:
    """MetaQuarry - structured metadata extraction from HTML."""
    ctx.ensure_object(dict)
    if config:
        try:
            loaded = Config.from_yaml(Path(config))
        except (ValidationError, yaml.YAMLError) as e:
            err_console.print(f"[red]Invalid configuration in {config}:[/red]\n{e}")
            sys.exit(1)
        LazyConfig.install(loaded)
    ctx.obj["config_path"] = Path(config) if config else None

    monitoring = settings.monitoring
    if log_level:
        monitoring = monitoring.model_copy(update={"log_level": log_level.upper()})
    configure_logging(monitoring)


@cli.command()
@click.argument("html_file", type=click.File("rb"))
@click.option("--base-url", "-b", default=None, help="Absolute URL used to resolve relative links")
@click.option(
    "--format",
    "-f",
    "formats",
    multiple=True,
    type=click.Choice(list(FORMAT_NAMES)),
    help="Only report these formats (repeatable)",
)
@click.option("--manifest-json", type=click.File("rb"), default=None, help="Manifest file to attach to the manifest link")
@click.option("--pretty", is_flag=True, help="Indent the JSON output")
def extract(
    html_file: Any, base_url: Optional[str], formats: Tuple[str, ...], manifest_json: Any, pretty: bool
) -> None:
    """Extract structured metadata from HTML_FILE ('-' for stdin)."""
    try:
        result = extract_all(
            html_file.read(),
            base_url,
            manifest_json=manifest_json.read() if manifest_json is not None else None,
        )
    except MetaQuarryError as e:
        _fail(e)
        return

    selected = set(formats) if formats else set(FORMAT_NAMES)
    output = {name: value for name, value in result.as_json().items() if value is not None and name in selected}
    logger.info("extract_command_finished", present=list(output))
    click.echo(_dump(output, pretty))


@cli.command()
@click.argument("manifest_file", type=click.File("rb"))
@click.option("--base-url", "-b", default=None, help="URL of the manifest itself")
@click.option("--pretty", is_flag=True, help="Indent the JSON output")
def manifest(manifest_file: Any, base_url: Optional[str], pretty: bool) -> None:
    """Normalize a Web App Manifest, resolving its relative URLs."""
    try:
        text = parse_manifest(manifest_file.read(), base_url)
    except MetaQuarryError as e:
        _fail(e)
        return
    click.echo(_dump(json.loads(text), pretty))


@cli.command()
def formats() -> None:
    """List the supported metadata formats."""
    enabled = set(settings.extraction.enabled_formats)
    table = Table(title="Supported Formats")
    table.add_column("Field", style="cyan")
    table.add_column("Enabled", style="magenta")
    table.add_column("Description")
    for name in FORMAT_NAMES:
        table.add_row(name, "yes" if name in enabled else "no", FORMAT_DESCRIPTIONS[name])
    console.print(table)


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
