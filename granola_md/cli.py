"""CLI entry point for granola-md."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Annotated, Any

import typer
import yaml
from rich import print as rprint
from rich.logging import RichHandler
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from granola_md.classify import analyze_document
from granola_md.config import DEFAULT_CONFIG_TEMPLATE, PROJECT_CONFIG, GranolaMdConfig, load_config
from granola_md.converter import NoteConverter, to_markdown
from granola_md.errors import GranolaMdError
from granola_md.metadata import extract_metadata
from granola_md.models import DocumentRecord, SyncReport
from granola_md.output import VaultWriter
from granola_md.source import GranolaClient, page_documents, resolve_token
from granola_md.sync import NoteImporter

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="granola-md",
    help="Convert Granola meeting notes into a Markdown vault.",
)

config_app = typer.Typer(help="Manage granola-md configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: GranolaMdConfig | None = None

_LOG_LEVELS = {"debug": logging.DEBUG, "info": logging.INFO, "warn": logging.WARNING, "error": logging.ERROR}


def _get_config() -> GranolaMdConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to granola-md.yaml")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    level = logging.DEBUG if verbose else _LOG_LEVELS[_config.log_level]
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(show_time=False, show_path=verbose)],
        force=True,
    )


def _load_json(file: str) -> Any:
    path = Path(file)
    if not path.is_file():
        rprint(f"[red]Error:[/red] File not found: {escape(file)}")
        raise typer.Exit(1)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        rprint(f"[red]Error:[/red] Invalid JSON in {escape(file)}: {escape(str(e))}")
        raise typer.Exit(1)


def _documents_from(payload: Any) -> list[dict]:
    """A dump is a list of records, a page envelope, or a single record."""
    docs = page_documents(payload)
    if not docs and isinstance(payload, Mapping) and "id" in payload:
        docs = [dict(payload)]
    return docs


def _display_report(report: SyncReport, title: str) -> None:
    table = Table(title=title)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right", style="green")
    table.add_row("Created", str(report.created))
    table.add_row("Updated", str(report.updated))
    table.add_row("Unchanged", str(report.unchanged))
    table.add_row("Skipped", str(report.skipped))
    table.add_row("Empty", str(report.empty))
    table.add_row("Errors", str(len(report.errors)))
    table.add_row("Duration", f"{report.duration:.2f}s")
    rprint(table)

    for err in report.errors:
        rprint(f"  [red]error:[/red] {escape(err.document_id or '<no id>')}: {escape(err.error)}")


def _importer(cfg: GranolaMdConfig, vault: str, dry_run: bool) -> NoteImporter:
    writer = VaultWriter(cfg.import_, vault_path=vault or None)
    return NoteImporter(cfg, writer=writer, dry_run=dry_run)


# ---------------------------------------------------------------------------
# Import commands
# ---------------------------------------------------------------------------


@app.command()
def convert(
    file: str = typer.Argument(..., help="JSON dump of Granola documents"),
    vault: Annotated[str, typer.Option("--vault", help="Path to the Markdown vault")] = "",
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Show what would be written")] = False,
) -> None:
    """Convert a JSON dump of documents into vault notes."""
    cfg = _get_config()
    docs = _documents_from(_load_json(file))
    if not docs:
        rprint(f"[yellow]No documents found in[/yellow] {escape(file)}")
        raise typer.Exit(0)

    report = _importer(cfg, vault, dry_run).run(docs)
    _display_report(report, "Dry Run" if dry_run else "Import")
    if report.errors:
        raise typer.Exit(1)


@app.command()
def fetch(
    vault: Annotated[str, typer.Option("--vault", help="Path to the Markdown vault")] = "",
    token: Annotated[str, typer.Option("--token", help="Granola bearer token")] = "",
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Show what would be written")] = False,
) -> None:
    """Fetch every document from the Granola API and import it."""
    cfg = _get_config()

    try:
        client = GranolaClient(cfg.api, resolve_token(cfg.api, token or None))
        report = asyncio.run(_importer(cfg, vault, dry_run).run_async(client))
    except GranolaMdError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    _display_report(report, "Dry Run" if dry_run else "Import")
    if report.errors:
        raise typer.Exit(1)


# ---------------------------------------------------------------------------
# Inspection commands
# ---------------------------------------------------------------------------


@app.command()
def check(
    file: str = typer.Argument(..., help="JSON dump of Granola documents"),
) -> None:
    """Classify documents as empty or substantive."""
    cfg = _get_config()
    docs = _documents_from(_load_json(file))

    table = Table(title=f"Documents ({len(docs)})")
    table.add_column("ID", style="cyan")
    table.add_column("Title")
    table.add_column("Status")
    table.add_column("Sources", style="yellow")
    table.add_column("Preview", style="dim")

    empty = 0
    for doc in docs:
        analysis = analyze_document(doc, max_depth=cfg.content.max_depth)
        meta = extract_metadata(doc)
        if analysis.is_empty:
            empty += 1
            status = "[red]empty[/red]"
        else:
            status = "[green]substantive[/green]"
        table.add_row(
            escape(meta.id or "-"),
            escape(meta.title),
            status,
            ", ".join(analysis.available_sources) or "-",
            escape(meta.preview),
        )
    rprint(table)
    rprint(f"{len(docs) - empty} substantive, {empty} empty")


@app.command()
def render(
    file: str = typer.Argument(..., help="JSON file with a node tree or document record(s)"),
    index: Annotated[int, typer.Option("--index", "-i", help="Which record of a dump to render")] = 0,
) -> None:
    """Print the Markdown body of a node tree or a document record."""
    cfg = _get_config()
    payload = _load_json(file)

    if isinstance(payload, Mapping) and isinstance(payload.get("content"), list):
        typer.echo(to_markdown(payload, max_depth=cfg.content.max_depth))
        return

    docs = _documents_from(payload)
    if not 0 <= index < len(docs):
        rprint(f"[red]Error:[/red] No document at index {index} ({len(docs)} found)")
        raise typer.Exit(1)

    body, source = NoteConverter(cfg).render_body(DocumentRecord.from_raw(docs[index]))
    logger.debug("Rendered from %s", source)
    typer.echo(body)


# ---------------------------------------------------------------------------
# Config commands
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    dumped = yaml.dump(cfg.model_dump(by_alias=True), default_flow_style=False, sort_keys=False)
    rprint(Syntax(dumped, "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default granola-md.yaml in current directory."""
    target = Path(PROJECT_CONFIG)
    if target.exists() and not force:
        rprint(f"[yellow]{PROJECT_CONFIG} already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")
