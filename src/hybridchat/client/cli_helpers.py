"""Helper functions for CLI commands."""

import asyncio

import click

from hybridchat.errors import DocumentStoreError
from hybridchat.service.documents import DocumentCatalog, DocumentStore, LoadReport, load_catalog


def load_store_or_abort(catalog: DocumentCatalog) -> tuple[DocumentStore, LoadReport]:
    """Load the catalog, turning a startup failure into a CLI error.

    Raises:
        click.Abort: If no resident document could be loaded
    """
    try:
        return asyncio.run(load_catalog(catalog))
    except DocumentStoreError as e:
        click.echo(f"✗ Error: {e}", err=True)
        click.echo("\nCheck CONTENT_DIR and RESIDENT_DOCUMENTS.", err=True)
        raise click.Abort()


def format_search_result(index: int, result: dict, max_length: int = 200) -> str:
    """Format a search result for display.

    Args:
        index: Result number (1-based)
        result: Search result dict with filename, score, snippets, size_bytes
        max_length: Maximum snippet length before truncation

    Returns:
        Formatted string for display
    """
    lines = [f"{index}. [{result['filename']}] (score: {result['score']}, {result['size_bytes']} bytes)"]
    for snippet in result["snippets"]:
        flat = " ".join(snippet.split())
        display = flat[:max_length] + "..." if len(flat) > max_length else flat
        lines.append(f"   … {display}")
    lines.append("")
    return "\n".join(lines)


def format_load_report(report: LoadReport, catalog: DocumentCatalog) -> str:
    """Format a per-file load report for display."""
    resident = set(catalog.resident)
    lines = []
    for status in report.statuses:
        partition = "resident" if status.name in resident else "searchable"
        if status.loaded:
            lines.append(f"  ✓ {status.name} ({partition}, {status.size_bytes} bytes)")
        else:
            lines.append(f"  ✗ {status.name} ({partition}): {status.error}")
    lines.append("")
    lines.append(f"📊 Loaded {report.loaded_count} document(s), {report.total_bytes} bytes")
    if report.missing:
        lines.append(f"⚠️  {len(report.missing)} document(s) could not be loaded")
    return "\n".join(lines)
