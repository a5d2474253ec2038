"""Rich rendering of listings, details and batch summaries.

All display-related logic for command handlers lives here — no
remote calls and no prompts.  Every function degrades to plain text
when Rich is not installed.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any

from naws.cli import exit_codes
from naws.cli.console import console, out
from naws.core.models import AggregationResult, BatchOutcome, Entity
from naws.core.selection import SelectionCodec, render_cell


def escape_markup(text: str) -> str:
    """Escape Rich markup in remote data; identity without Rich."""
    try:
        from rich.markup import escape
    except ModuleNotFoundError:
        return text
    return escape(text)


def _import_rich_table() -> type[Any] | None:
    try:
        from rich.table import Table
    except ModuleNotFoundError:
        return None
    return Table


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------

def render_entities(
    title: str,
    codec: SelectionCodec,
    entities: Sequence[Entity],
    *,
    id_header: str = "ID",
) -> None:
    """Print *entities* as a table using the codec's columns."""
    if not entities:
        console.print(f"[yellow]No {title.lower()} found.[/yellow]")
        return

    table_class = _import_rich_table()
    if table_class is None:
        out.print(f"{codec.header()}  {id_header}")
        for label in codec.encode(entities):
            out.print(label)
        return

    table = table_class(
        title=f"{title} ({len(entities)})",
        show_header=True,
        header_style="bold magenta",
        border_style="dim",
    )
    for column in codec.columns:
        table.add_column(column.title, justify="left", max_width=column.width, no_wrap=True)
    table.add_column(id_header, style="dim", overflow="fold")

    for entity in entities:
        cells = [escape_markup(render_cell(entity, column).rstrip()) for column in codec.columns]
        table.add_row(*cells, escape_markup(entity.identifier))
    out.print(table)


def render_detail(title: str, payload: Mapping[str, Any]) -> None:
    """Pretty-print one JSON-shaped record."""
    console.print(f"\n[bold cyan]{escape_markup(title)}[/bold cyan]")
    out.print(escape_markup(json.dumps(dict(payload), indent=2, default=str, sort_keys=True)))


def render_breakdown(result: AggregationResult) -> None:
    """Print the per-partition summary of an aggregation."""
    for outcome in result.outcomes:
        if outcome.ok:
            console.print(f"  [green]{escape_markup(outcome.label)}[/green]: {outcome.count}")
        else:
            console.print(
                f"  [red]{escape_markup(outcome.label)}[/red]: failed: {escape_markup(outcome.error or '')}",
            )


# ---------------------------------------------------------------------------
# Batch summary
# ---------------------------------------------------------------------------

def render_batch_summary(outcome: BatchOutcome, verb: str) -> int:
    """Print succeeded / failed lists and return the matching exit code."""
    if outcome.succeeded:
        console.print(f"[bold green]{verb} {outcome.succeeded_count} item(s):[/bold green]")
        for identifier in outcome.succeeded:
            console.print(f"  [green]✓[/green] {escape_markup(identifier)}")
    if outcome.failed:
        console.print(f"[bold red]Failed for {outcome.failed_count} item(s):[/bold red]")
        for item in outcome.failed:
            console.print(f"  [red]✗[/red] {escape_markup(item.identifier)}: {escape_markup(item.error or '')}")
        return exit_codes.GENERAL_ERROR
    return exit_codes.SUCCESS


def nothing_selected() -> int:
    console.print("[yellow]Nothing selected.[/yellow]")
    return exit_codes.SUCCESS
