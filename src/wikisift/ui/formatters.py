"""Output formatting for search results and source status.

Three result formats are supported: a rich table, plain text blocks and
JSON (camelCase keys).
"""

from __future__ import annotations

import json
from collections.abc import Sequence

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from wikisift.models.result import SearchResult

SUMMARY_PREVIEW_CHARS = 200
OUTPUT_FORMATS = ("table", "json", "plain")


def truncate(text: str, width: int = SUMMARY_PREVIEW_CHARS) -> str:
    """Shorten *text* to *width* characters, ending with an ellipsis."""
    if len(text) <= width:
        return text
    return text[: width - 3] + "..."


def format_json(results: Sequence[SearchResult]) -> str:
    """Serialize results as an indented JSON array."""
    rows = [result.model_dump(mode="json", by_alias=True) for result in results]
    return json.dumps(rows, ensure_ascii=False, indent=2)


def format_plain(results: Sequence[SearchResult], detailed: bool = False) -> str:
    """Render results as plain text blocks separated by rules."""
    lines: list[str] = []
    for result in results:
        lines.append(f"Title: {result.title}")
        lines.append(f"Source: {result.source}")
        lines.append(f"URL: {result.url}")
        if detailed:
            lines.append(f"Language: {result.language}")
            lines.append(f"Relevance: {result.relevance_score:.2f}")
            lines.append(f"Retrieved: {result.retrieved_at.isoformat()}")
        lines.append(f"Summary: {result.summary}")
        lines.append("-" * 80)
    return "\n".join(lines)


def build_results_table(results: Sequence[SearchResult], detailed: bool = False) -> Table:
    """Build a rich table with one row per result.

    Upstream text goes into ``Text`` cells, so brackets in titles or
    summaries are shown as-is and never parsed as console markup.
    """
    table = Table(title="Results", show_lines=True)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Title", style="cyan bold")
    table.add_column("Source")
    if detailed:
        table.add_column("URL", overflow="fold")
        table.add_column("Relevance", justify="right")
        table.add_column("Retrieved")
    table.add_column("Summary")

    for index, result in enumerate(results, start=1):
        row = [
            Text(str(index)),
            Text(result.title),
            Text(f"{result.source} ({result.language.upper()})"),
        ]
        if detailed:
            row += [
                Text(result.url),
                Text(f"{result.relevance_score:.2f}"),
                Text(result.retrieved_at.strftime("%H:%M:%S")),
            ]
        row.append(Text(result.summary if detailed else truncate(result.summary)))
        table.add_row(*row)
    return table


def build_result_details(result: SearchResult) -> Panel:
    """Build a panel with every field of one result, metadata included."""
    grid = Table.grid(padding=(0, 2))
    grid.add_column(style="bold")
    grid.add_column(overflow="fold")
    grid.add_row("Source", Text(f"{result.source} ({result.language.upper()})"))
    grid.add_row("URL", Text(result.url or "-"))
    grid.add_row("Relevance", f"{result.relevance_score:.2f}")
    grid.add_row("Retrieved", result.retrieved_at.strftime("%d/%m/%Y %H:%M:%S"))
    grid.add_row("Summary", Text(result.summary))
    for key, value in result.metadata.items():
        if value not in (None, ""):
            grid.add_row(Text(key), Text(str(value)))

    return Panel(grid, title=Text(result.title), border_style="blue", padding=(1, 2))


def build_status_table(status: dict[str, bool]) -> Table:
    """Build a rich table of source availability."""
    online = sum(1 for ok in status.values() if ok)
    table = Table(title="Sources", caption=f"Online: {online}/{len(status)}")
    table.add_column("Source")
    table.add_column("Status")
    for name, ok in status.items():
        table.add_row(Text(name), "[green]online[/green]" if ok else "[red]offline[/red]")
    return table
