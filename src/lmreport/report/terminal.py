"""Rich terminal output for parsed license usage."""

from collections import defaultdict
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from lmreport.models import FeatureRecord, FeatureUsageDetail


def _available_style(available: int) -> str:
    if available < 0:
        return "bold red"
    elif available == 0:
        return "bold yellow"
    return "green"


def _fmt_optional(value: Optional[str]) -> str:
    return value if value else "-"


def _fmt_users(users: frozenset[str], limit: int = 6) -> str:
    names = sorted(users)
    text = ", ".join(names[:limit])
    if len(names) > limit:
        text += f" (+{len(names) - limit})"
    return text


def render_records(records: list[FeatureRecord], no_color: bool = False, console: Optional[Console] = None):
    """Render a per-tool summary and the feature table."""
    console = console or Console(force_terminal=not no_color, no_color=no_color, highlight=False)

    if not records:
        console.print("[yellow]No license features found.[/yellow]")
        return

    # === Tool summary ===
    by_tool: dict[str, list[FeatureRecord]] = defaultdict(list)
    for r in records:
        by_tool[r.tool].append(r)

    summary = Table(title="Tools", border_style="blue")
    summary.add_column("Tool", style="cyan")
    summary.add_column("Files", justify="right")
    summary.add_column("Features", justify="right")
    summary.add_column("Issued", justify="right")
    summary.add_column("In use", justify="right")
    summary.add_column("Users", justify="right")
    for tool, items in sorted(by_tool.items()):
        summary.add_row(
            tool,
            str(len({r.source_file for r in items})),
            str(len(items)),
            f"{sum(r.total_licenses for r in items):,}",
            f"{sum(r.in_use for r in items):,}",
            str(len(set().union(*(r.users for r in items)))),
        )
    console.print(summary)

    # === Feature table ===
    table = Table(title=f"License features ({len(records)})", border_style="dim")
    table.add_column("Tool", style="cyan")
    table.add_column("Feature", style="bold")
    table.add_column("Version")
    table.add_column("Expiry")
    table.add_column("Total", justify="right")
    table.add_column("In use", justify="right")
    table.add_column("Avail", justify="right")
    table.add_column("Users")

    for r in records:
        style = _available_style(r.available)
        table.add_row(
            r.tool,
            r.feature,
            _fmt_optional(r.version),
            _fmt_optional(r.expiry),
            f"{r.total_licenses:,}",
            f"{r.in_use:,}",
            f"[{style}]{r.available:,}[/{style}]",
            _fmt_users(r.users),
        )
    console.print(table)


def render_feature_detail(detail: FeatureUsageDetail, no_color: bool = False, console: Optional[Console] = None):
    """Render one feature's summary and its checkouts with usage counts."""
    console = console or Console(force_terminal=not no_color, no_color=no_color, highlight=False)

    style = _available_style(detail.available)
    header_text = (
        f"Tool: {detail.tool} | Version: {_fmt_optional(detail.version)} | "
        f"Expiry: {_fmt_optional(detail.expiry)}\n"
        f"Issued: {detail.total_licenses:,} | In use: {detail.in_use:,} | "
        f"Available: [{style}]{detail.available:,}[/{style}]\n"
        f"PID: {_fmt_optional(detail.process_id)} | Started: {_fmt_optional(detail.start_date)}"
    )
    console.print(Panel(header_text, title=detail.feature, border_style="blue"))

    if not detail.user_details:
        console.print("[dim]No checkouts.[/dim]")
        return

    table = Table(title="Checkouts", border_style="magenta")
    table.add_column("#", justify="right", style="dim")
    table.add_column("User", style="cyan")
    table.add_column("Host")
    table.add_column("Port", justify="right")
    table.add_column("Version")
    table.add_column("PID", justify="right")
    table.add_column("Start")
    table.add_column("Count", justify="right")

    for i, entry in enumerate(detail.user_details, 1):
        c = entry.checkout
        count = f"[bold yellow]{entry.usage_count}[/bold yellow]" if entry.usage_count > 1 else str(entry.usage_count)
        table.add_row(
            str(i), c.username, c.host, c.port or "-", c.version or "-",
            c.process_id, c.start_date, count,
        )
    console.print(table)
