"""Rich-based CLI output formatting."""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn
from rich.table import Table

from ticketlens.analytics import get_monthly_status_table, get_sector_breakdown


console = Console()


def setup_logging(level: str = "WARNING") -> None:
    """Route log records through rich, sharing the CLI console."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )


def print_header(title: str) -> None:
    """Print a styled header."""
    console.print()
    console.print(Panel(title, style="bold blue"))
    console.print()


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]✗[/red] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]![/yellow] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]ℹ[/blue] {message}")


def print_kpi_summary(report: dict[str, Any]) -> None:
    """Print headline KPIs."""
    table = Table(title="Support KPIs", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    status = report.get("conversationsByStatus", {"resolved": 0, "open": 0, "inProgress": 0})
    table.add_row("Total Threads", str(report.get("totalConversations", 0)))
    table.add_row("Resolved", str(status["resolved"]))
    table.add_row("Open", str(status["open"]))
    table.add_row("In Progress", str(status["inProgress"]))
    table.add_row(
        "Avg. First Response", f"{report.get('averageResponseHours', 0):.2f} h"
    )

    console.print(table)


def print_sector_table(report: dict[str, Any]) -> None:
    """Print threads per sector."""
    table = Table(title="Threads by Sector")
    table.add_column("Sector", style="cyan")
    table.add_column("Threads", justify="right", style="green")
    table.add_column("Share", justify="right", style="yellow")

    for row in get_sector_breakdown(report):
        table.add_row(row["sector"], str(row["count"]), f"{row['percentage']:.1f}%")

    console.print(table)


def print_sender_table(report: dict[str, Any], limit: int = 10) -> None:
    """Print the senders opening the most threads."""
    table = Table(title="Top Senders")
    table.add_column("Sender", style="cyan", max_width=40)
    table.add_column("Threads", justify="right", style="green")

    senders = sorted(
        report.get("conversationsBySender", {}).items(),
        key=lambda x: (-x[1], x[0]),
    )
    for sender, count in senders[:limit]:
        table.add_row(sender[:40], str(count))

    console.print(table)


def print_monthly_table(report: dict[str, Any]) -> None:
    """Print per-month volume with status breakdown and quarterly averages."""
    table = Table(title="Threads by Month")
    table.add_column("Month", style="cyan")
    table.add_column("Total", justify="right")
    table.add_column("Resolved", justify="right", style="green")
    table.add_column("Open", justify="right", style="red")
    table.add_column("In Progress", justify="right", style="yellow")

    for row in get_monthly_status_table(report):
        table.add_row(
            row["month"],
            str(row["total"]),
            str(row["resolved"]),
            str(row["open"]),
            str(row["in_progress"]),
        )

    console.print(table)

    quarterly = report.get("quarterlyAverage", {})
    if quarterly:
        console.print()
        q_table = Table(title="Quarterly Average (threads / month)")
        q_table.add_column("Quarter", style="cyan")
        q_table.add_column("Average", justify="right", style="green")
        for quarter in sorted(quarterly):
            q_table.add_row(quarter, f"{quarterly[quarter]:.2f}")
        console.print(q_table)


def print_disordered(report: dict[str, Any]) -> None:
    """Warn about threads whose response predates the opening message."""
    disordered = report.get("disorderedConversations", [])
    if disordered:
        print_warning(
            f"{len(disordered)} thread(s) have a first response before the "
            f"opening message: {', '.join(disordered[:10])}"
        )


def create_progress() -> Progress:
    """Create a progress bar for long operations."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        console=console,
    )


def confirm_action(message: str) -> bool:
    """Ask for user confirmation."""
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
