"""Terminal rendering for seeder runs."""

from __future__ import annotations

import traceback
from typing import Sequence

import typer
from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .results import RunLedger, SeederResult, SeederStatus
from .runner import RunObserver


console = Console()


_COLORS = {
    "red": typer.colors.RED,
    "green": typer.colors.GREEN,
    "yellow": typer.colors.YELLOW,
    "cyan": typer.colors.CYAN,
    "white": typer.colors.WHITE,
    "gray": typer.colors.BRIGHT_BLACK,
}

# Label and rich style for each status in the results table
_STATUS_DISPLAY = {
    SeederStatus.COMPLETED: ("✓ Done", "green"),
    SeederStatus.FAILED: ("✗ Failed", "red"),
    SeederStatus.SKIPPED: ("⊘ Skipped", "yellow"),
    SeederStatus.RUNNING: ("⟳ Running", "yellow"),
    SeederStatus.PENDING: ("○ Pending", "bright_black"),
}


def colorize(text: str, color: str | None = None, bold: bool = False, dim: bool = False) -> str:
    return typer.style(text, fg=_COLORS.get(color) if color else None, bold=bold, dim=dim)


def format_duration(ms: float) -> str:
    if ms < 1000:
        return f"{ms:.0f}ms"
    if ms < 60_000:
        return f"{ms / 1000:.1f}s"
    return f"{ms / 60_000:.1f}m"


def print_start_banner(label: str | None = None, total: int | None = None) -> None:
    title = colorize(f"🌱 Running {label or 'Seeders'}", "cyan", bold=True)
    count = f" {colorize(f'({total} seeders)', dim=True)}" if total is not None else ""
    typer.echo(f"\n{title}{count}\n")


def print_seeder_header(name: str, index: int, total: int, description: str | None = None) -> None:
    position = f"[{index + 1}/{total}]"
    fill = "━" * max(0, 50 - len(name) - len(position))
    typer.echo(colorize(f"━━━ {position} {name} {fill}", "cyan", bold=True))
    if description:
        typer.echo(colorize(f"    {description}", dim=True))
    typer.echo("")


def print_seeder_complete(duration_ms: float, success: bool) -> None:
    typer.echo("")
    if success:
        typer.echo(colorize(f"    ✓ Completed in {format_duration(duration_ms)}", "green"))
    else:
        typer.echo(colorize(f"    ✗ Failed after {format_duration(duration_ms)}", "red"))
    typer.echo("")


def print_seeder_skipped(failed_dependencies: Sequence[str]) -> None:
    typer.echo("")
    typer.echo(
        colorize(f"    ⊘ Skipped (depends on failed: {', '.join(failed_dependencies)})", "yellow")
    )
    typer.echo("")


def print_step(description: str, ok: bool, cached: bool = False, error: BaseException | None = None) -> None:
    if ok:
        suffix = f" {colorize('(cached)', 'cyan')}" if cached else ""
        typer.echo(f"    {colorize('✓', 'green')} {description}{suffix}")
        return
    typer.echo(f"    {colorize('✗', 'red')} {description}")
    if error is not None:
        typer.echo(f"        {colorize(str(error), dim=True)}")


def print_results_table(results: Sequence[SeederResult]) -> None:
    if not results:
        typer.echo("No seeders registered")
        return

    table = Table(box=box.SQUARE, header_style="bold white")
    table.add_column("Seeder")
    table.add_column("Status", min_width=10)
    table.add_column("Duration", style="dim")
    for result in results:
        label, style = _STATUS_DISPLAY[result.status]
        duration = format_duration(result.duration_ms) if result.duration_ms is not None else "-"
        table.add_row(Text(result.name), Text(label, style=style), duration)

    typer.echo("")
    console.print(table)
    typer.echo("")


def format_error_context(error: BaseException, limit: int = 3) -> list[str]:
    """Return the innermost ``limit`` traceback frames as one-line strings."""
    frames = traceback.extract_tb(error.__traceback__)[-limit:]
    return [f'File "{f.filename}", line {f.lineno}, in {f.name}' for f in frames]


def print_errors(results: Sequence[SeederResult]) -> None:
    for result in results:
        if result.status is not SeederStatus.FAILED:
            continue
        typer.echo(colorize(f'❌ Seeder "{result.name}" failed:', "red"))
        if result.error is not None:
            message = str(result.error) or type(result.error).__name__
            typer.echo(f"   {colorize(message, dim=True)}")
            for line in format_error_context(result.error):
                typer.echo(f"   {colorize(line, 'gray')}")
        typer.echo("")


def print_summary(ledger: RunLedger) -> None:
    counts = ledger.counts()
    completed = counts[SeederStatus.COMPLETED]
    failed = counts[SeederStatus.FAILED]
    skipped = counts[SeederStatus.SKIPPED]
    pending = counts[SeederStatus.PENDING]

    if failed or skipped:
        parts = [f"{completed} completed"]
        if failed:
            parts.append(f"{failed} failed")
        if skipped:
            parts.append(f"{skipped} skipped")
        if pending:
            parts.append(f"{pending} pending")
        typer.echo(colorize(f"Seeding failed: {', '.join(parts)}", "red"))
    else:
        typer.echo(
            f"{colorize('✓ Seeding complete:', 'green')} {completed} seeders executed successfully\n"
        )


def print_execution_order(order: Sequence[str], dependencies: dict[str, Sequence[str]]) -> None:
    typer.echo(colorize("Execution order:", "white", bold=True))
    for i, name in enumerate(order, start=1):
        deps = dependencies.get(name) or ()
        suffix = ""
        if deps:
            suffix = " " + colorize(f"(depends on: {', '.join(deps)})", dim=True)
        typer.echo(f"  {i}. {name}{suffix}")
    typer.echo("")


class ConsoleObserver(RunObserver):
    """Prints progress while seeders run and the results table at the end."""

    def __init__(self, verbose: bool = True, print_results: bool = True):
        self.verbose = verbose
        self.print_results = print_results

    def on_unit_start(self, name, index, total, description):
        if self.verbose:
            print_seeder_header(name, index, total, description)

    def on_unit_end(self, name, duration_ms, success):
        if self.verbose:
            print_seeder_complete(duration_ms, success)

    def on_unit_skipped(self, name, index, total, description, failed_dependencies):
        if self.verbose:
            print_seeder_header(name, index, total, description)
            print_seeder_skipped(failed_dependencies)

    def on_resolution_error(self, error):
        typer.echo(colorize("Failed to resolve seeder dependencies:", "red"), err=True)
        typer.echo(f"   {error}", err=True)

    def on_run_end(self, ledger):
        if self.print_results:
            print_results_table(ledger.results)
            print_errors(ledger.results)
            print_summary(ledger)
