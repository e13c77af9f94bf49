"""Console rendering shared by the scan commands."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from vibecurb.scanner.models import ScanResult, Severity
from vibecurb.scanner.report import summarize

console = Console(stderr=True)

_SEVERITY_COLORS = {
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
}

_MATCH_WIDTH = 50


def print_results(results: list[ScanResult], base_dir: str) -> None:
    """Print findings as a table, then read errors, then the summary."""
    findings = [f for r in results for f in r.findings]
    errors = [r for r in results if r.error]

    if not findings and not errors:
        console.print("[green]No secrets or sensitive data found![/green]")
        print_summary(results)
        return

    if findings:
        table = Table(title="Findings", show_lines=False)
        table.add_column("Severity", style="bold", width=8)
        table.add_column("File", style="cyan")
        table.add_column("Line", justify="right")
        table.add_column("Pattern")
        table.add_column("Match", max_width=_MATCH_WIDTH)
        table.add_column("Fix", style="green")

        for finding in findings:
            color = _SEVERITY_COLORS.get(finding.severity, "white")
            table.add_row(
                f"[{color}]{finding.severity.value}[/{color}]",
                escape(shorten_path(finding.file_path, base_dir)),
                f"{finding.line_number}:{finding.column}",
                finding.pattern,
                escape(finding.match[:_MATCH_WIDTH]),
                finding.fix_suggestion,
            )
        console.print(table)

    for result in errors:
        console.print(
            f"[yellow]{escape(shorten_path(result.file_path, base_dir))}: "
            f"{result.error}[/yellow]"
        )

    print_summary(results)


def print_summary(results: list[ScanResult]) -> None:
    stats = summarize(results)
    console.print("\n[bold]Summary[/bold]")
    if stats.errors:
        console.print(f"[red]{stats.errors} error(s) found[/red]")
    if stats.warnings:
        console.print(f"[yellow]{stats.warnings} warning(s) found[/yellow]")
    if not stats.total:
        console.print("[green]All clear![/green]")


def shorten_path(file_path: str, base_dir: str) -> str:
    """Shorten file path relative to scan directory."""
    if file_path.startswith(base_dir):
        return file_path[len(base_dir) :].lstrip("/") or file_path
    return file_path
