"""CLI command: vibecurb scan-network [PATH] — unsafe network/logging code."""

from __future__ import annotations

import os
import sys

import click
import yaml
from rich.table import Table

from vibecurb.cli.render import console, print_results
from vibecurb.config import VibecurbConfig
from vibecurb.scanner.engine import ScanEngine
from vibecurb.scanner.models import flatten
from vibecurb.scanner.network_patterns import NETWORK_CATALOG, network_summary
from vibecurb.scanner.report import has_errors, to_json


@click.command("scan-network")
@click.argument("path", type=click.Path(exists=True), default=".")
@click.option(
    "--severity",
    "-s",
    type=click.Choice(["error", "warning", "all"]),
    default=None,
    help="Only report findings of this severity (default: all).",
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    help="Output results as JSON (matched text redacted).",
)
@click.option(
    "--unredacted",
    is_flag=True,
    help="Include matched text in JSON output.",
)
def scan_network(
    path: str, severity: str | None, as_json: bool, unredacted: bool
) -> None:
    """Scan code for sensitive data in network requests, responses and logs."""
    full_path = os.path.abspath(path)

    try:
        config = VibecurbConfig.load(full_path).with_overrides(severity=severity)
    except (ValueError, OSError, yaml.YAMLError) as e:
        raise click.UsageError(str(e)) from None

    if not as_json:
        console.print(
            f"[bold]Vibecurb[/bold] network scan of [cyan]{full_path}[/cyan]\n"
        )
    results = ScanEngine(NETWORK_CATALOG).scan(config.to_request(full_path))

    if as_json:
        click.echo(to_json(results, redact=not unredacted))
    else:
        print_results(results, full_path)
        _print_categories(network_summary(flatten(results)))

    if has_errors(results):
        sys.exit(1)


def _print_categories(summary: dict[str, int]) -> None:
    table = Table(title="By category", show_lines=False)
    table.add_column("Category")
    table.add_column("Findings", justify="right")
    for category, count in summary.items():
        table.add_row(category, str(count))
    console.print(table)
