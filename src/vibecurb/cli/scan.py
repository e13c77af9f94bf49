"""CLI command: vibecurb scan [PATH] — find secrets, optionally fix them."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import click
import yaml

from vibecurb.cli.render import console, print_results, shorten_path
from vibecurb.config import VibecurbConfig
from vibecurb.fixer.engine import FixResult, RemediationEngine
from vibecurb.scanner.engine import ScanEngine
from vibecurb.scanner.models import ScanResult, flatten
from vibecurb.scanner.report import has_errors, to_json, to_markdown


def _split(value: str | None) -> tuple[str, ...] | None:
    if not value:
        return None
    return tuple(v.strip() for v in value.split(",") if v.strip())


@click.command()
@click.argument("path", type=click.Path(exists=True), default=".")
@click.option(
    "--extensions",
    "-e",
    help="File extensions to scan (comma-separated).",
)
@click.option(
    "--severity",
    "-s",
    type=click.Choice(["error", "warning", "all"]),
    default=None,
    help="Only report findings of this severity (default: all).",
)
@click.option("--exclude", help="Directories to exclude (comma-separated).")
@click.option(
    "--rules",
    type=click.Path(exists=True, dir_okay=False),
    help="YAML file with additional secret rules.",
)
@click.option("--fix", is_flag=True, help="Move secrets to .env and rewrite sources.")
@click.option("--dry-run", is_flag=True, help="Preview fixes without applying them.")
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
@click.option(
    "--markdown",
    type=click.Path(dir_okay=False),
    help="Also write a Markdown report to this file.",
)
def scan(
    path: str,
    extensions: str | None,
    severity: str | None,
    exclude: str | None,
    rules: str | None,
    fix: bool,
    dry_run: bool,
    as_json: bool,
    unredacted: bool,
    markdown: str | None,
) -> None:
    """Scan files for secrets and sensitive data."""
    full_path = os.path.abspath(path)

    try:
        config = VibecurbConfig.load(full_path).with_overrides(
            extensions=_split(extensions),
            exclude=_split(exclude),
            severity=severity,
            rules_file=rules,
        )
        catalog = config.catalog()
    except (ValueError, OSError, yaml.YAMLError) as e:
        raise click.UsageError(str(e)) from None

    if not as_json:
        console.print(f"[bold]Vibecurb[/bold] scanning [cyan]{full_path}[/cyan]\n")
    results = ScanEngine(catalog).scan(config.to_request(full_path))

    if as_json:
        click.echo(to_json(results, redact=not unredacted))
    else:
        print_results(results, full_path)

    if markdown:
        Path(markdown).write_text(to_markdown(results), encoding="utf-8")
        console.print(f"\n[green]Markdown report written to {markdown}[/green]")

    if dry_run:
        _preview(results, full_path)
        sys.exit(1 if has_errors(results) else 0)

    if fix:
        fix_result = _fix(results, full_path)
        if fix_result is None:
            sys.exit(0)
        sys.exit(0 if fix_result.success and not fix_result.unresolved else 1)

    if has_errors(results):
        sys.exit(1)


def _preview(results: list[ScanResult], base_dir: str) -> None:
    findings = flatten(results)
    if not findings:
        console.print("[green]No secrets found to fix[/green]")
        return

    preview = RemediationEngine(base_dir).preview(findings)
    console.print("\n[blue]Fix preview[/blue]\n")
    console.print("Environment variables that would be created:")
    for entry in preview.env_vars:
        console.print(f"  {entry}", style="green", markup=False, highlight=False)
    console.print(f"\nFiles that would be modified: {len(preview.files_to_modify)}")
    for file_path in preview.files_to_modify:
        console.print(f"  [cyan]{shorten_path(file_path, base_dir)}[/cyan]")


def _fix(results: list[ScanResult], base_dir: str) -> FixResult | None:
    findings = flatten(results)
    if not findings:
        console.print("[green]No secrets found to fix[/green]")
        return None

    console.print("\n[blue]Auto-fixing secrets...[/blue]\n")
    result = RemediationEngine(base_dir).remediate(findings)

    if not result.success:
        console.print(f"[red]{result.message}[/red]")
        if result.files_modified:
            console.print(
                "[yellow]Already modified (restore from .backup files):[/yellow]"
            )
            for file_path in result.files_modified:
                console.print(f"  [cyan]{shorten_path(file_path, base_dir)}[/cyan]")
        return result

    console.print(f"[green]{result.message}[/green]")
    console.print(
        f"[green]Wrote .env with {len(result.env_vars)} variable(s)[/green]"
    )
    console.print("[green]Updated .env.example and .gitignore[/green]")
    if result.files_modified:
        console.print("\n[dim]Modified files:[/dim]")
        for file_path in result.files_modified:
            console.print(f"  [cyan]{shorten_path(file_path, base_dir)}[/cyan]")
        console.print("\n[yellow]Backups created: *.backup files[/yellow]")

    if result.unresolved:
        console.print(
            f"\n[red]{len(result.unresolved)} error finding(s) still in source "
            "(detect-only rules); values were copied to .env[/red]"
        )

    console.print("\n[bold]Next steps:[/bold]")
    console.print("  1. Review the changes")
    console.print("  2. Check the values in the .env file")
    console.print("  3. Delete .backup files when satisfied")
    return result
