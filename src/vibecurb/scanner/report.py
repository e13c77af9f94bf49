"""Summaries and machine-readable reports over scan results.

Reports never carry the matched text: JSON replaces it with a redaction
marker and Markdown leaves it out.
"""

from __future__ import annotations

import json
from dataclasses import dataclass

from vibecurb.scanner.models import ScanResult, Severity


@dataclass(frozen=True)
class ScanStats:
    """Counts across a list of scan results."""

    errors: int = 0
    warnings: int = 0
    files: int = 0

    @property
    def total(self) -> int:
        return self.errors + self.warnings


def summarize(results: list[ScanResult]) -> ScanStats:
    errors = warnings = 0
    for result in results:
        for finding in result.findings:
            if finding.severity == Severity.ERROR:
                errors += 1
            else:
                warnings += 1
    return ScanStats(errors=errors, warnings=warnings, files=len(results))


def has_errors(results: list[ScanResult]) -> bool:
    return any(
        f.severity == Severity.ERROR for r in results for f in r.findings
    )


def to_json(results: list[ScanResult], redact: bool = True) -> str:
    return json.dumps([r.to_dict(redact=redact) for r in results], indent=2)


def to_markdown(results: list[ScanResult]) -> str:
    stats = summarize(results)
    lines = [
        "# Vibecurb Security Report",
        "",
        "## Summary",
        "",
        f"- **Errors:** {stats.errors}",
        f"- **Warnings:** {stats.warnings}",
        f"- **Files Scanned:** {stats.files}",
        "",
    ]

    if not results:
        lines.append("No secrets or sensitive data found!")
        return "\n".join(lines) + "\n"

    lines += ["## Findings", ""]
    for result in results:
        lines += [f"### {result.file_path}", ""]
        if result.error:
            lines += [f"- **Error:** {result.error}", ""]
            continue
        for finding in result.findings:
            lines += [
                f"**{finding.severity.value.upper()}** - "
                f"Line {finding.line_number}:{finding.column}",
                "",
                f"- **Issue:** {finding.message}",
                f"- **Pattern:** {finding.pattern}",
                f"- **Fix:** {finding.fix_suggestion}",
                "",
            ]
    return "\n".join(lines)
