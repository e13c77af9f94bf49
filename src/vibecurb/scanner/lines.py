"""Line scanner — applies a rule catalog to one file's content."""

from __future__ import annotations

import logging
import os
import re
from collections import defaultdict
from pathlib import Path

from vibecurb.scanner.models import MATCH_DISPLAY_LIMIT, Finding, severity_passes
from vibecurb.scanner.patterns import SECRET_GROUP, Catalog, Rule, is_suppressed

logger = logging.getLogger(__name__)


def scan_content(
    content: str,
    file_path: str,
    catalog: Catalog,
    severity: str = "all",
) -> list[Finding]:
    """Scan file content line by line and return findings in line order.

    On each line, findings follow catalog order; within one rule they run
    left to right. Content checks fire after the line rules of their line.
    """
    findings: list[Finding] = []
    rules = [r for r in catalog.rules if severity_passes(r.severity, severity)]
    check_hits = _run_checks(content, file_path, catalog, severity)

    for line_num, line in enumerate(content.split("\n"), start=1):
        for rule in rules:
            for match in rule.regex.finditer(line):
                raw = match.group(0)
                if not raw:
                    continue
                if catalog.suppress and is_suppressed(raw):
                    continue
                findings.append(_make_finding(rule, match, file_path, line_num))
        findings.extend(check_hits.pop(line_num, ()))

    # Checks may report positions past the last split line
    for line_num in sorted(check_hits):
        findings.extend(check_hits[line_num])
    return findings


def scan_file(
    file_path: str | Path,
    catalog: Catalog,
    severity: str = "all",
) -> list[Finding]:
    """Read and scan one file; unreadable files give an empty list."""
    try:
        content = read_source(file_path)
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(
            "Error reading file: %s (%s)",
            os.path.basename(file_path),
            describe_error(e),
        )
        return []
    return scan_content(content, str(file_path), catalog, severity)


def read_source(file_path: str | Path) -> str:
    """Read a whole file as UTF-8 text, keeping line endings untouched."""
    with open(file_path, encoding="utf-8", newline="") as fh:
        return fh.read()


def describe_error(error: Exception) -> str:
    """Describe an error without echoing file contents."""
    if isinstance(error, UnicodeDecodeError):
        return "not valid UTF-8 text"
    if isinstance(error, OSError) and error.strerror:
        return error.strerror
    return type(error).__name__


def _make_finding(
    rule: Rule,
    match: re.Match[str],
    file_path: str,
    line_num: int,
) -> Finding:
    raw = match.group(0)
    secret = raw
    if SECRET_GROUP in rule.regex.groupindex and match.group(SECRET_GROUP):
        secret = match.group(SECRET_GROUP)
    return Finding(
        file_path=file_path,
        line_number=line_num,
        column=match.start() + 1,
        match=raw[:MATCH_DISPLAY_LIMIT],
        pattern=rule.name,
        severity=rule.severity,
        message=rule.message,
        fix_suggestion=rule.fix_suggestion,
        category=rule.category,
        raw_match=raw,
        secret=secret,
    )


def _run_checks(
    content: str,
    file_path: str,
    catalog: Catalog,
    severity: str,
) -> dict[int, list[Finding]]:
    hits: dict[int, list[Finding]] = defaultdict(list)
    for check in catalog.checks:
        if not severity_passes(check.severity, severity):
            continue
        for line_num, column, text in check.locate(content):
            hits[line_num].append(
                Finding(
                    file_path=file_path,
                    line_number=line_num,
                    column=column,
                    match=text[:MATCH_DISPLAY_LIMIT],
                    pattern=check.name,
                    severity=check.severity,
                    message=check.description,
                    fix_suggestion=check.fix_suggestion,
                    category=check.category,
                    raw_match=text,
                )
            )
    return hits
