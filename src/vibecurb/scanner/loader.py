"""Load custom secret rules from YAML files.

A rules file looks like::

    rules:
      - name: Internal Service Token
        pattern: "svc_[a-z0-9]{32}"
        severity: error
        message: Internal service token found
        fix: Use environment variable: process.env.SERVICE_TOKEN
        ignore_case: false

A single bad entry fails the whole load; nothing is skipped.
"""

from __future__ import annotations

import re
from pathlib import Path

import yaml

from vibecurb.scanner.models import Severity
from vibecurb.scanner.patterns import Rule

_REQUIRED_KEYS = ("name", "pattern", "severity", "message")
_DEFAULT_FIX = "Move this value to an environment variable"


class RuleLoadError(ValueError):
    """Raised when a rules file is malformed."""


def load_rules(path: str | Path) -> list[Rule]:
    """Load custom rules from a YAML file path."""
    text = Path(path).read_text(encoding="utf-8")
    return load_rules_from_string(text, source=str(path))


def load_rules_from_string(text: str, source: str = "<string>") -> list[Rule]:
    """Parse a YAML string into a list of rules."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise RuleLoadError(f"{source}: invalid YAML ({e.__class__.__name__})") from e

    if data is None:
        return []
    if isinstance(data, dict):
        data = data.get("rules", [])
    if not isinstance(data, list):
        raise RuleLoadError(f"{source}: rules must be a list of mappings")

    rules: list[Rule] = []
    seen: set[str] = set()
    for index, entry in enumerate(data, start=1):
        rule = _parse_rule(entry, f"{source}: rule #{index}")
        if rule.name in seen:
            raise RuleLoadError(f"{source}: duplicate rule name {rule.name!r}")
        seen.add(rule.name)
        rules.append(rule)
    return rules


def _parse_rule(entry: object, where: str) -> Rule:
    if not isinstance(entry, dict):
        raise RuleLoadError(f"{where}: must be a mapping")

    missing = [k for k in _REQUIRED_KEYS if not entry.get(k)]
    if missing:
        raise RuleLoadError(f"{where}: missing {', '.join(missing)}")

    try:
        severity = Severity(str(entry["severity"]).lower())
    except ValueError:
        raise RuleLoadError(
            f"{where}: severity must be 'error' or 'warning'"
        ) from None

    flags = re.IGNORECASE if entry.get("ignore_case") else 0
    try:
        regex = re.compile(str(entry["pattern"]), flags)
    except re.error as e:
        raise RuleLoadError(f"{where}: invalid pattern ({e.msg})") from None

    if regex.search(""):
        raise RuleLoadError(f"{where}: pattern matches the empty string")

    return Rule(
        name=str(entry["name"]),
        regex=regex,
        severity=severity,
        message=str(entry["message"]),
        fix_suggestion=str(entry.get("fix", _DEFAULT_FIX)),
    )
