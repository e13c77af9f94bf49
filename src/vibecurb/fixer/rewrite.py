"""Source rewriting — swap quoted secret literals for environment lookups.

Only the rules listed in ``REWRITE_PATTERNS`` are rewritten. Every other
rule is detect-only: its findings are still extracted to ``.env`` but the
source keeps the literal, because a generic substitution could break the
surrounding syntax.
"""

from __future__ import annotations

import ast
import logging
import re
from collections.abc import Iterable
from pathlib import Path

from vibecurb.fixer.naming import EnvMapping
from vibecurb.scanner.models import Finding

logger = logging.getLogger(__name__)

_Q = r"(?P<quote>[\"'])"

# Each pattern exposes ``prefix`` (kept), ``quote`` and ``body`` (the literal).
# Table order is rewrite order: a URL literal is claimed before the email
# address embedded in it.
REWRITE_PATTERNS: dict[str, re.Pattern[str]] = {
    "API Key (Generic)": re.compile(
        r"(?P<prefix>(?:api[_-]?key|apikey)\s*[:=]\s*)" + _Q
        + r"(?P<body>[^\"']+)(?P=quote)",
        re.IGNORECASE,
    ),
    "Database URL": re.compile(
        r"(?P<prefix>)" + _Q
        + r"(?P<body>(?:mongodb|mysql|postgres|postgresql|redis)://[^\"']*)(?P=quote)",
        re.IGNORECASE,
    ),
    "JWT Token": re.compile(
        r"(?P<prefix>)" + _Q + r"(?P<body>eyJ[^\"']*)(?P=quote)"
    ),
    "Email Address": re.compile(
        r"(?P<prefix>)" + _Q + r"(?P<body>[^\"'\s]*@[^\"'\s]+)(?P=quote)"
    ),
}

# Code files: the whole literal, quotes included, becomes this expression
CODE_REFERENCES: dict[str, str] = {
    ".js": "process.env.{name}",
    ".jsx": "process.env.{name}",
    ".ts": "process.env.{name}",
    ".tsx": "process.env.{name}",
    ".mjs": "process.env.{name}",
    ".cjs": "process.env.{name}",
    ".py": 'os.environ["{name}"]',
}

# Data and text files keep their quotes and use shell-style interpolation
TEXT_REFERENCE = "${{{name}}}"


def is_rewritable(rule_name: str) -> bool:
    """Whether findings of this rule can be rewritten in place."""
    return rule_name in REWRITE_PATTERNS


def reference_for(name: str, file_path: str | Path) -> tuple[str, bool]:
    """Return the reference text and whether it replaces the quotes too."""
    suffix = Path(file_path).suffix.lower()
    template = CODE_REFERENCES.get(suffix)
    if template is not None:
        return template.format(name=name), True
    return TEXT_REFERENCE.format(name=name), False


def rewrite_content(
    content: str,
    file_path: str | Path,
    findings: Iterable[Finding],
    mapping: EnvMapping,
) -> tuple[str, list[Finding]]:
    """Rewrite the literal each mapped, rewritable finding was reported in.

    A finding owns the quoted literal that encloses its reported position,
    and the literal is swapped for that finding's own variable. Rules run
    in table order; a literal claimed by an earlier rule is not rewritten
    again. Returns the new content and the findings whose literal was
    replaced.
    """
    findings = list(findings)
    line_starts = [0] + [m.end() for m in re.finditer("\n", content)]

    pending: dict[str, list[tuple[int, int, Finding, str]]] = {}
    for finding in findings:
        name = mapping.name_for(finding)
        if not is_rewritable(finding.pattern) or name is None:
            continue
        if not 0 < finding.line_number <= len(line_starts):
            continue
        start = line_starts[finding.line_number - 1] + finding.column - 1
        pending.setdefault(finding.pattern, []).append(
            (start, start + len(finding.key), finding, name)
        )

    edits: list[tuple[int, int, str]] = []
    resolved: set[int] = set()
    for rule_name, pattern in REWRITE_PATTERNS.items():
        candidates = pending.get(rule_name)
        if not candidates:
            continue
        for m in pattern.finditer(content):
            if any(m.start() < end and start < m.end() for start, end, _ in edits):
                continue
            owner = _literal_owner(m, candidates, rule_name)
            if owner is None:
                continue
            finding, name = owner
            edits.append((m.start(), m.end(), _replacement(m, name, file_path)))
            resolved.add(id(finding))

    for start, end, text in sorted(edits, reverse=True):
        content = content[:start] + text + content[end:]
    if edits and Path(file_path).suffix.lower() == ".py":
        content = ensure_os_import(content)
    return content, [f for f in findings if id(f) in resolved]


def ensure_os_import(content: str) -> str:
    """Add ``import os`` to Python source whose top level does not bind it.

    The import goes after the module docstring and any ``__future__``
    imports. Source that does not parse is returned unchanged.
    """
    try:
        tree = ast.parse(content)
    except SyntaxError:
        logger.debug("Not adding 'import os': source does not parse")
        return content

    if any(_binds_os(node) for node in tree.body):
        return content

    after = 0
    for index, node in enumerate(tree.body):
        if (index == 0 and _is_docstring(node)) or (
            isinstance(node, ast.ImportFrom) and node.module == "__future__"
        ):
            after = node.end_lineno or after
        else:
            break

    newline = "\r\n" if "\r\n" in content else "\n"
    lines = content.splitlines(keepends=True)
    if after == 0:
        # Keep shebang and encoding comments first
        while after < len(lines) and lines[after].startswith("#"):
            after += 1
    if after and not lines[after - 1].endswith("\n"):
        lines[after - 1] += newline
    lines.insert(after, "import os" + newline)
    return "".join(lines)


def _literal_owner(
    m: re.Match[str],
    candidates: list[tuple[int, int, Finding, str]],
    rule_name: str,
) -> tuple[Finding, str] | None:
    body = m.group("body")
    for start, end, finding, name in candidates:
        if m.start() <= start and end <= m.end() and _body_holds(
            body, finding.value, rule_name
        ):
            return finding, name
    return None


def _body_holds(body: str, secret: str, rule_name: str) -> bool:
    if body == secret:
        return True
    # mailto: and similar scheme prefixes
    return rule_name == "Email Address" and body.endswith(":" + secret)


def _replacement(m: re.Match[str], name: str, file_path: str | Path) -> str:
    reference, replaces_quotes = reference_for(name, file_path)
    if replaces_quotes:
        return m.group("prefix") + reference
    quote = m.group("quote")
    return m.group("prefix") + quote + reference + quote


def _binds_os(node: ast.stmt) -> bool:
    if not isinstance(node, ast.Import):
        return False
    return any(
        (alias.asname is None and alias.name.split(".")[0] == "os")
        or alias.asname == "os"
        for alias in node.names
    )


def _is_docstring(node: ast.stmt) -> bool:
    return (
        isinstance(node, ast.Expr)
        and isinstance(node.value, ast.Constant)
        and isinstance(node.value.value, str)
    )
