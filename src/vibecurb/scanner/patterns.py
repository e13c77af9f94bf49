"""Secret detection rules — generic keys, cloud credentials, tokens, passwords.

Rules are plain records evaluated in table order. Every rule fires on every
non-overlapping occurrence; order only decides how findings on the same line
are listed. A rule may capture the bare secret in a named group ``secret``;
otherwise the whole match is treated as the secret value.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from vibecurb.scanner.models import Category, Severity

SECRET_GROUP = "secret"

# Test fixtures mark fake values with these tokens
FAKE_MARKERS: tuple[str, ...] = ("FAKE_", "YOUR_")

# Documentation/example placeholders (case-sensitive substring check)
PLACEHOLDER_MARKERS: tuple[str, ...] = ("example", "placeholder", "xxx", "XXXX")


@dataclass(frozen=True)
class Rule:
    """A named single-line matcher plus severity and remediation metadata."""

    name: str
    regex: re.Pattern[str]
    severity: Severity
    message: str
    fix_suggestion: str
    category: Category | None = None


@dataclass(frozen=True)
class ContentCheck:
    """A whole-file predicate that cannot be expressed as one line match.

    ``locate`` returns ``(line_number, column, text)`` for every place the
    check fires; an empty list means the file passes.
    """

    name: str
    description: str
    severity: Severity
    category: Category
    locate: Callable[[str], list[tuple[int, int, str]]]
    fix_suggestion: str = "Review this code for security issues"


@dataclass(frozen=True)
class Catalog:
    """An ordered rule set, its content checks, and its suppression policy."""

    name: str
    rules: tuple[Rule, ...]
    checks: tuple[ContentCheck, ...] = ()
    suppress: bool = True

    @property
    def rule_names(self) -> tuple[str, ...]:
        return tuple(r.name for r in self.rules)

    def get(self, name: str) -> Rule | None:
        for rule in self.rules:
            if rule.name == name:
                return rule
        return None


SECRET_RULES: tuple[Rule, ...] = (
    Rule(
        name="Email Address",
        regex=re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"),
        severity=Severity.WARNING,
        message="Email address found in code",
        fix_suggestion="Move to environment variable: process.env.CONTACT_EMAIL",
    ),
    Rule(
        name="API Key (Generic)",
        regex=re.compile(
            r"(?:api[_-]?key|apikey)\s*[:=]\s*[\"']"
            r"(?P<secret>[a-zA-Z0-9_\-]{16,})[\"']",
            re.IGNORECASE,
        ),
        severity=Severity.ERROR,
        message="API key detected",
        fix_suggestion="Use environment variable: process.env.API_KEY",
    ),
    Rule(
        name="AWS Access Key ID",
        regex=re.compile(r"AKIA[0-9A-Z]{16}"),
        severity=Severity.ERROR,
        message="AWS Access Key ID found",
        fix_suggestion="Use AWS credentials file or environment variables",
    ),
    Rule(
        name="AWS Secret Key",
        regex=re.compile(
            r"[\"']?aws[_-]?secret[_-]?key[\"']?\s*[:=]\s*[\"']"
            r"(?P<secret>[a-zA-Z0-9/+=]{40})[\"']",
            re.IGNORECASE,
        ),
        severity=Severity.ERROR,
        message="AWS Secret Access Key found",
        fix_suggestion="Use AWS credentials file or environment variables",
    ),
    Rule(
        name="GitHub Token",
        regex=re.compile(r"gh[pousr]_[A-Za-z0-9_]{36,}"),
        severity=Severity.ERROR,
        message="GitHub token detected",
        fix_suggestion="Use environment variable: process.env.GITHUB_TOKEN",
    ),
    Rule(
        name="Stripe Key",
        regex=re.compile(r"sk_live_[0-9a-zA-Z]{24,}"),
        severity=Severity.ERROR,
        message="Stripe live secret key found",
        fix_suggestion="Use environment variable: process.env.STRIPE_SECRET_KEY",
    ),
    Rule(
        name="Stripe Test Key",
        regex=re.compile(r"sk_test_[0-9a-zA-Z]{24,}"),
        severity=Severity.WARNING,
        message="Stripe test key found",
        fix_suggestion=(
            "Even test keys should be in environment variables: "
            "process.env.STRIPE_TEST_KEY"
        ),
    ),
    Rule(
        name="Private Key",
        regex=re.compile(r"-----BEGIN (?:RSA |DSA |EC |OPENSSH )?PRIVATE KEY-----"),
        severity=Severity.ERROR,
        message="Private key detected",
        fix_suggestion="Store in secure key management system, never in code",
    ),
    Rule(
        name="Database URL",
        regex=re.compile(
            r"(?:mongodb|mysql|postgres|postgresql|redis)://[^\s\"']+",
            re.IGNORECASE,
        ),
        severity=Severity.ERROR,
        message="Database connection string found",
        fix_suggestion="Use environment variable: process.env.DATABASE_URL",
    ),
    Rule(
        name="Bearer Token",
        regex=re.compile(r"[Bb]earer\s+(?P<secret>[a-zA-Z0-9_\-.=]+)"),
        severity=Severity.ERROR,
        message="Bearer token detected",
        fix_suggestion="Use environment variable or secure token storage",
    ),
    Rule(
        name="Password in Code",
        regex=re.compile(
            r"(?:password|passwd|pwd)\s*[:=]\s*[\"'](?P<secret>[^\"']{4,})[\"']",
            re.IGNORECASE,
        ),
        severity=Severity.ERROR,
        message="Hardcoded password found",
        fix_suggestion="Use environment variable or secure credential storage",
    ),
    Rule(
        name="Slack Token",
        regex=re.compile(r"xox[baprs]-[0-9a-zA-Z]{10,48}"),
        severity=Severity.ERROR,
        message="Slack token detected",
        fix_suggestion="Use environment variable: process.env.SLACK_TOKEN",
    ),
    Rule(
        name="JWT Token",
        regex=re.compile(r"eyJ[a-zA-Z0-9_-]*\.eyJ[a-zA-Z0-9_-]*\.[a-zA-Z0-9_-]*"),
        severity=Severity.ERROR,
        message="JWT token detected",
        fix_suggestion="Use environment variable or secure token storage",
    ),
    Rule(
        name="Google API Key",
        regex=re.compile(r"AIza[0-9A-Za-z_-]{35}"),
        severity=Severity.ERROR,
        message="Google API key found",
        fix_suggestion="Use environment variable: process.env.GOOGLE_API_KEY",
    ),
)

SECRET_CATALOG = Catalog(name="secrets", rules=SECRET_RULES, suppress=True)


def is_fake(text: str) -> bool:
    """Check for the markers test fixtures use to tag fake values."""
    return any(marker in text for marker in FAKE_MARKERS)


def is_placeholder(text: str) -> bool:
    """Check for example/documentation placeholder text."""
    return any(marker in text for marker in PLACEHOLDER_MARKERS)


def is_suppressed(text: str) -> bool:
    """Check if matched text is a known false positive.

    Either check alone is enough to drop a match.
    """
    return is_fake(text) or is_placeholder(text)


def extend_catalog(catalog: Catalog, rules: list[Rule] | tuple[Rule, ...]) -> Catalog:
    """Return a new catalog with ``rules`` appended after the existing ones."""
    existing = set(catalog.rule_names)
    for rule in rules:
        if rule.name in existing:
            raise ValueError(f"Duplicate rule name: {rule.name}")
        existing.add(rule.name)
    return Catalog(
        name=catalog.name,
        rules=catalog.rules + tuple(rules),
        checks=catalog.checks,
        suppress=catalog.suppress,
    )
