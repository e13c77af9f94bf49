"""Scanner data models — findings, scan results, and scan requests."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

# Stored/display copy of a match is cut to this many characters
MATCH_DISPLAY_LIMIT = 100

DEFAULT_EXTENSIONS: tuple[str, ...] = (
    ".js",
    ".ts",
    ".jsx",
    ".tsx",
    ".mjs",
    ".cjs",
    ".py",
    ".json",
    ".yaml",
    ".yml",
    ".md",
    ".txt",
)

DEFAULT_EXCLUDE: tuple[str, ...] = (
    "node_modules",
    "dist",
    "build",
    ".git",
    "coverage",
    ".env",
    ".env.local",
    ".next",
    "__pycache__",
    ".venv",
    "venv",
)

SEVERITY_FILTERS = ("error", "warning", "all")


class Severity(enum.Enum):
    """Finding severity level."""

    ERROR = "error"
    WARNING = "warning"


class Category(enum.Enum):
    """Where in the request/response lifecycle a network finding sits."""

    REQUEST = "request"
    RESPONSE = "response"
    LOGGING = "logging"
    ERROR_HANDLING = "error-handling"


def severity_passes(severity: Severity, severity_filter: str) -> bool:
    """Check a rule severity against a filter of "error", "warning" or "all"."""
    if severity_filter == "all":
        return True
    return severity.value == severity_filter


@dataclass(frozen=True)
class Finding:
    """A single rule match at a file/line/column.

    ``match`` is the truncated copy used for display and storage.
    ``raw_match`` keeps the full text and is the identity key when
    remediation maps secrets to environment variables; ``secret`` is the
    bare value that ends up in ``.env``.
    """

    file_path: str
    line_number: int
    column: int
    match: str
    pattern: str
    severity: Severity
    message: str
    fix_suggestion: str
    category: Category | None = None
    raw_match: str = field(default="", repr=False, compare=False)
    secret: str = field(default="", repr=False, compare=False)

    @property
    def key(self) -> str:
        """Untruncated match text, falling back to the display copy."""
        return self.raw_match or self.match

    @property
    def value(self) -> str:
        """Secret value to extract into the environment."""
        return self.secret or self.key

    def to_dict(self, redact: bool = True) -> dict:
        data = {
            "filePath": self.file_path,
            "lineNumber": self.line_number,
            "column": self.column,
            "match": "[REDACTED]" if redact else self.match,
            "pattern": self.pattern,
            "severity": self.severity.value,
            "message": self.message,
            "fixSuggestion": self.fix_suggestion,
        }
        if self.category is not None:
            data["category"] = self.category.value
        return data


@dataclass(frozen=True)
class ScanResult:
    """Findings for one file, or an error for a path that could not be read."""

    file_path: str
    findings: tuple[Finding, ...] = ()
    error: str | None = None

    def to_dict(self, redact: bool = True) -> dict:
        data: dict = {
            "filePath": self.file_path,
            "findings": [f.to_dict(redact=redact) for f in self.findings],
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class ScanRequest:
    """What to scan and how to filter it."""

    path: str
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    exclude: tuple[str, ...] = DEFAULT_EXCLUDE
    severity: str = "all"

    def __post_init__(self) -> None:
        if self.severity not in SEVERITY_FILTERS:
            raise ValueError(
                f"Invalid severity filter {self.severity!r}; "
                f"expected one of {', '.join(SEVERITY_FILTERS)}"
            )
        self.extensions = tuple(_normalize_extension(e) for e in self.extensions)
        self.exclude = tuple(self.exclude)


def _normalize_extension(ext: str) -> str:
    ext = ext.strip().lower()
    if ext and not ext.startswith("."):
        ext = "." + ext
    return ext


def flatten(results: list[ScanResult]) -> list[Finding]:
    """All findings across results, in result order."""
    return [f for r in results for f in r.findings]
