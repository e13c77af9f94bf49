"""Network security rules — sensitive data in requests, responses, and logs."""

from __future__ import annotations

import re
from collections import Counter

from vibecurb.scanner.models import Category, Finding, Severity
from vibecurb.scanner.patterns import Catalog, ContentCheck, Rule

_I = re.IGNORECASE

NETWORK_RULES: tuple[Rule, ...] = (
    # Console logging
    Rule(
        name="Console Log with User Object",
        regex=re.compile(
            r"console\.(?:log|debug|info|warn|error)\s*\(\s*[^)]*"
            r"(?:user|req\.user|auth\.user)[^)]*\)",
            _I,
        ),
        severity=Severity.ERROR,
        message="Console logging may expose user data",
        fix_suggestion="Use a structured logger with data redaction",
        category=Category.LOGGING,
    ),
    Rule(
        name="Console Log with API Response",
        regex=re.compile(
            r"console\.(?:log|debug|info)\s*\(\s*[^)]*(?:response|res|data)\s*\)", _I
        ),
        severity=Severity.WARNING,
        message="Console logging API responses may expose sensitive data",
        fix_suggestion="Log only necessary fields, never full responses",
        category=Category.LOGGING,
    ),
    Rule(
        name="Console Log with Authorization Header",
        regex=re.compile(
            r"console\.(?:log|debug|info|warn|error)\s*\(\s*[^)]*"
            r"(?:authorization|auth|token|header)[^)]*\)",
            _I,
        ),
        severity=Severity.ERROR,
        message="Never log authorization headers or tokens",
        fix_suggestion="Remove logging of auth headers immediately",
        category=Category.LOGGING,
    ),
    # Outgoing requests
    Rule(
        name="Fetch with Hardcoded Authorization",
        regex=re.compile(
            r"fetch\s*\([^)]*\{[^}]*headers\s*:\s*\{[^}]*"
            r"authorization\s*:\s*[\"'][^\"']+[\"']",
            _I,
        ),
        severity=Severity.ERROR,
        message="Hardcoded authorization header in fetch request",
        fix_suggestion="Use environment variables for tokens",
        category=Category.REQUEST,
    ),
    Rule(
        name="Axios with Hardcoded Authorization",
        regex=re.compile(
            r"axios\.(?:get|post|put|delete|patch)\s*\([^)]*\{[^}]*headers\s*:\s*\{"
            r"[^}]*authorization\s*:\s*[\"'][^\"']+[\"']",
            _I,
        ),
        severity=Severity.ERROR,
        message="Hardcoded authorization header in axios request",
        fix_suggestion="Use environment variables or request interceptors",
        category=Category.REQUEST,
    ),
    Rule(
        name="API Key in Query Parameters",
        regex=re.compile(
            r"(?:fetch|axios|XMLHttpRequest)\s*\([^)]*\?[^)]*"
            r"(?:api[_-]?key|token|auth)=",
            _I,
        ),
        severity=Severity.ERROR,
        message="API key exposed in URL query parameters",
        fix_suggestion="Move API keys to headers or request body",
        category=Category.REQUEST,
    ),
    # Responses
    Rule(
        name="Return Full User Object in Response",
        regex=re.compile(
            r"res\.(?:json|send)\s*\(\s*\{[^}]*user\s*:\s*(?:user|req\.user|doc)", _I
        ),
        severity=Severity.ERROR,
        message="API response may expose full user object with sensitive fields",
        fix_suggestion="Select only necessary fields before sending response",
        category=Category.RESPONSE,
    ),
    Rule(
        name="Return Database Document Directly",
        regex=re.compile(
            r"res\.(?:json|send)\s*\(\s*(?:doc|document|result|data)\s*\)", _I
        ),
        severity=Severity.WARNING,
        message="Returning database documents may expose internal fields",
        fix_suggestion="Map database results to DTOs before returning",
        category=Category.RESPONSE,
    ),
    Rule(
        name="Error Response with Stack Trace",
        regex=re.compile(
            r"res\.(?:status|sendStatus)\s*\([^)]+\)\s*\.\s*(?:json|send)\s*\(\s*\{"
            r"[^}]*(?:error|stack|message).*\}",
            _I,
        ),
        severity=Severity.ERROR,
        message="Error response may expose stack traces or internal errors",
        fix_suggestion=(
            "Return generic error messages to clients, log details server-side"
        ),
        category=Category.ERROR_HANDLING,
    ),
    Rule(
        name="Console Log in Error Handler",
        regex=re.compile(
            r"catch\s*\([^)]*\)\s*\{[^}]*console\.(?:log|error)\s*\(\s*(?:error|err|e)",
            _I,
        ),
        severity=Severity.WARNING,
        message="Error logged to console may expose sensitive context",
        fix_suggestion="Use proper error tracking service (Sentry, etc.)",
        category=Category.ERROR_HANDLING,
    ),
    # HTTP client configuration
    Rule(
        name="Axios Instance with Hardcoded Config",
        regex=re.compile(
            r"axios\.create\s*\(\s*\{[^}]*(?:baseURL|url)\s*:\s*[\"'][^\"']*"
            r"(?:api|internal|admin)[^\"']*[\"']",
            _I,
        ),
        severity=Severity.WARNING,
        message="Hardcoded API URLs in axios configuration",
        fix_suggestion="Use environment variables for API base URLs",
        category=Category.REQUEST,
    ),
    Rule(
        name="Wildcard CORS Origin",
        regex=re.compile(r"(?:cors|Access-Control-Allow-Origin)\s*[:=]\s*[\"']\*", _I),
        severity=Severity.WARNING,
        message="Wildcard CORS allows requests from any origin",
        fix_suggestion="Specify allowed origins explicitly",
        category=Category.REQUEST,
    ),
    # Debug/development leftovers
    Rule(
        name="Debugger Statement",
        regex=re.compile(r"debugger;", _I),
        severity=Severity.ERROR,
        message="Debugger statement should not be in production code",
        fix_suggestion="Remove debugger statements before deployment",
        category=Category.LOGGING,
    ),
    Rule(
        name="TODO/FIXME with Sensitive Context",
        regex=re.compile(
            r"(?:TODO|FIXME|XXX|HACK)\s*:?\s*[^\n]*(?:auth|token|password|secret|key)",
            _I,
        ),
        severity=Severity.WARNING,
        message="Comment may indicate incomplete security implementation",
        fix_suggestion="Review and address security TODOs before deployment",
        category=Category.LOGGING,
    ),
)

_FETCH_THEN = re.compile(r"fetch\s*\([^)]+\)\s*\.then\s*\(", _I)
_CATCH_CALL = re.compile(r"\.catch\s*\(", _I)
_TRY_AROUND_REQUEST = re.compile(
    r"try\s*\{[\s\S]*?(?:fetch|axios|XMLHttpRequest)[\s\S]*?\}\s*catch", _I
)
_RAW_ERROR_RESPONSE = re.compile(r"res\.(?:json|send)\s*\(\s*(?:error|err)\s*\)", _I)


def has_proper_error_handling(content: str) -> bool:
    """Check if code handles failures of its network requests.

    Either a try/catch wrapping a request or any ``.catch(`` counts.
    """
    return bool(_TRY_AROUND_REQUEST.search(content) or _CATCH_CALL.search(content))


def _locate(regex: re.Pattern[str], content: str) -> list[tuple[int, int, str]]:
    hits: list[tuple[int, int, str]] = []
    for line_num, line in enumerate(content.split("\n"), start=1):
        for m in regex.finditer(line):
            hits.append((line_num, m.start() + 1, line))
    return hits


def _locate_unhandled_fetch(content: str) -> list[tuple[int, int, str]]:
    if has_proper_error_handling(content):
        return []
    return _locate(_FETCH_THEN, content)


def _locate_raw_error_response(content: str) -> list[tuple[int, int, str]]:
    return _locate(_RAW_ERROR_RESPONSE, content)


NETWORK_CHECKS: tuple[ContentCheck, ...] = (
    ContentCheck(
        name="Missing Error Handler",
        description="Promise without catch block may expose unhandled errors",
        severity=Severity.WARNING,
        category=Category.ERROR_HANDLING,
        locate=_locate_unhandled_fetch,
    ),
    ContentCheck(
        name="Raw Error in Response",
        description="Raw error objects sent in responses",
        severity=Severity.ERROR,
        category=Category.ERROR_HANDLING,
        locate=_locate_raw_error_response,
    ),
)

NETWORK_CATALOG = Catalog(
    name="network",
    rules=NETWORK_RULES,
    checks=NETWORK_CHECKS,
    suppress=False,
)


def network_summary(findings: list[Finding]) -> dict[str, int]:
    """Count network findings per category, listing every category."""
    counts = Counter(f.category.value for f in findings if f.category is not None)
    return {c.value: counts.get(c.value, 0) for c in Category}
