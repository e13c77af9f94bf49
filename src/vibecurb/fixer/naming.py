"""Environment variable naming — one stable name per distinct secret value."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from vibecurb.scanner.models import Finding

# Rule name -> base environment variable name
ENV_NAMES: dict[str, str] = {
    "API Key (Generic)": "API_KEY",
    "AWS Access Key ID": "AWS_ACCESS_KEY_ID",
    "AWS Secret Key": "AWS_SECRET_ACCESS_KEY",
    "GitHub Token": "GITHUB_TOKEN",
    "Stripe Key": "STRIPE_SECRET_KEY",
    "Stripe Test Key": "STRIPE_TEST_KEY",
    "Database URL": "DATABASE_URL",
    "Bearer Token": "API_TOKEN",
    "Slack Token": "SLACK_TOKEN",
    "JWT Token": "JWT_SECRET",
    "Google API Key": "GOOGLE_API_KEY",
    "Password in Code": "PASSWORD",
    "Email Address": "CONTACT_EMAIL",
}

DEFAULT_ENV_NAME = "SECRET"


def base_env_name(rule_name: str) -> str:
    return ENV_NAMES.get(rule_name, DEFAULT_ENV_NAME)


class EnvNameAllocator:
    """Hands out unique names within one remediation run.

    A taken base name gets ``_1``, ``_2``, ... appended. Names are reserved
    the moment they are returned.
    """

    def __init__(self, reserved: Iterable[str] = ()) -> None:
        self._used: set[str] = set(reserved)

    @property
    def used(self) -> frozenset[str]:
        return frozenset(self._used)

    def allocate(self, rule_name: str) -> str:
        base = base_env_name(rule_name)
        name = base
        index = 0
        while name in self._used:
            index += 1
            name = f"{base}_{index}"
        self._used.add(name)
        return name


@dataclass(frozen=True)
class EnvEntry:
    """One distinct secret and the variable it moves to."""

    name: str
    value: str = field(repr=False)
    pattern: str


@dataclass
class EnvMapping:
    """Secret value -> variable name for one run, in discovery order."""

    entries: list[EnvEntry] = field(default_factory=list)
    _by_key: dict[str, EnvEntry] = field(default_factory=dict, repr=False)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, finding: Finding) -> bool:
        return finding.key in self._by_key

    @property
    def names(self) -> list[str]:
        return [e.name for e in self.entries]

    def name_for(self, finding: Finding) -> str | None:
        entry = self._by_key.get(finding.key)
        return entry.name if entry else None

    def add(self, finding: Finding, allocator: EnvNameAllocator) -> EnvEntry:
        """Return the entry for this finding's value, creating it if new."""
        entry = self._by_key.get(finding.key)
        if entry is None:
            entry = EnvEntry(
                name=allocator.allocate(finding.pattern),
                value=finding.value,
                pattern=finding.pattern,
            )
            self._by_key[finding.key] = entry
            self.entries.append(entry)
        return entry


def build_env_mapping(
    findings: Iterable[Finding],
    allocator: EnvNameAllocator | None = None,
) -> EnvMapping:
    """Assign names to findings in order; repeated values share a name."""
    allocator = allocator or EnvNameAllocator()
    mapping = EnvMapping()
    for finding in findings:
        mapping.add(finding, allocator)
    return mapping
