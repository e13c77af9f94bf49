"""Project configuration — defaults, .vibecurb.yml, environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path

import yaml

from vibecurb.scanner.loader import load_rules
from vibecurb.scanner.models import (
    DEFAULT_EXCLUDE,
    DEFAULT_EXTENSIONS,
    SEVERITY_FILTERS,
    ScanRequest,
)
from vibecurb.scanner.patterns import SECRET_CATALOG, Catalog, extend_catalog

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = (".vibecurb.yml", ".vibecurb.yaml")


@dataclass
class VibecurbConfig:
    """Scan settings resolved for one project directory.

    Precedence, lowest first: built-in defaults, the project config file,
    ``VIBECURB_*`` environment variables, then explicit overrides.
    """

    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    exclude: tuple[str, ...] = DEFAULT_EXCLUDE
    severity: str = "all"
    rules_file: Path | None = None
    config_file: Path | None = field(default=None, compare=False)

    @classmethod
    def load(cls, project_dir: str | Path = ".") -> VibecurbConfig:
        """Load config from the project config file and environment."""
        config = cls()

        base = Path(project_dir)
        if base.is_file():
            base = base.parent
        for name in CONFIG_FILENAMES:
            candidate = base / name
            if candidate.is_file():
                config = config._merge_file(candidate)
                break

        env_extensions = os.environ.get("VIBECURB_EXTENSIONS")
        if env_extensions:
            config.extensions = _split_list(env_extensions)

        env_exclude = os.environ.get("VIBECURB_EXCLUDE")
        if env_exclude:
            config.exclude = _split_list(env_exclude)

        env_severity = os.environ.get("VIBECURB_SEVERITY")
        if env_severity:
            config.severity = env_severity.strip().lower()

        env_rules = os.environ.get("VIBECURB_RULES")
        if env_rules:
            config.rules_file = Path(env_rules)

        config.validate()
        return config

    def with_overrides(
        self,
        extensions: tuple[str, ...] | None = None,
        exclude: tuple[str, ...] | None = None,
        severity: str | None = None,
        rules_file: str | Path | None = None,
    ) -> VibecurbConfig:
        """Return a copy with CLI-supplied values applied."""
        config = replace(self)
        if extensions:
            config.extensions = tuple(extensions)
        if exclude:
            config.exclude = tuple(exclude)
        if severity:
            config.severity = severity.lower()
        if rules_file:
            config.rules_file = Path(rules_file)
        config.validate()
        return config

    def validate(self) -> None:
        if self.severity not in SEVERITY_FILTERS:
            raise ValueError(
                f"Invalid severity {self.severity!r}; "
                f"expected one of {', '.join(SEVERITY_FILTERS)}"
            )
        if not self.extensions:
            raise ValueError("At least one file extension is required")

    def to_request(self, path: str | Path) -> ScanRequest:
        return ScanRequest(
            path=str(path),
            extensions=self.extensions,
            exclude=self.exclude,
            severity=self.severity,
        )

    def catalog(self) -> Catalog:
        """The secret catalog, extended with custom rules if configured."""
        if self.rules_file is None:
            return SECRET_CATALOG
        rules = load_rules(self.rules_file)
        logger.debug("Loaded %d custom rule(s) from %s", len(rules), self.rules_file)
        return extend_catalog(SECRET_CATALOG, rules)

    def _merge_file(self, path: Path) -> VibecurbConfig:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path.name} must be a mapping")

        config = replace(self, config_file=path)
        if "extensions" in data:
            config.extensions = _as_tuple(data["extensions"], "extensions")
        if "exclude" in data:
            config.exclude = _as_tuple(data["exclude"], "exclude")
        if "severity" in data:
            config.severity = str(data["severity"]).lower()
        if data.get("rules"):
            rules_path = Path(str(data["rules"]))
            if not rules_path.is_absolute():
                rules_path = path.parent / rules_path
            config.rules_file = rules_path
        logger.debug("Loaded project config from %s", path)
        return config


def _split_list(value: str) -> tuple[str, ...]:
    return tuple(v.strip() for v in value.split(",") if v.strip())


def _as_tuple(value: object, key: str) -> tuple[str, ...]:
    if isinstance(value, str):
        return _split_list(value)
    if isinstance(value, list):
        return tuple(str(v) for v in value)
    raise ValueError(f"'{key}' must be a list or comma-separated string")
