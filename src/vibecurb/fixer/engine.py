"""Remediation engine — move detected secrets into .env and rewrite sources.

A run is not transactional. Files are handled one after another, each
backed up to ``<file>.backup`` right before it is overwritten; if file N
fails, files 1..N-1 stay modified and their backups are the way back.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from vibecurb.fixer.dotenv import append_env_file, ensure_gitignore, write_env_example
from vibecurb.fixer.naming import EnvMapping, EnvNameAllocator, build_env_mapping
from vibecurb.fixer.rewrite import is_rewritable, rewrite_content
from vibecurb.scanner.lines import describe_error, read_source
from vibecurb.scanner.models import Finding, Severity

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".backup"
PREVIEW_VALUE_CHARS = 20


@dataclass(frozen=True)
class FixResult:
    """Outcome of a remediation run."""

    success: bool
    message: str
    env_vars: tuple[str, ...] = ()
    files_modified: tuple[str, ...] = ()
    backups: tuple[str, ...] = ()
    unresolved: tuple[Finding, ...] = ()

    @property
    def backup_created(self) -> str | None:
        return self.backups[-1] if self.backups else None


@dataclass(frozen=True)
class FixPreview:
    """What a run would do, computed without touching the file system."""

    env_vars: tuple[str, ...]
    files_to_modify: tuple[str, ...]


def group_by_file(findings: Iterable[Finding]) -> dict[str, list[Finding]]:
    """Group findings per file, keeping first-seen file order."""
    groups: dict[str, list[Finding]] = {}
    for finding in findings:
        groups.setdefault(finding.file_path, []).append(finding)
    return groups


def create_backup(file_path: str | Path) -> str:
    """Copy a file byte for byte to ``<file>.backup``."""
    backup_path = f"{file_path}{BACKUP_SUFFIX}"
    shutil.copyfile(file_path, backup_path)
    return backup_path


class RemediationEngine:
    """Extracts secrets for one project directory.

    The ``.env``, ``.env.example`` and ``.gitignore`` files are written to
    ``project_dir``. Each call to ``remediate`` or ``preview`` starts from a
    fresh name allocator.
    """

    def __init__(self, project_dir: str | Path) -> None:
        project_dir = Path(project_dir)
        if project_dir.is_file():
            project_dir = project_dir.parent
        self._project_dir = project_dir

    @property
    def project_dir(self) -> Path:
        return self._project_dir

    def preview(self, findings: Iterable[Finding]) -> FixPreview:
        """Assign names without writing anything."""
        findings = list(findings)
        mapping = build_env_mapping(findings, EnvNameAllocator())
        env_vars = tuple(
            f"{e.name}={e.value[:PREVIEW_VALUE_CHARS]}..." for e in mapping.entries
        )
        files = tuple(
            path
            for path, group in group_by_file(findings).items()
            if any(is_rewritable(f.pattern) for f in group)
        )
        return FixPreview(env_vars=env_vars, files_to_modify=files)

    def remediate(self, findings: Iterable[Finding]) -> FixResult:
        """Extract every distinct secret and rewrite the files that hold them."""
        findings = list(findings)
        if not findings:
            return FixResult(success=True, message="No secrets found to fix")

        modified: list[str] = []
        backups: list[str] = []
        try:
            mapping = build_env_mapping(findings, EnvNameAllocator())
            rewritten: list[Finding] = []
            for file_path, group in group_by_file(findings).items():
                done = self._fix_file(file_path, group, mapping, backups)
                if done:
                    modified.append(file_path)
                    rewritten.extend(done)

            append_env_file(self._project_dir, mapping.entries)
            write_env_example(self._project_dir, mapping.names)
            ensure_gitignore(self._project_dir)
        except (OSError, UnicodeError) as e:
            logger.error(
                "Auto-fix aborted after %d file(s): %s",
                len(modified),
                describe_error(e),
            )
            return FixResult(
                success=False,
                message=f"Auto-fix failed: {describe_error(e)}",
                files_modified=tuple(modified),
                backups=tuple(backups),
            )

        resolved = {id(f) for f in rewritten}
        unresolved = tuple(
            f
            for f in findings
            if f.severity == Severity.ERROR and id(f) not in resolved
        )
        return FixResult(
            success=True,
            message=(
                f"Extracted {len(mapping)} secret(s) from {len(findings)} finding(s); "
                f"rewrote {len(modified)} file(s)"
            ),
            env_vars=tuple(mapping.names),
            files_modified=tuple(modified),
            backups=tuple(backups),
            unresolved=unresolved,
        )

    def _fix_file(
        self,
        file_path: str,
        findings: list[Finding],
        mapping: EnvMapping,
        backups: list[str],
    ) -> list[Finding]:
        if not any(is_rewritable(f.pattern) for f in findings):
            return []

        content = read_source(file_path)
        new_content, done = rewrite_content(content, file_path, findings, mapping)
        if new_content == content:
            return []

        backups.append(create_backup(file_path))
        with open(file_path, "w", encoding="utf-8", newline="") as fh:
            fh.write(new_content)
        logger.debug("Rewrote %d finding(s) in %s", len(done), file_path)
        return done


def remediate(project_dir: str | Path, findings: Iterable[Finding]) -> FixResult:
    return RemediationEngine(project_dir).remediate(findings)


def preview_fixes(findings: Iterable[Finding]) -> FixPreview:
    return RemediationEngine(".").preview(findings)
