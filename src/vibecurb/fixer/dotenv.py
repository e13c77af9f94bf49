"""Side artifacts of a fix run: .env, .env.example and .gitignore."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from pathlib import Path

from vibecurb.fixer.naming import EnvEntry

logger = logging.getLogger(__name__)

ENV_FILENAME = ".env"
ENV_EXAMPLE_FILENAME = ".env.example"
GITIGNORE_FILENAME = ".gitignore"
GITIGNORE_ENTRIES: tuple[str, ...] = (".env", ".env.local", ".env.*.local")

_NEEDS_QUOTES = re.compile(r"[\s#\"'\\]")


def format_env_value(value: str) -> str:
    """Quote a value only when a dotenv parser would otherwise misread it."""
    if not _NEEDS_QUOTES.search(value):
        return value
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )
    return f'"{escaped}"'


def append_env_file(project_dir: Path, entries: Sequence[EnvEntry]) -> Path:
    """Append ``NAME=value`` lines to .env, creating it if needed.

    Existing names are not checked; a second run over the same tree can
    leave duplicate or conflicting entries.
    """
    env_path = project_dir / ENV_FILENAME
    body = "".join(f"{e.name}={format_env_value(e.value)}\n" for e in entries)

    if env_path.exists():
        existing = _read(env_path)
        if existing and not existing.endswith("\n"):
            existing += "\n"
        _write(env_path, existing + body)
    else:
        _write(env_path, body)
    logger.debug("Wrote %d variable(s) to %s", len(entries), env_path)
    return env_path


def write_env_example(project_dir: Path, names: Sequence[str]) -> Path:
    """Overwrite .env.example with placeholder values for ``names``."""
    example_path = project_dir / ENV_EXAMPLE_FILENAME
    body = "".join(f"{n}=your_{n.lower()}_here\n" for n in names)
    _write(example_path, body)
    return example_path


def ensure_gitignore(project_dir: Path) -> Path | None:
    """Make sure .gitignore excludes local env files.

    Returns the path when the file was created or changed, else None.
    """
    gitignore_path = project_dir / GITIGNORE_FILENAME

    if not gitignore_path.exists():
        _write(gitignore_path, "\n".join(GITIGNORE_ENTRIES) + "\n")
        return gitignore_path

    content = _read(gitignore_path)
    present = {line.rstrip("\r") for line in content.split("\n")}
    missing = [entry for entry in GITIGNORE_ENTRIES if entry not in present]
    if not missing:
        return None

    if content and not content.endswith("\n"):
        content += "\n"
    _write(gitignore_path, content + "\n".join(missing) + "\n")
    return gitignore_path


def _read(path: Path) -> str:
    with open(path, encoding="utf-8", newline="") as fh:
        return fh.read()


def _write(path: Path, content: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as fh:
        fh.write(content)
