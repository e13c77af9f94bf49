"""Tests for .env, .env.example and .gitignore handling."""

from __future__ import annotations

from pathlib import Path

from vibecurb.fixer.dotenv import (
    GITIGNORE_ENTRIES,
    append_env_file,
    ensure_gitignore,
    format_env_value,
    write_env_example,
)
from vibecurb.fixer.naming import EnvEntry


def _entries(*pairs: tuple[str, str]) -> list[EnvEntry]:
    return [EnvEntry(name=n, value=v, pattern="test") for n, v in pairs]


class TestEnvFile:
    def test_creates_env(self, tmp_path: Path):
        append_env_file(tmp_path, _entries(("A", "1"), ("B", "2")))
        assert (tmp_path / ".env").read_text() == "A=1\nB=2\n"

    def test_appends_to_existing(self, tmp_path: Path):
        (tmp_path / ".env").write_text("EXISTING=yes")
        append_env_file(tmp_path, _entries(("A", "1")))
        assert (tmp_path / ".env").read_text() == "EXISTING=yes\nA=1\n"

    def test_does_not_dedupe_prior_runs(self, tmp_path: Path):
        append_env_file(tmp_path, _entries(("A", "1")))
        append_env_file(tmp_path, _entries(("A", "2")))
        assert (tmp_path / ".env").read_text() == "A=1\nA=2\n"

    def test_value_quoting(self):
        assert format_env_value("mongodb://u:p@h/db") == "mongodb://u:p@h/db"
        assert format_env_value("two words") == '"two words"'
        assert format_env_value('say "hi"') == '"say \\"hi\\""'
        assert format_env_value("a#b") == '"a#b"'


class TestEnvExample:
    def test_placeholders(self, tmp_path: Path):
        write_env_example(tmp_path, ["DATABASE_URL", "API_KEY"])
        assert (tmp_path / ".env.example").read_text() == (
            "DATABASE_URL=your_database_url_here\nAPI_KEY=your_api_key_here\n"
        )

    def test_overwrites(self, tmp_path: Path):
        (tmp_path / ".env.example").write_text("OLD=your_old_here\n")
        write_env_example(tmp_path, ["NEW"])
        assert (tmp_path / ".env.example").read_text() == "NEW=your_new_here\n"


class TestGitignore:
    def test_creates_gitignore(self, tmp_path: Path):
        path = ensure_gitignore(tmp_path)
        assert path == tmp_path / ".gitignore"
        assert path.read_text().splitlines() == list(GITIGNORE_ENTRIES)

    def test_appends_only_missing(self, tmp_path: Path):
        (tmp_path / ".gitignore").write_text("node_modules\n.env\n")
        ensure_gitignore(tmp_path)
        lines = (tmp_path / ".gitignore").read_text().splitlines()
        assert lines == ["node_modules", ".env", ".env.local", ".env.*.local"]

    def test_idempotent(self, tmp_path: Path):
        assert ensure_gitignore(tmp_path) is not None
        before = (tmp_path / ".gitignore").read_text()
        assert ensure_gitignore(tmp_path) is None
        assert (tmp_path / ".gitignore").read_text() == before

    def test_no_trailing_newline(self, tmp_path: Path):
        (tmp_path / ".gitignore").write_text("dist")
        ensure_gitignore(tmp_path)
        lines = (tmp_path / ".gitignore").read_text().splitlines()
        assert lines == ["dist", *GITIGNORE_ENTRIES]

    def test_verbatim_match_only(self, tmp_path: Path):
        (tmp_path / ".gitignore").write_text("/.env\n")
        ensure_gitignore(tmp_path)
        lines = (tmp_path / ".gitignore").read_text().splitlines()
        assert lines == ["/.env", *GITIGNORE_ENTRIES]
