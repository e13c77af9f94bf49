"""Scan engine — walks a tree and runs the line scanner over each file."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path

from vibecurb.scanner.lines import describe_error, read_source, scan_content
from vibecurb.scanner.models import ScanRequest, ScanResult
from vibecurb.scanner.patterns import SECRET_CATALOG, Catalog

logger = logging.getLogger(__name__)

DIRECTORY_ERROR = "Permission denied or directory not accessible"
FILE_ERROR = "File not readable"


class ScanEngine:
    """Runs one catalog over every candidate file below a path.

    Files are visited in sorted order, one at a time; each is read fully,
    scanned, and released before the next. Only files with findings (or
    read errors) produce a ScanResult.
    """

    def __init__(self, catalog: Catalog = SECRET_CATALOG) -> None:
        self._catalog = catalog

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    def scan(self, request: ScanRequest) -> list[ScanResult]:
        """Scan a file or directory and return per-file results."""
        root = Path(request.path)
        if not root.exists():
            raise FileNotFoundError(f"Path does not exist: {root}")

        results: list[ScanResult] = []
        if root.is_file():
            candidates: Iterator[Path] = iter([root])
        else:
            candidates = self._walk(root, request, results)

        for file_path in candidates:
            result = self._scan_one(file_path, request.severity)
            if result is not None:
                results.append(result)

        logger.debug(
            "Scanned %s with %s catalog: %d result(s)",
            root,
            self._catalog.name,
            len(results),
        )
        return results

    def _scan_one(self, file_path: Path, severity: str) -> ScanResult | None:
        try:
            content = read_source(file_path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(
                "Error reading file: %s (%s)", file_path.name, describe_error(e)
            )
            return ScanResult(file_path=str(file_path), error=FILE_ERROR)

        findings = scan_content(content, str(file_path), self._catalog, severity)
        if not findings:
            return None
        return ScanResult(file_path=str(file_path), findings=tuple(findings))

    def _walk(
        self,
        directory: Path,
        request: ScanRequest,
        results: list[ScanResult],
    ) -> Iterator[Path]:
        """Walk directory yielding scannable files."""
        exclude = set(request.exclude)
        extensions = set(request.extensions)

        def _on_error(error: OSError) -> None:
            logger.warning(
                "Cannot read directory %s (%s)", error.filename, describe_error(error)
            )
            results.append(
                ScanResult(
                    file_path=str(error.filename or directory),
                    error=DIRECTORY_ERROR,
                )
            )

        for root, dirs, files in os.walk(directory, onerror=_on_error):
            # Prune excluded directories in-place so they are never entered
            dirs[:] = sorted(d for d in dirs if d not in exclude)

            for name in sorted(files):
                path = Path(root) / name
                if path.suffix.lower() not in extensions:
                    continue
                yield path


def scan_path(
    request: ScanRequest,
    catalog: Catalog = SECRET_CATALOG,
) -> list[ScanResult]:
    """Convenience wrapper around ``ScanEngine(catalog).scan(request)``."""
    return ScanEngine(catalog).scan(request)
