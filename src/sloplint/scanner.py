from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from pathlib import Path

from sloplint.config import ScanSettings
from sloplint.engine.detection import scan
from sloplint.engine.types import Diagnostic, FileScanResult, ScanSummary
from sloplint.errors import ParseError, UnsupportedLanguage
from sloplint.languages.registry import allowed_extensions, detect_language
from sloplint.utils import display_path

logger = logging.getLogger(__name__)


def discover_files(paths: Iterable[Path], settings: ScanSettings) -> list[Path]:
    """
    Expand command-line paths into files, in discovery order.

    Explicit files are kept whatever their extension (an unsupported one is
    reported as skipped later). Directories are walked in sorted order,
    skipping hidden entries and `settings.skip_dirs`, keeping only files of
    enabled languages. Missing paths are logged and ignored.
    """

    allowed_exts = allowed_extensions(settings.languages)
    seen: set[Path] = set()
    files: list[Path] = []

    def add(path: Path) -> None:
        key = path.resolve()
        if key not in seen:
            seen.add(key)
            files.append(path)

    for raw in paths:
        path = Path(raw)
        if path.is_file():
            add(path)
            continue
        if not path.is_dir():
            logger.warning("%s: No such file or directory", path)
            continue

        for dirpath, dirnames, filenames in os.walk(path, topdown=True):
            dirnames[:] = sorted(d for d in dirnames if d not in settings.skip_dirs and not d.startswith("."))
            base = Path(dirpath)
            for filename in sorted(filenames):
                if filename.startswith("."):
                    continue
                candidate = base / filename
                if candidate.suffix.lower() in allowed_exts:
                    add(candidate)

    return files


def scan_file(path: Path, *, settings: ScanSettings, root: Path) -> FileScanResult:
    """
    Scan one file, converting per-file failures into a result.

    Never raises for unreadable, unsupported or unparsable input, so one bad
    file cannot stop the rest of the run.
    """

    file_id = display_path(path, root)
    language = detect_language(path)
    if language is None:
        # Directory walks filter by extension, so only explicitly named files get here.
        logger.warning("%s; skipping", UnsupportedLanguage(file_id))
        return FileScanResult(file=file_id, language=None, skipped=True)
    if language.id not in settings.languages:
        logger.info("%s: language %r is not enabled; skipping", file_id, language.id)
        return FileScanResult(file=file_id, language=None, skipped=True)

    try:
        raw = path.read_bytes()
    except OSError as exc:
        logger.warning("%s: cannot read file: %s", file_id, exc.strerror or exc)
        return FileScanResult(file=file_id, language=language.id, error=f"cannot read file: {exc.strerror or exc}")

    source = raw.decode("utf-8", errors="replace")
    try:
        diagnostics = scan(source, language, file_id)
    except ParseError as exc:
        logger.warning("%s", exc)
        return FileScanResult(file=file_id, language=language.id, error=exc.reason)

    logger.debug("%s: %d diagnostic(s)", file_id, len(diagnostics))
    return FileScanResult(file=file_id, language=language.id, diagnostics=tuple(diagnostics))


def scan_files(
    paths: Sequence[Path],
    *,
    settings: ScanSettings,
    root: Path,
    on_file_done: Callable[[FileScanResult], None] | None = None,
) -> list[FileScanResult]:
    """
    Scan files, optionally in parallel.

    Ordering is deterministic: results follow the input `paths` order
    regardless of the worker count.
    """

    scan_one = partial(scan_file, settings=settings, root=root)
    results: list[FileScanResult] = []
    if settings.workers <= 1 or len(paths) <= 1:
        for path in paths:
            result = scan_one(path)
            if on_file_done is not None:
                on_file_done(result)
            results.append(result)
        return results

    max_workers = min(max(1, settings.workers), len(paths))
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        for result in executor.map(scan_one, paths):
            if on_file_done is not None:
                on_file_done(result)
            results.append(result)
    return results


def summarize(results: Iterable[FileScanResult]) -> ScanSummary:
    diagnostics: list[Diagnostic] = []
    errors: list[FileScanResult] = []
    scanned = 0
    for result in results:
        if result.skipped:
            continue
        if result.error is not None:
            errors.append(result)
            continue
        scanned += 1
        diagnostics.extend(result.diagnostics)
    return ScanSummary(files_scanned=scanned, diagnostics=tuple(diagnostics), errors=tuple(errors))


def run_scan(
    paths: Iterable[Path],
    settings: ScanSettings,
    *,
    root: Path | None = None,
    on_files_discovered: Callable[[int], None] | None = None,
    on_file_done: Callable[[FileScanResult], None] | None = None,
) -> ScanSummary:
    root = root if root is not None else Path.cwd()
    files = discover_files(paths, settings)
    logger.debug("discovered %d candidate file(s)", len(files))
    if on_files_discovered is not None:
        on_files_discovered(len(files))
    results = scan_files(files, settings=settings, root=root, on_file_done=on_file_done)
    return summarize(results)
