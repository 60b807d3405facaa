from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from sloplint.languages.registry import language_ids


class ConfigError(ValueError):
    """Raised when run settings (CLI options or environment variables) are invalid."""


SLOPLINT_WORKERS_ENV = "SLOPLINT_WORKERS"
NO_COLOR_ENV = "NO_COLOR"
DEFAULT_MAX_WORKERS = 32
OUTPUT_FORMATS: tuple[str, ...] = ("terminal", "json")

DEFAULT_SKIP_DIRS: frozenset[str] = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        ".idea",
        ".vscode",
        ".venv",
        "venv",
        "node_modules",
        "dist",
        "build",
        "out",
        ".next",
        "vendor",
        "target",
        "__pycache__",
    }
)


@dataclass(frozen=True, slots=True)
class ScanSettings:
    """
    Settings for one invocation.

    There is no configuration file: everything comes from command-line
    options, with environment variables as fallbacks.
    """

    languages: tuple[str, ...] = language_ids()
    workers: int = 1
    output_format: str = "terminal"
    color: bool = True
    skip_dirs: frozenset[str] = DEFAULT_SKIP_DIRS


def resolve_worker_count(
    raw_value: str | None,
    *,
    default: int | None = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> int:
    """
    Resolve a safe worker count from an env var-style string.

    - None/""/"auto" fall back to the default
    - Values <= 0 fall back to the default
    - Values above `max_workers` are clamped
    """

    cpu = os.cpu_count() or 1
    resolved_default = max(1, default if default is not None else (cpu * 2))
    if raw_value is None:
        return min(resolved_default, max_workers)

    normalized = raw_value.strip().lower()
    if not normalized or normalized in {"auto", "default"}:
        return min(resolved_default, max_workers)

    try:
        workers = int(normalized)
    except ValueError:
        return min(resolved_default, max_workers)

    if workers <= 0:
        return min(resolved_default, max_workers)
    return min(workers, max_workers)


def normalize_languages(values: Iterable[str] | None) -> tuple[str, ...]:
    known = language_ids()
    if not values:
        return known
    selected: list[str] = []
    for raw in values:
        for part in raw.split(","):
            name = part.strip().lower()
            if not name:
                continue
            if name not in known:
                raise ConfigError(f"Unknown language {name!r}. Use one of: {', '.join(known)}.")
            if name not in selected:
                selected.append(name)
    return tuple(selected) or known


def settings_from_options(
    *,
    languages: Iterable[str] | None = None,
    workers: int | None = None,
    output_format: str = "terminal",
    color: bool | None = None,
    environ: Mapping[str, str] | None = None,
) -> ScanSettings:
    env = os.environ if environ is None else environ

    normalized_format = output_format.strip().lower()
    if normalized_format not in OUTPUT_FORMATS:
        raise ConfigError(f"Unsupported format {output_format!r}. Use: {', '.join(OUTPUT_FORMATS)}.")

    if workers is not None:
        if workers <= 0:
            raise ConfigError("--workers must be a positive integer.")
        resolved_workers = min(workers, DEFAULT_MAX_WORKERS)
    else:
        resolved_workers = resolve_worker_count(env.get(SLOPLINT_WORKERS_ENV))

    # https://no-color.org: any non-empty value disables color.
    resolved_color = color if color is not None else not env.get(NO_COLOR_ENV)

    return ScanSettings(
        languages=normalize_languages(languages),
        workers=resolved_workers,
        output_format=normalized_format,
        color=resolved_color,
    )
