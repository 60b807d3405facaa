from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class LanguageConfig:
    id: str
    grammar: str  # tree-sitter grammar name
    comment_kinds: tuple[str, ...]
    extensions: tuple[str, ...]
    tool_directives: re.Pattern[str]

    def is_comment(self, kind: str) -> bool:
        return kind in self.comment_kinds


_TS_DIRECTIVES = re.compile(r"eslint|prettier|@ts-|istanbul|c8|vitest|jest|biome|oxlint", re.IGNORECASE)
_C_DIRECTIVES = re.compile(r"NOLINT|NOLINTNEXTLINE|clang-format|IWYU|pragma", re.IGNORECASE)

LANGUAGES: tuple[LanguageConfig, ...] = (
    LanguageConfig(
        id="typescript",
        grammar="typescript",
        comment_kinds=("comment",),
        extensions=(".ts", ".mts", ".cts"),
        tool_directives=_TS_DIRECTIVES,
    ),
    # TSX needs its own grammar; it shares TypeScript's tooling.
    LanguageConfig(
        id="tsx",
        grammar="tsx",
        comment_kinds=("comment",),
        extensions=(".tsx",),
        tool_directives=_TS_DIRECTIVES,
    ),
    LanguageConfig(
        id="javascript",
        grammar="javascript",
        comment_kinds=("comment",),
        extensions=(".js", ".jsx", ".mjs", ".cjs"),
        tool_directives=re.compile(r"eslint|prettier|istanbul|c8|vitest|jest|webpack|biome|oxlint", re.IGNORECASE),
    ),
    LanguageConfig(
        id="python",
        grammar="python",
        comment_kinds=("comment",),
        extensions=(".py", ".pyi"),
        tool_directives=re.compile(r"noqa|type:\s*ignore|pylint|mypy|pyright|ruff|fmt|isort", re.IGNORECASE),
    ),
    LanguageConfig(
        id="go",
        grammar="go",
        comment_kinds=("comment",),
        extensions=(".go",),
        tool_directives=re.compile(r"nolint|go:generate|go:build|go:embed|gofmt|govet", re.IGNORECASE),
    ),
    LanguageConfig(
        id="rust",
        grammar="rust",
        comment_kinds=("line_comment", "block_comment"),
        extensions=(".rs",),
        # Case-sensitive: `SAFETY:` is a convention, `allow`/`deny` are attribute names.
        tool_directives=re.compile(r"clippy|allow|deny|forbid|expect|cfg|rustfmt|SAFETY|safety"),
    ),
    LanguageConfig(
        id="c",
        grammar="c",
        comment_kinds=("comment",),
        extensions=(".c", ".h"),
        tool_directives=_C_DIRECTIVES,
    ),
    LanguageConfig(
        id="cpp",
        grammar="cpp",
        comment_kinds=("comment",),
        extensions=(".cpp", ".cc", ".cxx", ".hpp", ".hh", ".hxx"),
        tool_directives=_C_DIRECTIVES,
    ),
    LanguageConfig(
        id="java",
        grammar="java",
        comment_kinds=("line_comment", "block_comment"),
        extensions=(".java",),
        tool_directives=re.compile(r"checkstyle|SuppressWarnings|PMD|SpotBugs|NOSONAR|noinspection", re.IGNORECASE),
    ),
    LanguageConfig(
        id="ruby",
        grammar="ruby",
        comment_kinds=("comment",),
        extensions=(".rb", ".rake"),
        tool_directives=re.compile(
            r"rubocop|sorbet|sig|steep|yard|:nocov:|frozen_string_literal",
            re.IGNORECASE,
        ),
    ),
)


def _build_indexes(
    languages: Iterable[LanguageConfig],
) -> tuple[dict[str, LanguageConfig], dict[str, LanguageConfig]]:
    by_id: dict[str, LanguageConfig] = {}
    by_ext: dict[str, LanguageConfig] = {}
    grammars: set[str] = set()
    for lang in languages:
        if lang.id in by_id:  # pragma: no cover
            raise RuntimeError(f"Duplicate language id: {lang.id}")
        if lang.grammar in grammars:  # pragma: no cover
            raise RuntimeError(f"Grammar registered twice: {lang.grammar}")
        if not lang.comment_kinds:  # pragma: no cover
            raise RuntimeError(f"Language {lang.id} declares no comment node kinds")
        for ext in lang.extensions:
            if ext != ext.lower() or not ext.startswith("."):  # pragma: no cover
                raise RuntimeError(f"Extension must be lowercase with a leading dot: {ext!r}")
            if ext in by_ext:  # pragma: no cover
                raise RuntimeError(f"Extension {ext} claimed by {by_ext[ext].id} and {lang.id}")
            by_ext[ext] = lang
        by_id[lang.id] = lang
        grammars.add(lang.grammar)
    return by_id, by_ext


_BY_ID, _BY_EXT = _build_indexes(LANGUAGES)


def resolve(extension: str) -> LanguageConfig | None:
    """
    Look up the language for a file extension.

    Accepts `ts`, `.ts` or `.TS`; returns None for unsupported extensions.
    """

    ext = extension.strip().lower()
    if not ext:
        return None
    if not ext.startswith("."):
        ext = "." + ext
    return _BY_EXT.get(ext)


def detect_language(path: Path) -> LanguageConfig | None:
    return resolve(path.suffix)


def get_language(language_id: str) -> LanguageConfig | None:
    return _BY_ID.get(language_id.strip().lower())


def language_ids() -> tuple[str, ...]:
    return tuple(lang.id for lang in LANGUAGES)


def allowed_extensions(enabled_languages: Iterable[str]) -> set[str]:
    enabled = {lang.strip().lower() for lang in enabled_languages}
    exts: set[str] = set()
    for lang in LANGUAGES:
        if lang.id in enabled:
            exts.update(lang.extensions)
    return exts
