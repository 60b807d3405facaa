from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from functools import lru_cache
from typing import Protocol, cast

from tree_sitter import Parser as _TreeSitterParser
from tree_sitter_language_pack import get_language as _tree_sitter_get_language

from sloplint.engine.context import SyntaxTree
from sloplint.languages.registry import LANGUAGES, LanguageConfig

logger = logging.getLogger(__name__)


class _ParserLike(Protocol):
    def parse(self, source: bytes) -> object: ...


# Module attributes so tests can substitute a fake parser or grammar loader.
Parser: Callable[[object], _ParserLike] = cast(Callable[[object], _ParserLike], _TreeSitterParser)
get_language: Callable[[str], object] = cast(Callable[[str], object], _tree_sitter_get_language)


class TreeSitterError(RuntimeError):
    """Raised when tree-sitter cannot load a grammar or parse source."""


@lru_cache(maxsize=32)
def _get_language(grammar: str) -> object:
    try:
        return get_language(grammar)
    except Exception as exc:  # noqa: BLE001
        # Loaders raise their own types (lookup misses, download failures, ABI mismatches).
        raise TreeSitterError(f"tree-sitter grammar not available: {grammar!r}") from exc


_PARSER_LOCAL = threading.local()


def _get_parser(grammar: str) -> _ParserLike:
    # One Parser per (thread, grammar): tree-sitter parsers must not be shared across threads.
    parsers: dict[str, _ParserLike] = _PARSER_LOCAL.__dict__.setdefault("parsers", {})
    parser = parsers.get(grammar)
    if parser is None:
        parser = parsers[grammar] = Parser(_get_language(grammar))
    return parser


def parse(grammar: str, source: bytes) -> SyntaxTree:
    """
    Parse source bytes with the named grammar.

    tree-sitter recovers from syntax errors by inserting ERROR nodes, so a
    malformed file still yields a tree; only a missing grammar or a parser
    failure raises `TreeSitterError`.
    """

    try:
        parser = _get_parser(grammar)
        tree = parser.parse(source)
    except TreeSitterError:
        raise
    except (ValueError, TypeError, RuntimeError) as exc:
        raise TreeSitterError(f"tree-sitter failed to parse {grammar!r} source: {exc}") from exc
    if tree is None:
        raise TreeSitterError(f"tree-sitter returned no tree for {grammar!r} source")
    root = getattr(tree, "root_node", None)
    if root is not None and getattr(root, "has_error", False):
        logger.debug("%s source contains syntax errors; scanning the recovered tree", grammar)
    return cast(SyntaxTree, tree)


_INIT_LOCK = threading.Lock()
_INITIALIZED: tuple[str, ...] | None = None


def initialize(languages: Iterable[LanguageConfig] = LANGUAGES) -> tuple[str, ...]:
    """
    Load every grammar once for the lifetime of the process.

    Idempotent and thread-safe. Returns the ids of languages whose grammar is
    available; missing grammars are logged, and files in those languages fail
    later with a parse error.
    """

    global _INITIALIZED  # noqa: PLW0603

    with _INIT_LOCK:
        if _INITIALIZED is not None:
            return _INITIALIZED
        loaded: list[str] = []
        for lang in languages:
            try:
                _get_language(lang.grammar)
            except TreeSitterError as exc:
                logger.warning("%s", exc)
                continue
            loaded.append(lang.id)
        _INITIALIZED = tuple(loaded)
        logger.debug("loaded %d tree-sitter grammar(s): %s", len(loaded), ", ".join(loaded))
        return _INITIALIZED


def reset() -> None:
    """Forget loaded grammars and per-thread parsers (tests only)."""

    global _INITIALIZED  # noqa: PLW0603

    with _INIT_LOCK:
        _INITIALIZED = None
        _get_language.cache_clear()
        if hasattr(_PARSER_LOCAL, "parsers"):
            _PARSER_LOCAL.parsers.clear()
