from __future__ import annotations

import re
from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from sloplint.languages.registry import LanguageConfig

# Comments carrying one of these markers are intentional and never classified.
KEEPER_MARKERS: tuple[str, ...] = (
    "TODO",
    "FIXME",
    "HACK",
    "NOTE",
    "SAFETY",
    "WARN",
    "BUG",
    "XXX",
    "PERF",
    "IMPORTANT",
    "LICENSE",
    "COPYRIGHT",
)
_KEEPER_RE = re.compile(r"\b(?:" + "|".join(KEEPER_MARKERS) + r")\b")


def has_keeper_marker(text: str) -> bool:
    return _KEEPER_RE.search(text) is not None


def is_tool_directive(text: str, language: LanguageConfig) -> bool:
    return language.tool_directives.search(text) is not None


def should_keep(text: str, language: LanguageConfig) -> bool:
    """
    Return True when a comment is exempt from every comment rule.

    A comment is kept when it contains a reserved marker (case-sensitive,
    whole word) or matches the language's lint/type-checker directive syntax.
    """

    return has_keeper_marker(text) or is_tool_directive(text, language)


@dataclass(frozen=True, slots=True)
class Suppressions:
    """
    Rule ids muted by inline `sloplint:` directives.

    - `sloplint: disable=<ids>` mutes the line it sits on
    - `sloplint: disable-next-line=<ids>` mutes the following line
    - `sloplint: disable-file=<ids>` mutes the whole file

    Ids are comma-separated and case-insensitive; `all` mutes every rule.
    """

    disabled_in_file: frozenset[str]
    disabled_on_line: Mapping[int, frozenset[str]]

    def is_suppressed(self, rule_id: str, *, line: int | None) -> bool:
        muted = self.disabled_in_file
        if line is not None:
            muted = muted | self.disabled_on_line.get(line, frozenset())
        return not muted.isdisjoint({"all", rule_id.lower()})

    def __bool__(self) -> bool:
        return bool(self.disabled_in_file or self.disabled_on_line)


_DIRECTIVE_RE = re.compile(
    r"sloplint:\s*(?P<kind>disable-next-line|disable[-_]?file|disable)\s*=\s*(?P<ids>[a-z0-9_,\-\s]+)",
    re.IGNORECASE,
)


def comment_suppressions(comments: Iterable[tuple[int, str]]) -> Suppressions:
    """
    Collect directives from comment texts only.

    Each entry is the 1-based line a comment starts on and its text; block
    comments spanning several lines keep their per-line numbering.
    """

    return _collect(
        (start + offset, line) for start, text in comments for offset, line in enumerate(text.split("\n"))
    )


def _collect(numbered_lines: Iterable[tuple[int, str]]) -> Suppressions:
    in_file: set[str] = set()
    by_line: defaultdict[int, set[str]] = defaultdict(set)

    for lineno, line in numbered_lines:
        for match in _DIRECTIVE_RE.finditer(line):
            kind = match.group("kind").lower()
            ids = _parse_ids(match.group("ids"))
            if kind == "disable-next-line":
                by_line[lineno + 1] |= ids
            elif kind == "disable":
                by_line[lineno] |= ids
            else:
                in_file |= ids

    return Suppressions(
        disabled_in_file=frozenset(in_file),
        disabled_on_line=MappingProxyType({lineno: frozenset(ids) for lineno, ids in by_line.items() if ids}),
    )


def _parse_ids(value: str) -> set[str]:
    return {token.lower() for token in re.split(r"[,\s]+", value) if token}
