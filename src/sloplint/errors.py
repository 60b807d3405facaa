from __future__ import annotations

from pathlib import Path


class SloplintError(Exception):
    """Base class for errors raised by sloplint."""


class UnsupportedLanguage(SloplintError):
    """Raised when no language configuration matches a file."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(f"unsupported language for {self.path.as_posix()!r}")


class ParseError(SloplintError):
    """Raised when tree-sitter cannot produce a syntax tree for a file."""

    def __init__(self, file: str, language: str, reason: str) -> None:
        self.file = file
        self.language = language
        self.reason = reason
        super().__init__(f"{file}: cannot parse as {language}: {reason}")


class RuleEvaluationError(SloplintError):
    """A rule raised while inspecting a node. Logged by the engine, never propagated."""

    def __init__(self, rule_id: str, node_kind: str, file: str) -> None:
        self.rule_id = rule_id
        self.node_kind = node_kind
        self.file = file
        super().__init__(f"rule {rule_id} failed on {node_kind!r} node in {file}")
