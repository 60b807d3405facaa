from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from sloplint.languages.registry import LanguageConfig


class SyntaxNode(Protocol):
    # Structural subset of `tree_sitter.Node` the rules rely on.
    type: str
    is_named: bool
    start_byte: int
    end_byte: int
    start_point: Any  # (row, column), both 0-based; column in bytes

    @property
    def children(self) -> Sequence[SyntaxNode]: ...

    def child_by_field_name(self, name: str) -> SyntaxNode | None: ...


class SyntaxTree(Protocol):
    root_node: Any


@dataclass(frozen=True, slots=True)
class FileContext:
    file: str
    language: LanguageConfig
    source: bytes
    tree: SyntaxTree

    def node_text(self, node: SyntaxNode) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    def position(self, node: SyntaxNode) -> tuple[int, int]:
        """Return the 1-based (line, column) of a node, counting columns in characters."""

        row, byte_col = node.start_point[0], node.start_point[1]
        line_start = node.start_byte - byte_col
        prefix = self.source[line_start : node.start_byte].decode("utf-8", errors="replace")
        return row + 1, len(prefix) + 1


def iter_nodes(node: SyntaxNode) -> Iterator[SyntaxNode]:
    """Pre-order traversal: top-to-bottom, left-to-right."""

    stack = [node]
    while stack:
        n = stack.pop()
        yield n
        stack.extend(reversed(n.children))


def named_children(node: SyntaxNode) -> list[SyntaxNode]:
    return [child for child in node.children if child.is_named]


def first_child_of_type(node: SyntaxNode, kinds: frozenset[str]) -> SyntaxNode | None:
    for child in node.children:
        if child.type in kinds:
            return child
    return None
