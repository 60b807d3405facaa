from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from sloplint.engine.context import FileContext, SyntaxNode
from sloplint.engine.types import RuleCategory, RuleMatch


@dataclass(frozen=True, slots=True)
class RuleMeta:
    rule_id: str
    title: str
    message: str
    category: RuleCategory
    note: str | None = None
    languages: frozenset[str] | None = None  # None: every language

    def applies_to(self, language_id: str) -> bool:
        return self.languages is None or language_id in self.languages


class BaseRule(ABC):
    """
    A stateless check over one syntax node.

    `check` must depend only on the node and the file context: rules are
    shared by every scan, including concurrent ones.
    """

    meta: RuleMeta

    @abstractmethod
    def check(self, node: SyntaxNode, ctx: FileContext) -> RuleMatch | None: ...

    def _match(self, *, message: str | None = None, note: str | None = None) -> RuleMatch:
        return RuleMatch(
            rule_id=self.meta.rule_id,
            message=message or self.meta.message,
            note=note if note is not None else self.meta.note,
        )
