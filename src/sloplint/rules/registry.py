from __future__ import annotations

import re
from collections.abc import Mapping
from functools import lru_cache
from types import MappingProxyType

from sloplint.rules.base import BaseRule, RuleMeta
from sloplint.rules.comments import builtin_comment_rules
from sloplint.rules.error_handling import builtin_error_handling_rules

_RULE_ID_RE = re.compile(r"^[a-z]+(?:-[a-z]+)*$")


@lru_cache(maxsize=1)
def builtin_rules() -> tuple[BaseRule, ...]:
    rules: list[BaseRule] = []
    rules.extend(builtin_comment_rules())
    rules.extend(builtin_error_handling_rules())

    seen: set[str] = set()
    for rule in rules:
        rule_id = rule.meta.rule_id
        if not _RULE_ID_RE.match(rule_id):  # pragma: no cover
            raise RuntimeError(f"Rule id must be lowercase kebab-case: {rule_id!r}")
        if rule_id in seen:  # pragma: no cover
            raise RuntimeError(f"Duplicate rule id: {rule_id}")
        seen.add(rule_id)

    # Evaluation order is declaration order; reports depend on it.
    return tuple(rules)


@lru_cache(maxsize=1)
def comment_rules() -> tuple[BaseRule, ...]:
    return tuple(r for r in builtin_rules() if r.meta.category == "comment")


@lru_cache(maxsize=32)
def structural_rules_for(language_id: str) -> tuple[BaseRule, ...]:
    return tuple(r for r in builtin_rules() if r.meta.category == "structural" and r.meta.applies_to(language_id))


def rule_ids() -> tuple[str, ...]:
    return tuple(r.meta.rule_id for r in builtin_rules())


@lru_cache(maxsize=1)
def rule_meta_by_id() -> Mapping[str, RuleMeta]:
    return MappingProxyType({r.meta.rule_id: r.meta for r in builtin_rules()})


def rule_by_id(rule_id: str) -> BaseRule | None:
    for rule in builtin_rules():
        if rule.meta.rule_id == rule_id:
            return rule
    return None
