from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from sloplint.engine.context import FileContext, SyntaxNode, iter_nodes
from sloplint.engine.tree_sitter import TreeSitterError
from sloplint.engine.tree_sitter import parse as ts_parse
from sloplint.engine.types import Diagnostic, RuleMatch
from sloplint.errors import ParseError, RuleEvaluationError
from sloplint.languages.registry import LanguageConfig
from sloplint.rules.base import BaseRule
from sloplint.rules.error_handling import structural_node_kinds
from sloplint.rules.registry import comment_rules, structural_rules_for
from sloplint.suppressions import comment_suppressions

logger = logging.getLogger(__name__)


def scan(source: str, language: LanguageConfig, file: str) -> list[Diagnostic]:
    """
    Classify one file's comments and error handlers.

    Diagnostics come back grouped by pass (comments first, then error
    handlers), each pass in tree traversal order. The result depends only on
    the three arguments.

    Raises `ParseError` when no syntax tree can be built.
    """

    raw = source.encode("utf-8", errors="replace")
    try:
        tree = ts_parse(language.grammar, raw)
    except TreeSitterError as exc:
        raise ParseError(file, language.id, str(exc)) from exc

    ctx = FileContext(file=file, language=language, source=raw, tree=tree)
    root = tree.root_node

    diagnostics: list[Diagnostic] = []
    # Pass A: comments.
    comments = list(_nodes_of_kinds(root, frozenset(language.comment_kinds)))
    diagnostics.extend(_run_rules(ctx, comments, comment_rules()))
    # Pass B: error handlers, for languages that have them.
    structural = structural_rules_for(language.id)
    kinds = structural_node_kinds(language.id)
    if structural and kinds:
        diagnostics.extend(_run_rules(ctx, _nodes_of_kinds(root, kinds), structural))

    # Directives count only inside comments, never in strings or code.
    suppressions = comment_suppressions((ctx.position(node)[0], ctx.node_text(node)) for node in comments)
    if suppressions:
        diagnostics = [d for d in diagnostics if not suppressions.is_suppressed(d.rule_id, line=d.line)]
    return diagnostics


def _nodes_of_kinds(root: SyntaxNode, kinds: frozenset[str]) -> Iterable[SyntaxNode]:
    # One traversal for all kinds, so line and block comments stay in source order.
    # Keyword tokens can share a kind name with their clause (Ruby `rescue`); only named nodes count.
    return (node for node in iter_nodes(root) if node.is_named and node.type in kinds)


def _run_rules(ctx: FileContext, nodes: Iterable[SyntaxNode], rules: Sequence[BaseRule]) -> list[Diagnostic]:
    out: list[Diagnostic] = []
    for node in nodes:
        for rule in rules:
            match = _check(rule, node, ctx)
            if match is not None:
                out.append(make_diagnostic(match, node, ctx))
    return out


def _check(rule: BaseRule, node: SyntaxNode, ctx: FileContext) -> RuleMatch | None:
    try:
        return rule.check(node, ctx)
    except Exception as exc:  # noqa: BLE001
        err = RuleEvaluationError(rule.meta.rule_id, node.type, ctx.file)
        logger.warning("%s: %s", err, exc, exc_info=logger.isEnabledFor(logging.DEBUG))
        return None


def make_diagnostic(match: RuleMatch, node: SyntaxNode, ctx: FileContext) -> Diagnostic:
    line, column = ctx.position(node)
    text = ctx.node_text(node)
    first_line = text.splitlines()[0] if text else ""
    return Diagnostic(
        rule_id=match.rule_id,
        message=match.message,
        note=match.note,
        file=ctx.file,
        line=line,
        column=column,
        text=first_line,
    )
