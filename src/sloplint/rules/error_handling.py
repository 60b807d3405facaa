from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from sloplint.engine.context import FileContext, SyntaxNode, first_child_of_type, iter_nodes, named_children
from sloplint.engine.types import RuleMatch
from sloplint.rules.base import BaseRule, RuleMeta

BodyAccessor = Callable[[SyntaxNode], SyntaxNode | None]


def _field(name: str) -> BodyAccessor:
    def accessor(node: SyntaxNode) -> SyntaxNode | None:
        return node.child_by_field_name(name)

    return accessor


def _child_of_type(*kinds: str) -> BodyAccessor:
    wanted = frozenset(kinds)

    def accessor(node: SyntaxNode) -> SyntaxNode | None:
        return first_child_of_type(node, wanted)

    return accessor


@dataclass(frozen=True, slots=True)
class HandlerSyntax:
    """How one language family spells an exception handler."""

    family: str
    languages: frozenset[str]
    handler_kinds: frozenset[str]
    body: BodyAccessor
    # A missing body (Ruby `rescue` without `then`) counts as empty.
    missing_body_is_empty: bool
    noop_kinds: frozenset[str]
    call_kinds: frozenset[str]
    log_callees: frozenset[str]
    comment_kinds: frozenset[str]
    # Set for families where a handler without an exception type catches
    # everything, including interpreter exit signals.
    bare_catch_all: bool = False


HANDLER_SYNTAX: tuple[HandlerSyntax, ...] = (
    HandlerSyntax(
        family="ecmascript",
        languages=frozenset({"typescript", "tsx", "javascript"}),
        handler_kinds=frozenset({"catch_clause"}),
        body=_field("body"),
        missing_body_is_empty=False,
        noop_kinds=frozenset({"empty_statement"}),
        call_kinds=frozenset({"call_expression"}),
        log_callees=frozenset({"console.log"}),
        comment_kinds=frozenset({"comment"}),
    ),
    HandlerSyntax(
        family="java",
        languages=frozenset({"java"}),
        handler_kinds=frozenset({"catch_clause"}),
        body=_field("body"),
        missing_body_is_empty=False,
        noop_kinds=frozenset(),
        call_kinds=frozenset({"method_invocation"}),
        log_callees=frozenset({"System.out.println"}),
        comment_kinds=frozenset({"line_comment", "block_comment"}),
    ),
    HandlerSyntax(
        family="python",
        languages=frozenset({"python"}),
        handler_kinds=frozenset({"except_clause", "except_group_clause"}),
        body=_child_of_type("block"),
        missing_body_is_empty=False,
        noop_kinds=frozenset({"pass_statement"}),
        call_kinds=frozenset({"call"}),
        log_callees=frozenset({"print"}),
        comment_kinds=frozenset({"comment"}),
        bare_catch_all=True,
    ),
    HandlerSyntax(
        family="ruby",
        languages=frozenset({"ruby"}),
        handler_kinds=frozenset({"rescue"}),
        body=_child_of_type("then"),
        missing_body_is_empty=True,
        noop_kinds=frozenset({"nil"}),
        call_kinds=frozenset({"call", "method_call"}),
        log_callees=frozenset({"puts", "p"}),
        comment_kinds=frozenset({"comment"}),
    ),
)


def _index_by_language(table: tuple[HandlerSyntax, ...]) -> Mapping[str, HandlerSyntax]:
    by_lang: dict[str, HandlerSyntax] = {}
    for syntax in table:
        for lang in syntax.languages:
            if lang in by_lang:  # pragma: no cover
                raise RuntimeError(f"Language {lang} belongs to two handler families")
            by_lang[lang] = syntax
    return MappingProxyType(by_lang)


_SYNTAX_BY_LANGUAGE = _index_by_language(HANDLER_SYNTAX)
STRUCTURAL_LANGUAGES: frozenset[str] = frozenset(_SYNTAX_BY_LANGUAGE)


def handler_syntax_for(language_id: str) -> HandlerSyntax | None:
    return _SYNTAX_BY_LANGUAGE.get(language_id)


def structural_node_kinds(language_id: str) -> frozenset[str]:
    syntax = _SYNTAX_BY_LANGUAGE.get(language_id)
    return syntax.handler_kinds if syntax is not None else frozenset()


def _handler_syntax(node: SyntaxNode, ctx: FileContext) -> HandlerSyntax | None:
    # Dispatch on the file's language, never on the node kind alone:
    # `catch_clause` exists in several unrelated grammars.
    syntax = _SYNTAX_BY_LANGUAGE.get(ctx.language.id)
    if syntax is None or node.type not in syntax.handler_kinds:
        return None
    return syntax


def _statements(body: SyntaxNode) -> list[SyntaxNode]:
    # Comments count as content: an explained empty handler is intentional.
    return named_children(body)


def _has_exception_type(node: SyntaxNode, syntax: HandlerSyntax) -> bool:
    body = syntax.body(node)
    for child in named_children(node):
        if body is not None and child.start_byte == body.start_byte and child.type == body.type:
            continue
        if child.type in syntax.comment_kinds:
            continue
        return True
    return False


class EmptyErrorHandler(BaseRule):
    meta = RuleMeta(
        rule_id="empty-error-handler",
        title="Empty error handler",
        message="Empty catch block silently swallows errors",
        note="At minimum, log the error or add a comment explaining why it's safe to ignore.",
        category="structural",
        languages=STRUCTURAL_LANGUAGES,
    )

    _MESSAGES: Mapping[str, str] = MappingProxyType(
        {
            "ruby": "Empty rescue block silently swallows errors",
            "python": "Empty except block silently swallows errors",
        }
    )
    _BARE_MESSAGE = "Bare except catches everything including KeyboardInterrupt and SystemExit"
    _BARE_NOTE = "Use `except Exception:` to avoid catching system-level exceptions."

    def check(self, node: SyntaxNode, ctx: FileContext) -> RuleMatch | None:
        syntax = _handler_syntax(node, ctx)
        if syntax is None:
            return None

        if syntax.bare_catch_all and not _has_exception_type(node, syntax):
            return self._match(message=self._BARE_MESSAGE, note=self._BARE_NOTE)

        body = syntax.body(node)
        if body is None:
            if syntax.missing_body_is_empty:
                return self._match(message=self._MESSAGES.get(syntax.family))
            return None
        if not _statements(body):
            return self._match(message=self._MESSAGES.get(syntax.family))
        return None


class SilentException(BaseRule):
    meta = RuleMeta(
        rule_id="silent-exception",
        title="Silently swallowed exception",
        message="Silent exception swallowing — at minimum log the error",
        note="A handler whose only statement does nothing hides bugs just like an empty one.",
        category="structural",
        languages=frozenset(lang for s in HANDLER_SYNTAX if s.noop_kinds for lang in s.languages),
    )

    def check(self, node: SyntaxNode, ctx: FileContext) -> RuleMatch | None:
        syntax = _handler_syntax(node, ctx)
        if syntax is None or not syntax.noop_kinds:
            return None
        body = syntax.body(node)
        if body is None:
            return None
        stmts = _statements(body)
        if len(stmts) == 1 and stmts[0].type in syntax.noop_kinds:
            return self._match()
        return None


class LogInErrorHandler(BaseRule):
    meta = RuleMeta(
        rule_id="log-in-error-handler",
        title="Fire-and-forget logging in error handler",
        message="console.log in catch — use console.error or a proper logger",
        note="Plain output calls lose the error level; route handled errors through an error-aware logger.",
        category="structural",
        languages=STRUCTURAL_LANGUAGES,
    )

    _MESSAGES: Mapping[str, str] = MappingProxyType(
        {
            "java": "System.out.println in catch — use a logger or System.err",
            "python": "print() in except — use logging.exception or a proper logger",
            "ruby": "puts in rescue — use a logger or warn",
        }
    )

    def check(self, node: SyntaxNode, ctx: FileContext) -> RuleMatch | None:
        syntax = _handler_syntax(node, ctx)
        if syntax is None:
            return None
        body = syntax.body(node)
        if body is None:
            return None
        for candidate in iter_nodes(body):
            if candidate.type in syntax.call_kinds and _callee(candidate, ctx) in syntax.log_callees:
                return self._match(message=self._MESSAGES.get(syntax.family))
        return None


def _callee(call: SyntaxNode, ctx: FileContext) -> str | None:
    """
    Return the callee text of a call with an argument list, whitespace removed.

    `console.log(e)` -> "console.log", `System.out.println(e)` ->
    "System.out.println", `puts e` -> "puts". Calls without arguments yield None.
    """

    arguments = call.child_by_field_name("arguments")
    if arguments is None:
        return None
    raw = ctx.source[call.start_byte : arguments.start_byte].decode("utf-8", errors="replace")
    return "".join(raw.split())


def builtin_error_handling_rules() -> list[BaseRule]:
    return [
        EmptyErrorHandler(),
        SilentException(),
        LogInErrorHandler(),
    ]
