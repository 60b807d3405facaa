from __future__ import annotations

import logging
from dataclasses import dataclass

import pytest
from helpers import rule_ids, scan_code

import sloplint.engine.detection as detection
import sloplint.engine.tree_sitter as ts
from sloplint.engine.context import FileContext, SyntaxNode
from sloplint.engine.types import RuleMatch
from sloplint.errors import ParseError
from sloplint.languages.registry import get_language
from sloplint.rules.base import BaseRule, RuleMeta
from sloplint.rules.comments import OBVIOUS_COMMENT


@dataclass
class _Tree:
    root_node: object


class _Node:
    def __init__(
        self,
        node_type: str,
        *,
        children: list[_Node] | None = None,
        start_point: tuple[int, int] = (0, 0),
        start_byte: int = 0,
        end_byte: int = 0,
        is_named: bool = True,
    ) -> None:
        self.type = node_type
        self.children = children or []
        self.start_point = start_point
        self.start_byte = start_byte
        self.end_byte = end_byte
        self.is_named = is_named

    def child_by_field_name(self, _name: str) -> _Node | None:
        return None


def _fake_parse(root: _Node):  # type: ignore[no-untyped-def]
    def parse(_grammar: str, _source: bytes) -> _Tree:
        return _Tree(root_node=root)

    return parse


class _BoomRule(BaseRule):
    meta = RuleMeta(rule_id="boom", title="Boom", message="boom", category="comment")

    def check(self, node: SyntaxNode, ctx: FileContext) -> RuleMatch | None:
        raise IndexError("unexpected tree shape")


def test_scenario_obvious_comment() -> None:
    (diag,) = scan_code("// Initialize the counter\nlet counter = 0;", "typescript", file="src/a.ts")
    assert diag.rule_id == "obvious-comment"
    assert (diag.file, diag.line, diag.column) == ("src/a.ts", 1, 1)
    assert diag.text == "// Initialize the counter"
    assert diag.note is not None


def test_scenario_narrator_and_step_comments() -> None:
    assert rule_ids(scan_code("// This function handles the request\nfunction f() {}", "typescript")) == [
        "narrator-comment"
    ]
    assert rule_ids(scan_code("// Step 1: validate input\nlet x;", "typescript")) == ["step-comment"]


def test_scenario_keeper_marker() -> None:
    assert scan_code("// TODO: optimize later\nlet x;", "typescript") == []


def test_scenario_handler_with_error_level_logging_is_clean() -> None:
    assert rule_ids(scan_code("try { x() } catch (e) {}", "typescript")) == ["empty-error-handler"]
    assert scan_code("try { x() } catch (e) { console.error(e) }", "typescript") == []


def test_scenario_lone_noop_reports_silent_exception_only() -> None:
    assert rule_ids(scan_code("try:\n    x()\nexcept ValueError:\n    pass\n", "python")) == ["silent-exception"]


def test_one_comment_can_match_several_rules() -> None:
    assert rule_ids(scan_code("// Add your code here\nlet x;", "typescript")) == [
        "obvious-comment",
        "ai-generated-comment",
    ]
    assert rule_ids(scan_code("// handle remaining cases similarly\nfn main() {}", "rust")) == [
        "obvious-comment",
        "placeholder-comment",
    ]


def test_comment_diagnostics_come_first_in_source_order() -> None:
    code = "\n".join(
        [
            "// Initialize the counter",
            "let x = 0;",
            "try {",
            "  x++",
            "} catch (e) {",
            "  /* Step 1: recover */",
            "}",
            "// quick hack",
            "let y = 0;",
            "try { y++ } catch (e) {}",
            "// Return the result",
        ]
    )
    diags = scan_code(code, "typescript")
    assert [(d.rule_id, d.line) for d in diags] == [
        ("obvious-comment", 1),
        ("step-comment", 6),
        ("apologetic-comment", 8),
        ("obvious-comment", 11),
        ("empty-error-handler", 10),
    ]


def test_scan_is_idempotent() -> None:
    code = "# Step 1: load\ntry:\n    x()\nexcept:\n    pass\n# quick hack\n"
    first = scan_code(code, "python")
    second = scan_code(code, "python")
    assert first == second
    assert [d.to_record() for d in first] == [d.to_record() for d in second]


def test_columns_count_characters_not_bytes() -> None:
    (diag,) = scan_code("const s = 'é'; // Initialize the counter\n", "typescript")
    assert diag.line == 1
    assert diag.column == 16


def test_syntax_errors_still_yield_diagnostics() -> None:
    diags = scan_code("// Initialize the counter\nlet = = ;\n", "typescript")
    assert rule_ids(diags) == ["obvious-comment"]


def test_inline_directives_drop_diagnostics() -> None:
    code = "\n".join(
        [
            "// Initialize the counter  sloplint: disable=obvious-comment",
            "// sloplint: disable-next-line=empty-error-handler",
            "try { x() } catch (e) {}",
            "// quick hack",
        ]
    )
    assert rule_ids(scan_code(code, "typescript")) == ["apologetic-comment"]

    assert scan_code("# sloplint: disable-file=all\n# Step 1: load\n", "python") == []


def test_failing_rule_is_logged_and_skipped(monkeypatch, caplog) -> None:
    language = get_language("typescript")
    assert language is not None
    source = "// Initialize the counter"
    comment = _Node("comment", start_byte=0, end_byte=len(source))
    root = _Node("program", children=[comment])

    monkeypatch.setattr(detection, "ts_parse", _fake_parse(root))
    monkeypatch.setattr(detection, "comment_rules", lambda: (_BoomRule(), OBVIOUS_COMMENT))

    with caplog.at_level(logging.WARNING, logger="sloplint.engine.detection"):
        diags = detection.scan(source, language, "a.ts")

    assert rule_ids(diags) == ["obvious-comment"]
    assert "rule boom failed on 'comment' node in a.ts" in caplog.text


def test_fake_tree_traversal_is_preorder(monkeypatch) -> None:
    language = get_language("rust")
    assert language is not None
    source = "// Step 1: a\n/* Step 2: b */\n// Step 3: c"
    first = _Node("line_comment", start_point=(0, 0), start_byte=0, end_byte=12)
    second = _Node("block_comment", start_point=(1, 0), start_byte=13, end_byte=28)
    third = _Node("line_comment", start_point=(2, 0), start_byte=29, end_byte=len(source))
    item = _Node("function_item", children=[second])
    root = _Node("source_file", children=[first, item, third])

    monkeypatch.setattr(detection, "ts_parse", _fake_parse(root))
    diags = detection.scan(source, language, "lib.rs")
    assert [(d.rule_id, d.line) for d in diags] == [
        ("step-comment", 1),
        ("step-comment", 2),
        ("step-comment", 3),
    ]


def test_missing_grammar_raises_parse_error(monkeypatch) -> None:
    def missing(_name: str) -> object:
        raise LookupError("no such grammar")

    ts.reset()
    monkeypatch.setattr(ts, "get_language", missing)

    language = get_language("go")
    assert language is not None
    with pytest.raises(ParseError) as excinfo:
        detection.scan("package main\n", language, "main.go")

    assert excinfo.value.file == "main.go"
    assert excinfo.value.language == "go"
    assert "grammar not available" in excinfo.value.reason


def test_parser_returning_no_tree_raises_parse_error(monkeypatch) -> None:
    class NullParser:
        def __init__(self, _language: object) -> None:
            pass

        def parse(self, _source: bytes) -> None:
            return None

    ts.reset()
    monkeypatch.setattr(ts, "Parser", NullParser)
    monkeypatch.setattr(ts, "get_language", lambda _name: object())

    language = get_language("c")
    assert language is not None
    with pytest.raises(ParseError, match="no tree"):
        detection.scan("int x;\n", language, "x.c")


def test_anonymous_tokens_sharing_a_handler_kind_are_ignored(monkeypatch) -> None:
    language = get_language("ruby")
    assert language is not None
    source = "begin\n  foo\nrescue\nend\n"
    keyword = _Node("rescue", start_point=(2, 0), start_byte=12, end_byte=18, is_named=False)
    clause = _Node("rescue", children=[keyword], start_point=(2, 0), start_byte=12, end_byte=18)
    root = _Node("program", children=[_Node("begin", children=[clause])])

    monkeypatch.setattr(detection, "ts_parse", _fake_parse(root))
    diags = detection.scan(source, language, "a.rb")
    assert [(d.rule_id, d.line) for d in diags] == [("empty-error-handler", 3)]


def test_directives_inside_string_literals_are_ignored() -> None:
    code = 'const s = "sloplint: disable-file=all";\n// Initialize the counter\nlet x = 0;\n'
    assert rule_ids(scan_code(code, "typescript")) == ["obvious-comment"]

    code = 'NOTE = "sloplint: disable-next-line=step-comment"\n# Step 1: load\n'
    assert rule_ids(scan_code(code, "python")) == ["step-comment"]


def test_directive_in_block_comment_keeps_its_line() -> None:
    code = "\n".join(
        [
            "/* Helpers.",
            "   sloplint: disable-next-line=obvious-comment */",
            "// Initialize the counter",
            "let x = 0;",
            "// Return the result",
        ]
    )
    diags = scan_code(code, "typescript")
    assert [(d.rule_id, d.line) for d in diags] == [("obvious-comment", 5)]
