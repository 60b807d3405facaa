from __future__ import annotations

from sloplint.engine.detection import scan
from sloplint.engine.types import Diagnostic
from sloplint.languages.registry import get_language


def scan_code(code: str, language_id: str, *, file: str = "example") -> list[Diagnostic]:
    language = get_language(language_id)
    assert language is not None, language_id
    return scan(code, language, file)


def rule_ids(diagnostics: list[Diagnostic]) -> list[str]:
    return [d.rule_id for d in diagnostics]


def flagged(code: str, language_id: str) -> list[str]:
    return rule_ids(scan_code(code, language_id))
