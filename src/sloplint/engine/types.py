from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

RuleCategory = Literal["comment", "structural"]


@dataclass(frozen=True, slots=True)
class RuleMatch:
    rule_id: str
    message: str
    note: str | None = None


@dataclass(frozen=True, slots=True)
class Diagnostic:
    rule_id: str
    message: str
    file: str
    line: int  # 1-based
    column: int  # 1-based
    text: str  # first line of the matched node
    note: str | None = None

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {
            "rule": self.rule_id,
            "message": self.message,
        }
        if self.note is not None:
            record["note"] = self.note
        record.update(
            {
                "file": self.file,
                "line": self.line,
                "column": self.column,
                "text": self.text,
            }
        )
        return record


@dataclass(frozen=True, slots=True)
class FileScanResult:
    """
    Outcome of scanning one file.

    `skipped` marks files whose language did not resolve; `error` carries the
    reason a supported file could not be read or parsed. Neither case yields
    diagnostics.
    """

    file: str
    language: str | None
    diagnostics: tuple[Diagnostic, ...] = ()
    error: str | None = None
    skipped: bool = False


@dataclass(frozen=True, slots=True)
class ScanSummary:
    files_scanned: int
    diagnostics: tuple[Diagnostic, ...]
    errors: tuple[FileScanResult, ...] = ()

    @property
    def has_diagnostics(self) -> bool:
        return bool(self.diagnostics)
