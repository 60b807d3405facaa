from __future__ import annotations

import json

from sloplint import __version__
from sloplint.engine.types import ScanSummary

REPORT_SCHEMA_VERSION = 1


def render_json(summary: ScanSummary) -> str:
    payload = {
        "schema_version": REPORT_SCHEMA_VERSION,
        "tool": {"name": "sloplint", "version": __version__},
        "files_scanned": summary.files_scanned,
        "diagnostics": [d.to_record() for d in summary.diagnostics],
        "errors": [{"file": r.file, "language": r.language, "error": r.error} for r in summary.errors],
    }
    return json.dumps(payload, indent=2, sort_keys=False, ensure_ascii=False)
