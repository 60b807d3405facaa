from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from sloplint import __version__
from sloplint.cli import app

SLOPPY_TS = "// Initialize the counter\nlet x = 0;\ntry { x++ } catch (e) {}\n"


def test_version_flag() -> None:
    runner = CliRunner()
    res = runner.invoke(app, ["--version"])
    assert res.exit_code == 0
    assert res.stdout.strip() == __version__


def test_scan_clean_tree_exits_zero(tmp_path: Path) -> None:
    (tmp_path / "ok.py").write_text("# Retries are capped by the upstream quota.\nx = 1\n", encoding="utf-8")

    runner = CliRunner()
    res = runner.invoke(app, ["scan", str(tmp_path), "--no-progress"])
    assert res.exit_code == 0, res.output
    assert "warning" not in res.stdout


def test_scan_with_findings_exits_one(tmp_path: Path) -> None:
    (tmp_path / "app.ts").write_text(SLOPPY_TS, encoding="utf-8")

    runner = CliRunner()
    res = runner.invoke(app, ["scan", str(tmp_path), "--no-color", "--no-progress"])
    assert res.exit_code == 1, res.output
    assert "obvious-comment" in res.stdout
    assert "empty-error-handler" in res.stdout
    assert "2 problems" in res.stdout


def test_scan_json_output(tmp_path: Path) -> None:
    (tmp_path / "app.ts").write_text(SLOPPY_TS, encoding="utf-8")

    runner = CliRunner()
    res = runner.invoke(app, ["-q", "scan", str(tmp_path / "app.ts"), "--format", "json", "--workers", "2"])
    assert res.exit_code == 1

    payload = json.loads(res.stdout)
    assert payload["files_scanned"] == 1
    assert [(d["rule"], d["line"], d["column"]) for d in payload["diagnostics"]] == [
        ("obvious-comment", 1, 1),
        ("empty-error-handler", 3, 13),
    ]
    assert payload["diagnostics"][0]["file"].endswith("app.ts")


def test_scan_language_filter(tmp_path: Path) -> None:
    (tmp_path / "app.ts").write_text(SLOPPY_TS, encoding="utf-8")
    (tmp_path / "ok.py").write_text("x = 1\n", encoding="utf-8")

    runner = CliRunner()
    res = runner.invoke(app, ["-q", "scan", str(tmp_path), "--format", "json", "-l", "python"])
    assert res.exit_code == 0
    payload = json.loads(res.stdout)
    assert payload["files_scanned"] == 1
    assert payload["diagnostics"] == []


def test_scan_usage_errors_exit_two(tmp_path: Path) -> None:
    runner = CliRunner()

    res = runner.invoke(app, ["scan", str(tmp_path), "--format", "sarif"])
    assert res.exit_code == 2

    res = runner.invoke(app, ["scan", str(tmp_path), "--language", "cobol"])
    assert res.exit_code == 2

    res = runner.invoke(app, ["scan", str(tmp_path), "--workers", "0"])
    assert res.exit_code == 2

    res = runner.invoke(app, ["scan"])
    assert res.exit_code == 2

    res = runner.invoke(app, ["--verbose", "--quiet", "scan", str(tmp_path)])
    assert res.exit_code == 2


def test_missing_path_is_not_fatal(tmp_path: Path) -> None:
    (tmp_path / "ok.py").write_text("x = 1\n", encoding="utf-8")

    runner = CliRunner()
    res = runner.invoke(app, ["scan", str(tmp_path / "missing"), str(tmp_path / "ok.py"), "--no-progress"])
    assert res.exit_code == 0
    assert "No such file or directory" in res.output


def test_verbose_enables_debug_logging(tmp_path: Path) -> None:
    (tmp_path / "ok.py").write_text("x = 1\n", encoding="utf-8")

    runner = CliRunner()
    res = runner.invoke(app, ["--verbose", "scan", str(tmp_path), "--no-progress"])
    assert res.exit_code == 0
    assert "discovered 1 candidate file(s)" in res.output


def test_rules_command_json_lists_builtins() -> None:
    runner = CliRunner()
    res = runner.invoke(app, ["rules", "--format", "json"])
    assert res.exit_code == 0, res.stdout

    data = json.loads(res.stdout)
    by_id = {row["rule_id"]: row for row in data}
    assert len(by_id) == 10
    assert by_id["obvious-comment"]["languages"] is None
    assert by_id["silent-exception"]["languages"] == ["javascript", "python", "ruby", "tsx", "typescript"]


def test_rules_command_terminal_table() -> None:
    runner = CliRunner()
    res = runner.invoke(app, ["rules"])
    assert res.exit_code == 0
    assert "sloplint rules" in res.stdout


def test_languages_command_json() -> None:
    runner = CliRunner()
    res = runner.invoke(app, ["languages", "--format", "json"])
    assert res.exit_code == 0

    data = json.loads(res.stdout)
    by_id = {row["id"]: row for row in data}
    assert list(by_id) == [
        "typescript",
        "tsx",
        "javascript",
        "python",
        "go",
        "rust",
        "c",
        "cpp",
        "java",
        "ruby",
    ]
    assert by_id["ruby"]["handler_kinds"] == ["rescue"]
    assert by_id["go"]["handler_kinds"] == []
    assert by_id["rust"]["comment_kinds"] == ["line_comment", "block_comment"]


def test_list_commands_reject_unknown_format() -> None:
    runner = CliRunner()
    assert runner.invoke(app, ["rules", "--format", "xml"]).exit_code == 2
    assert runner.invoke(app, ["languages", "--format", "xml"]).exit_code == 2
