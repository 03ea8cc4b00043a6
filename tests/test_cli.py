from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

from typer.testing import CliRunner

from cleanlint import __version__
from cleanlint.cli import app

MAGIC = "setTimeout(blastOff, 86400000);\n"
CLEAN = "const MILLISECONDS_PER_DAY = 60 * 60 * 24 * 1000;\nsetTimeout(blastOff, MILLISECONDS_PER_DAY);\n"


def test_version_flag() -> None:
    res = CliRunner().invoke(app, ["--version"])
    assert res.exit_code == 0
    assert res.stdout.strip() == __version__


def test_check_reports_warnings_and_exits_zero(write_js: Callable[[str, str], Path]) -> None:
    write_js("src/app.js", MAGIC)
    write_js("src/clean.js", CLEAN)

    res = CliRunner().invoke(app, ["check"])

    assert res.exit_code == 0, res.output
    assert "src/app.js:1:22 [warning] no-magic-number — Magic number 86400000" in res.output
    assert "src/clean.js" not in res.output
    assert "2 files checked: 0 errors, 1 warning" in res.output


def test_check_strict_fails_on_warnings(write_js: Callable[[str, str], Path]) -> None:
    write_js("app.js", MAGIC)
    res = CliRunner().invoke(app, ["check", "app.js", "--strict"])
    assert res.exit_code == 1


def test_check_json_output(write_js: Callable[[str, str], Path]) -> None:
    write_js("app.js", MAGIC)
    res = CliRunner().invoke(app, ["check", "app.js", "--format", "json"])

    assert res.exit_code == 0, res.output
    payload = json.loads(res.stdout)
    assert payload == [
        {
            "file": "app.js",
            "line": 1,
            "column": 22,
            "end_line": 1,
            "end_column": 30,
            "rule": "no-magic-number",
            "severity": "warning",
            "message": "Magic number 86400000 passed as a call argument.",
            "fix": payload[0]["fix"],
        }
    ]


def test_config_severity_and_format_apply(project_dir: Path, write_js: Callable[[str, str], Path]) -> None:
    (project_dir / ".cleanlint.toml").write_text(
        'format = "json"\n\n[rules.no-magic-number]\nseverity = "error"\n',
        encoding="utf-8",
    )
    write_js("app.js", MAGIC)

    res = CliRunner().invoke(app, ["check"])

    assert res.exit_code == 1
    assert [f["severity"] for f in json.loads(res.stdout)] == ["error"]


def test_disable_flag_removes_rule(write_js: Callable[[str, str], Path]) -> None:
    write_js("app.js", MAGIC)
    res = CliRunner().invoke(app, ["check", "--disable", "no-magic-number", "--strict", "--format", "json"])

    assert res.exit_code == 0, res.output
    assert json.loads(res.stdout) == []


def test_enable_flag_overrides_config(project_dir: Path, write_js: Callable[[str, str], Path]) -> None:
    (project_dir / ".cleanlint.toml").write_text("[rules]\nno-magic-number = false\n", encoding="utf-8")
    write_js("app.js", MAGIC)

    res = CliRunner().invoke(app, ["check", "--enable", "no-magic-number", "--format", "json"])
    assert [f["rule"] for f in json.loads(res.stdout)] == ["no-magic-number"]


def test_unknown_rule_exits_two(write_js: Callable[[str, str], Path]) -> None:
    write_js("app.js", MAGIC)
    res = CliRunner().invoke(app, ["check", "--disable", "no-such-rule"])

    assert res.exit_code == 2
    assert "Unknown rule" in res.output


def test_invalid_config_exits_two(project_dir: Path, write_js: Callable[[str, str], Path]) -> None:
    (project_dir / ".cleanlint.toml").write_text('[rules.no-magic-number]\nseverity = "fatal"\n', encoding="utf-8")
    write_js("app.js", MAGIC)

    res = CliRunner().invoke(app, ["check"])

    assert res.exit_code == 2
    assert "Invalid configuration" in res.output


def test_explicit_config_file(project_dir: Path, write_js: Callable[[str, str], Path]) -> None:
    config = project_dir / "configs" / "strict.toml"
    config.parent.mkdir()
    config.write_text("strict = true\n", encoding="utf-8")
    write_js("configs/app.js", MAGIC)

    res = CliRunner().invoke(app, ["check", "configs/app.js", "--config", str(config)])

    assert res.exit_code == 1
    assert "app.js:1:22" in res.output


def test_parse_error_reported_alongside_other_files(write_js: Callable[[str, str], Path]) -> None:
    write_js("a.js", MAGIC)
    write_js("b.js", "function (\n")

    res = CliRunner().invoke(app, ["check", "--format", "json"])

    assert res.exit_code == 1
    rows = json.loads(res.stdout)
    assert [(r["file"], r["rule"]) for r in rows] == [("a.js", "no-magic-number"), ("b.js", "parse-error")]


def test_missing_path_exits_two_but_checks_the_rest(write_js: Callable[[str, str], Path]) -> None:
    write_js("app.js", MAGIC)

    res = CliRunner().invoke(app, ["check", "app.js", "nope.js"])

    assert res.exit_code == 2
    assert "app.js:1:22" in res.output
    assert "nope.js" in res.output


def test_stdin_input(project_dir: Path) -> None:
    res = CliRunner().invoke(
        app,
        ["check", "--stdin", "--stdin-filename", "src/piped.js", "--format", "json"],
        input=MAGIC,
    )

    assert res.exit_code == 0, res.output
    assert [r["file"] for r in json.loads(res.stdout)] == ["src/piped.js"]


def test_fail_fast_skips_remaining_files(write_js: Callable[[str, str], Path]) -> None:
    for name in ["a.js", "b.js", "c.js"]:
        write_js(name, "let x = ;\n")

    res = CliRunner().invoke(app, ["check", "--fail-fast", "--workers", "1"])

    assert res.exit_code == 1
    assert "a.js:1" in res.output
    assert "c.js:1" not in res.output
    assert "2 skipped after cancellation" in res.output


def test_quiet_hides_summary(write_js: Callable[[str, str], Path]) -> None:
    write_js("app.js", CLEAN)
    res = CliRunner().invoke(app, ["--quiet", "check"])

    assert res.exit_code == 0
    assert "files checked" not in res.output


def test_rules_json_lists_builtins_in_order(project_dir: Path) -> None:
    res = CliRunner().invoke(app, ["rules", "--format", "json"])

    assert res.exit_code == 0, res.output
    rows = json.loads(res.stdout)
    assert [r["name"] for r in rows][:2] == ["no-magic-number", "no-single-letter-identifier"]
    assert len(rows) == 7
    magic = rows[0]
    assert magic["enabled"] is True
    assert magic["options"]["allowed-numbers"] == [0, 1, -1]


def test_rules_enabled_only_respects_config(project_dir: Path) -> None:
    (project_dir / ".cleanlint.toml").write_text("[rules]\nno-journal-comment = false\n", encoding="utf-8")

    res = CliRunner().invoke(app, ["rules", "--enabled-only", "--format", "json"])

    names = {r["name"] for r in json.loads(res.stdout)}
    assert "no-journal-comment" not in names
    assert "no-magic-number" in names


def test_rules_table(project_dir: Path) -> None:
    res = CliRunner().invoke(app, ["rules"])
    assert res.exit_code == 0
    assert "no-commented-out-code" in res.stdout


def test_explain_json(project_dir: Path) -> None:
    res = CliRunner().invoke(app, ["explain", "no-magic-number", "--format", "json"])

    assert res.exit_code == 0, res.output
    payload = json.loads(res.stdout)
    assert payload["name"] == "no-magic-number"
    assert payload["options"]["constant-lookback"] == 25
    assert "86400000" in payload["example"]["bad"]


def test_explain_text(project_dir: Path) -> None:
    res = CliRunner().invoke(app, ["explain", "no-journal-comment"])

    assert res.exit_code == 0, res.output
    assert "Journal comment" in res.stdout
    assert "cleanlint: disable=no-journal-comment" in res.stdout


def test_explain_unknown_rule(project_dir: Path) -> None:
    res = CliRunner().invoke(app, ["explain", "no-such-rule"])
    assert res.exit_code == 2


def test_plugin_failure_exits_two(project_dir: Path) -> None:
    (project_dir / ".cleanlint.toml").write_text('plugins = ["no_such_plugin_module_xyz"]\n', encoding="utf-8")
    res = CliRunner().invoke(app, ["rules"])

    assert res.exit_code == 2
    assert "Failed to load plugins" in res.output


def test_plugin_name_conflict_exits_two(project_dir: Path, monkeypatch) -> None:
    (project_dir / "dup_rules.py").write_text(
        "from cleanlint.rules.literals import NoMagicNumber\n\nRULES = [NoMagicNumber()]\n",
        encoding="utf-8",
    )
    monkeypatch.syspath_prepend(str(project_dir))
    (project_dir / ".cleanlint.toml").write_text('plugins = ["dup_rules"]\n', encoding="utf-8")

    res = CliRunner().invoke(app, ["check"])

    assert res.exit_code == 2
    assert "Duplicate rule name" in res.output


def test_text_output_is_one_line_per_finding(write_js: Callable[[str, str], Path]) -> None:
    write_js("app.js", MAGIC + "setInterval(poll, 30000);\n")

    res = CliRunner().invoke(app, ["--quiet", "check", "app.js"])

    assert res.exit_code == 0, res.output
    lines = res.output.splitlines()
    assert [line.split(" ")[0] for line in lines] == ["app.js:1:22", "app.js:2:19"]
    assert "fix:" not in res.output


def test_show_fixes_adds_fix_lines(write_js: Callable[[str, str], Path]) -> None:
    write_js("app.js", MAGIC)

    res = CliRunner().invoke(app, ["--quiet", "check", "app.js", "--show-fixes"])

    assert res.exit_code == 0, res.output
    lines = res.output.splitlines()
    assert len(lines) == 2
    assert lines[1].startswith("    fix: ")
