import json
import logging
import os
import subprocess
import sys
from pathlib import Path

import pytest

from rulex import rulex_cli
from rulex.rulex_errors import RulexSyntaxError

SOURCE = "rule inc(x) { x + 1 }; inc(2)"
SRC_DIR = Path(__file__).resolve().parents[1] / "src"


def test_run_rulex_string_input_prints_ast(capsys: pytest.CaptureFixture[str]) -> None:
    rulex_cli.run_rulex(SOURCE, is_string=True)
    data = json.loads(capsys.readouterr().out)
    assert [node["type"] for node in data] == ["rule", "call"]
    assert data[0]["params"] == ["x"]


def test_run_rulex_returns_document(capsys: pytest.CaptureFixture[str]) -> None:
    document = rulex_cli.run_rulex("1", is_string=True, indent=0)
    assert json.loads(document) == [{"type": "number", "value": 1.0}]


def test_run_rulex_file_input(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "rules.rx"
    path.write_text("# comment\nflag = true\n", encoding="utf-8")
    rulex_cli.run_rulex(str(path))
    data = json.loads(capsys.readouterr().out)
    assert data == [
        {
            "type": "assign",
            "left": {"type": "identifier", "value": "flag"},
            "right": {"type": "bool", "value": True},
        }
    ]


def test_run_rulex_tokens(capsys: pytest.CaptureFixture[str]) -> None:
    rulex_cli.run_rulex("a <= 2", is_string=True, tokens=True)
    assert json.loads(capsys.readouterr().out) == [
        {"type": "identifier", "value": "a"},
        {"type": "operator", "value": "<="},
        {"type": "number", "value": 2.0},
    ]


def test_run_rulex_pretty_output(capsys: pytest.CaptureFixture[str]) -> None:
    rulex_cli.run_rulex("x", is_string=True, pretty=True)
    out = capsys.readouterr().out
    assert "RAW CONTENT" in out
    assert "PARSED" in out
    assert '"identifier"' in out


def test_run_rulex_output_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    out_path = tmp_path / "ast.json"
    rulex_cli.run_rulex("f(1)", is_string=True, out=str(out_path))
    assert capsys.readouterr().out == ""
    assert json.loads(out_path.read_text(encoding="utf-8"))[0]["type"] == "call"


def test_run_rulex_raises_syntax_error() -> None:
    with pytest.raises(RulexSyntaxError, match="Missing argument list"):
        rulex_cli.run_rulex("rule foo {", is_string=True)


def test_main_success(capsys: pytest.CaptureFixture[str]) -> None:
    assert rulex_cli.main(["-s", "1 + 2 * 3", "--indent", "0"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data[0]["op"] == "+"
    assert data[0]["right"]["op"] == "*"


def test_main_syntax_error_exit_code(capsys: pytest.CaptureFixture[str]) -> None:
    assert rulex_cli.main(["-s", "rule foo {"]) == 1
    err = capsys.readouterr().err
    assert "error: at (1:9): Missing argument list for rule declaration" in err


def test_main_missing_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert rulex_cli.main([str(tmp_path / "missing.rx")]) == 1
    assert "error:" in capsys.readouterr().err


def test_main_undecodable_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "latin1.rx"
    path.write_bytes(b"x = \xff\xfe")
    assert rulex_cli.main([str(path)]) == 1
    assert "error:" in capsys.readouterr().err


def test_main_requires_source() -> None:
    with pytest.raises(SystemExit) as excinfo:
        rulex_cli.main([])
    assert excinfo.value.code == 2


def test_configure_logging_verbose(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[int] = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw["level"]))
    rulex_cli.configure_logging(verbose=True)
    assert calls == [logging.DEBUG]


@pytest.mark.parametrize(
    "env_value,expected",
    [("info", logging.INFO), ("ERROR", logging.ERROR), ("bogus", logging.WARNING)],
)  # type: ignore[misc]
def test_configure_logging_from_env(
    monkeypatch: pytest.MonkeyPatch, env_value: str, expected: int
) -> None:
    calls: list[int] = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw["level"]))
    monkeypatch.setenv(rulex_cli.LOG_LEVEL_ENV, env_value)
    rulex_cli.configure_logging()
    assert calls == [expected]


def test_configure_logging_default(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[int] = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw["level"]))
    monkeypatch.delenv(rulex_cli.LOG_LEVEL_ENV, raising=False)
    rulex_cli.configure_logging()
    assert calls == [logging.WARNING]


def test_parser_debug_logging(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger="rulex"):
        rulex_cli.run_rulex("a; b", is_string=True, out=os.devnull)
    assert "Parsed 2 top-level statement(s)" in caplog.text


def test_cli_subprocess() -> None:
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(
        p for p in (str(SRC_DIR), env.get("PYTHONPATH", "")) if p
    )
    result = subprocess.run(
        [sys.executable, "-m", "rulex.rulex_cli", "-s", "-5"],
        capture_output=True,
        text=True,
        env=env,
        check=False,
    )
    assert result.returncode == 0
    assert json.loads(result.stdout)[0]["left"] == {"type": "number", "value": -1.0}
