import logging

import pytest

from tcalc import __version__
from tcalc.cli import format_value, main, repl, run_line
from tcalc.config import Settings
from tcalc.runtime import Runner


@pytest.mark.parametrize(
    "value, expected",
    [
        pytest.param(5.0, "5"),
        pytest.param(-0.0, "-0"),
        pytest.param(0.0, "0"),
        pytest.param(2.5, "2.5"),
        pytest.param(float("inf"), "inf"),
        pytest.param(float("nan"), "nan"),
    ],
)
def test_format_value(value: float, expected: str) -> None:
    assert format_value(value) == expected


def test_run_line(capsys: pytest.CaptureFixture[str]) -> None:
    runner = Runner()
    assert run_line("a = 2", runner, result_prefix="  ")
    assert run_line("delete a", runner)
    assert run_line("a", runner)
    assert not run_line("exit", runner)
    assert capsys.readouterr().out == '  2\nVariable "a" is undefined\n'


def test_run_line_skips_lines_that_do_not_parse(
    capsys: pytest.CaptureFixture[str], caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.ERROR, logger="tcalc"):
        assert run_line("1 +* 2)", Runner())
    assert capsys.readouterr().out == ""
    assert caplog.messages


def test_main_evaluates_arguments(capsys: pytest.CaptureFixture[str]) -> None:
    main(["1+2", "a = 3", "a * 2", "1/0", "quit", "4"])
    assert capsys.readouterr().out == "3\n3\n6\nCannot divide by zero\n4\n"


def test_main_version(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit):
        main(["--version"])
    assert capsys.readouterr().out.strip() == f"tcalc {__version__}"


def test_repl(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    lines = iter(["a = 2", "", "a * 3", "exit", "4"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(lines))
    repl(Runner(), Settings(prompt="> ", result_prefix="  "))
    assert capsys.readouterr().out == "  2\n  6\n"


def test_repl_stops_at_end_of_input(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    def read_eof(prompt: str = "") -> str:
        raise EOFError

    monkeypatch.setattr("builtins.input", read_eof)
    repl(Runner(), Settings(prompt="> ", result_prefix="  "))
    assert capsys.readouterr().out == "\n"


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TCALC_PROMPT", "calc> ")
    monkeypatch.setenv("TCALC_LOG_LEVEL", "debug")
    settings = Settings()
    assert settings.prompt == "calc> "
    assert settings.log_level == "debug"
    assert settings.result_prefix == "  "


def test_run_line_survives_deeply_nested_input(
    capsys: pytest.CaptureFixture[str], caplog: pytest.LogCaptureFixture
) -> None:
    runner = Runner()
    with caplog.at_level(logging.ERROR, logger="tcalc"):
        assert run_line("(" * 100 + "1" + ")" * 100, runner)
        assert run_line("+".join(["1"] * 1500), runner)
    assert capsys.readouterr().out == "1500\n"
    assert caplog.messages == ["Expression is nested too deeply"]
