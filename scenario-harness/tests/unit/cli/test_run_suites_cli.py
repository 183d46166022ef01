from __future__ import annotations

import sys
from pathlib import Path

import pytest

from scenario_harness.cli import run_suites
from scenario_harness.examples import session3


def _write_suite(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, name: str, body: str) -> str:
    (tmp_path / f"{name}.py").write_text(body, encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))
    sys.modules.pop(name, None)
    return name


FAILING_SUITE = """\
async def wrong(s, t):
    t.equal(1, 2, "one is two")


def register(orchestrator):
    orchestrator.register_scenario("wrong", wrong)


def register_clean(orchestrator):
    async def fine(s, t):
        t.pass_("fine")

    orchestrator.register_scenario("fine", fine)
"""


def test_load_registrar_defaults_to_register() -> None:
    assert run_suites.load_registrar("scenario_harness.examples.session3") is session3.register


def test_load_registrar_errors() -> None:
    with pytest.raises(ValueError, match=r"cannot import suite module"):
        run_suites.load_registrar("scenario_harness.no_such_suite")
    with pytest.raises(ValueError, match=r"no callable 'nope'"):
        run_suites.load_registrar("scenario_harness.examples.session3:nope")
    with pytest.raises(ValueError, match=r"invalid suite reference"):
        run_suites.load_registrar(":register")


def test_tap_reporter_writes_raw_tap_and_tap_out(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    tap_out = tmp_path / "out" / "run.tap"

    rc = run_suites.main(
        [
            "--suite",
            "scenario_harness.examples.session3",
            "--reporter",
            "tap",
            "--tap_out",
            str(tap_out),
        ]
    )

    out = capsys.readouterr().out
    assert rc == 0
    assert out.startswith("TAP version 13\n")
    assert "# say a greeting\n" in out
    assert tap_out.read_text(encoding="utf-8") == out


def test_failing_suite_exits_1_with_tap_diff(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    name = _write_suite(tmp_path, monkeypatch, "failing_suite_mod", FAILING_SUITE)

    rc = run_suites.main(["--suite", name, "--no_color"])

    out = capsys.readouterr().out
    assert rc == 1
    assert "one is two" in out
    assert "1 of 1 tests failed." in out


def test_suites_run_in_argument_order(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    name = _write_suite(tmp_path, monkeypatch, "ordered_suite_mod", FAILING_SUITE)

    rc = run_suites.main(
        ["--suite", f"{name}:register_clean", "--suite", name, "--reporter", "tap"]
    )

    out = capsys.readouterr().out
    assert rc == 1
    assert out.index("# fine") < out.index("# wrong")
    assert out.count("TAP version 13") == 2


def test_reporter_from_env(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setenv(run_suites.REPORTER_ENV, "tap")

    rc = run_suites.main(["--suite", "scenario_harness.examples.zome_exercise"])

    assert rc == 0
    assert capsys.readouterr().out.startswith("TAP version 13\n")


def test_bad_suite_exits_with_message() -> None:
    with pytest.raises(SystemExit, match=r"cannot import suite module"):
        run_suites.main(["--suite", "scenario_harness.no_such_suite"])


def test_bad_timeout_env_exits(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SCENARIO_HARNESS_TIMEOUT_S", "later")

    with pytest.raises(SystemExit, match=r"SCENARIO_HARNESS_TIMEOUT_S"):
        run_suites.main(["--suite", "scenario_harness.examples.session3"])
