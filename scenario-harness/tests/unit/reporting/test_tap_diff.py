from __future__ import annotations

import io

from scenario_harness.reporting.tap_diff import (
    FIG_CROSS,
    FIG_TICK,
    TapDiffReporter,
    exit_status,
    jsonize,
    pretty_ms,
)


def _render(text: str, *, color: bool = False) -> tuple[TapDiffReporter, str]:
    out = io.StringIO()
    ticks = iter([0.0, 0.25])
    reporter = TapDiffReporter(out, color=color, clock=lambda: next(ticks))
    reporter.write(text)
    reporter.end()
    return reporter, out.getvalue()


def test_passing_stream_renders_summary() -> None:
    reporter, text = _render(
        "TAP version 13\n# say a greeting\nok 1 returns a hash\n\n1..1\n# tests 1\n# pass  1\n\n# ok\n"
    )

    assert "\n  say a greeting\n" in text
    assert f"    {FIG_TICK}  returns a hash\n" in text
    assert "passed: 1  failed: 0  of 1 tests  (250ms)" in text
    assert "All of 1 tests passed!" in text
    assert "tests 1" not in text
    assert not reporter.is_failed
    assert exit_status(reporter) == 0


def test_failing_stream_sets_is_failed() -> None:
    reporter, text = _render(
        "TAP version 13\n"
        "not ok 1 letters\n"
        "  ---\n"
        "    operator: equal\n"
        "    expected: b c\n"
        "    actual: a c\n"
        "    at: scenario (suite.py:3)\n"
        "  ...\n"
        "\n1..1\n"
    )

    assert f"    {FIG_CROSS}  letters at scenario (suite.py:3)\n" in text
    assert "        ab c\n" in text
    assert "1 of 1 tests failed." in text
    assert reporter.is_failed
    assert exit_status(reporter) == 1


def test_json_diag_values_get_a_line_diff() -> None:
    _, text = _render(
        "not ok 1 books\n"
        "  ---\n"
        "    operator: deepEqual\n"
        "    expected: '{\"title\": \"a\", \"n\": 1}'\n"
        "    actual: '{\"title\": \"b\", \"n\": 1}'\n"
        "  ...\n"
        "1..1\n",
        color=True,
    )

    assert '\x1b[31m\x1b[7m"title": "b"' in text
    assert '\x1b[32m\x1b[7m"title": "a"' in text
    assert '"n": 1' in text


def test_js_object_literals_are_coerced() -> None:
    assert jsonize("{title: 'a', n: 1}") == '{"title": "a", "n": 1}'


def test_extra_lines_print_at_indent_four() -> None:
    _, text = _render("stray output\nok 1 a\n1..1\n")

    assert "        stray output\n" in text


def test_without_color_no_escape_codes() -> None:
    _, text = _render("not ok 1 a\n1..1\n")

    assert "\x1b[" not in text


def test_exit_status_passes_through_status() -> None:
    reporter, _ = _render("ok 1 a\n1..1\n")

    assert exit_status(reporter, 0) == 0
    assert exit_status(reporter, 1) == 1
    assert exit_status(reporter, 2) == 2


def test_partial_lines_are_buffered_until_newline_or_end() -> None:
    out = io.StringIO()
    reporter = TapDiffReporter(out, color=False)
    reporter.write("ok 1 ha")
    assert out.getvalue() == ""
    reporter.write("lf\n1..1")
    reporter.end()
    reporter.end()

    assert "half" in out.getvalue()
    assert out.getvalue().count("All of 1 tests passed!") == 1


def test_pretty_ms() -> None:
    assert pretty_ms(12.7) == "12ms"
    assert pretty_ms(1500) == "1.5s"
    assert pretty_ms(125_000) == "2m 5s"
