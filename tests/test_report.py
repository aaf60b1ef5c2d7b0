"""Tests for the run report and its summary."""
import pytest

from topup.core import EXIT_FAILURE, EXIT_FATAL, EXIT_OK, Outcome, Report
from topup.core.errors import ReportClosedError
from topup.core.outcome import NOT_INSTALLED
from topup.core.report import format_duration


def _report(*entries, aborted=False):
    report = Report()
    for name, outcome, duration in entries:
        report.record(name, outcome, duration)
    report.close(aborted=aborted)
    return report


def test_grouped_summary():
    """
    Test the summary for a mixed run.
    Expected: succeeded, failed and skipped groups in that order with totals.
    """
    # Arrange
    report = _report(
        ("a", Outcome.failure("exit status 1"), 2.0),
        ("b", Outcome.success(), 1.5),
        ("c", Outcome.skipped(NOT_INSTALLED), 0.0),
    )

    # Act
    text = report.render(show_skipped=True)

    # Assert
    assert text == (
        "Succeeded (1):\n"
        "  b [1.5s]\n"
        "Failed (1):\n"
        "  a [2.0s]: exit status 1\n"
        "Skipped (1):\n"
        "  c: not installed\n"
        "Total: 3 step(s) (1 succeeded, 1 failed, 1 skipped)\n"
        "Elapsed: 3.5s"
    )
    assert report.exit_code == EXIT_FAILURE


def test_render_is_stable():
    """
    Test that rendering has no side effects.
    Expected: two renders are identical.
    """
    # Arrange
    report = _report(("a", Outcome.success(), 0.3), ("b", Outcome.ignored(), 0.0))

    # Act & Assert
    assert report.render() == report.render()
    assert report.render(show_skipped=True) == report.render(show_skipped=True)


def test_quiet_entries_are_folded():
    """
    Test the default summary.
    Expected: not-installed and ignored steps collapse into one count line, declined stays listed.
    """
    # Arrange
    report = _report(
        ("a", Outcome.success(), 1.0),
        ("b", Outcome.skipped(NOT_INSTALLED), 0.0),
        ("c", Outcome.ignored(), 0.0),
        ("d", Outcome.skipped("declined"), 0.0),
    )

    # Act
    text = report.render()

    # Assert
    assert "2 step(s) not installed or ignored" in text
    assert "  d: declined" in text
    assert "  b" not in text.splitlines()
    assert "Ignored" not in text


def test_multiline_failure_reason_is_indented():
    """
    Test output tails in the summary.
    Expected: the first line follows the name, the rest are indented.
    """
    # Arrange
    report = _report(("apt", Outcome.failure("exit status 100\nE: Unable to lock\nE: retry"), 61.0))

    # Act
    lines = report.render().splitlines()

    # Assert
    assert lines[1] == "  apt [1m01s]: exit status 100"
    assert lines[2] == "      E: Unable to lock"
    assert lines[3] == "      E: retry"


def test_exit_codes():
    """
    Test exit code classification.
    Expected: 0 when nothing failed, 1 with failures, 3 when aborted.
    """
    # Arrange & Act
    ok = _report(("a", Outcome.success(), 0.0), ("b", Outcome.skipped("declined"), 0.0))
    failed = _report(("a", Outcome.failure("boom"), 0.0))
    aborted = _report(("a", Outcome.success(), 0.0), ("b", Outcome.skipped("aborted"), 0.0), aborted=True)

    # Assert
    assert ok.exit_code == EXIT_OK
    assert failed.exit_code == EXIT_FAILURE
    assert aborted.exit_code == EXIT_FATAL
    assert aborted.render().endswith("Run aborted")


def test_empty_report():
    """
    Test a run with nothing registered.
    Expected: zero total and success exit code.
    """
    # Arrange & Act
    report = _report()

    # Assert
    assert report.render() == "Total: 0 step(s)\nElapsed: 0.0s"
    assert report.exit_code == EXIT_OK


def test_closed_report_rejects_entries():
    """
    Test that a closed report is read-only.
    Expected: ReportClosedError.
    """
    # Arrange
    report = _report(("a", Outcome.success(), 0.0))

    # Act & Assert
    with pytest.raises(ReportClosedError):
        report.record("b", Outcome.success())
    assert len(report) == 1


def test_groups_and_elapsed():
    """
    Test the grouping accessors.
    Expected: entries grouped by status, elapsed sums durations.
    """
    # Arrange
    report = _report(
        ("a", Outcome.success(), 1.0),
        ("b", Outcome.failure("x"), 2.0),
        ("c", Outcome.ignored(), 0.0),
    )

    # Assert
    assert [e.name for e in report.successes] == ["a"]
    assert [e.name for e in report.failures] == ["b"]
    assert [e.name for e in report.ignored] == ["c"]
    assert report.skipped == []
    assert report.elapsed == 3.0


@pytest.mark.parametrize("seconds,expected", [
    (0, "0.0s"),
    (3.04, "3.0s"),
    (59.94, "59.9s"),
    (75.2, "1m15s"),
    (3723, "1h02m03s"),
])
def test_format_duration(seconds, expected):
    """
    Test duration formatting.
    Expected: seconds below a minute, then minutes and hours.
    """
    assert format_duration(seconds) == expected


def test_outcome_str():
    """
    Test the outcome string form.
    Expected: status and reason.
    """
    assert str(Outcome.failure("exit status 2")) == "failure: exit status 2"
    assert Outcome.skipped("declined").ok
    assert not Outcome.failure("x").ok
