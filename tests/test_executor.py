"""Tests for the command executor, using the running interpreter as child process."""
import os
import signal
import sys
import threading
import time
from pathlib import Path

import pytest

from topup.core import Command, CommandExecutor, NullReporter, Status
from topup.core.errors import ElevationError, StepError
from topup.core.sudo import Sudo, SudoCell


class RecordingReporter(NullReporter):
    def __init__(self):
        self.lines = []
        self.commands = []

    def output(self, line: str) -> None:
        self.lines.append(line)

    def command(self, text: str) -> None:
        self.commands.append(text)


def python(code: str, **kwargs) -> Command:
    kwargs.setdefault("interactive", False)
    return Command.of(sys.executable, "-c", code, **kwargs)


@pytest.fixture
def reporter():
    return RecordingReporter()


def test_zero_exit_is_success(reporter):
    """
    Test a command that exits 0.
    Expected: success and output streamed line by line.
    """
    # Arrange
    executor = CommandExecutor(reporter)

    # Act
    outcome = executor.run(python("print('one'); print('two')"))

    # Assert
    assert outcome.status is Status.SUCCESS
    assert reporter.lines == ["one", "two"]


def test_nonzero_exit_carries_tail(reporter):
    """
    Test a failing command.
    Expected: failure with the exit status and the last output lines.
    """
    # Arrange
    executor = CommandExecutor(reporter)
    code = "import sys\nfor i in range(15): print(i)\nsys.stdout.flush()\nprint('oops', file=sys.stderr)\nsys.exit(100)"

    # Act
    outcome = executor.run(python(code))

    # Assert
    lines = outcome.reason.splitlines()
    assert outcome.status is Status.FAILURE
    assert lines[0] == "exit status 100"
    assert lines[-1] == "oops"
    # Only the tail is kept
    assert len(lines) == 11
    assert "4" not in lines


def test_ok_codes(reporter):
    """
    Test accepted non-zero exit codes.
    Expected: an exit code listed in ok_codes is a success.
    """
    executor = CommandExecutor(reporter)
    outcome = executor.run(python("import sys; sys.exit(2)", ok_codes=frozenset({0, 2})))
    assert outcome.status is Status.SUCCESS


def test_missing_program_is_spawn_error(reporter, tmp_path):
    """
    Test spawning something that does not exist.
    Expected: failure mentioning the spawn error, no exception.
    """
    executor = CommandExecutor(reporter)
    outcome = executor.run(Command.of(str(tmp_path / "no-such-program"), interactive=False))
    assert outcome.status is Status.FAILURE
    assert outcome.reason.startswith("spawn error:")


def test_timeout_terminates_child(reporter):
    """
    Test the per-command timeout.
    Expected: failure reporting the timeout.
    """
    executor = CommandExecutor(reporter, timeout=1)
    outcome = executor.run(python("import time; time.sleep(30)"))
    assert outcome.status is Status.FAILURE
    assert outcome.reason == "timed out after 1s"


def test_command_timeout_overrides_default(reporter):
    executor = CommandExecutor(reporter, timeout=60)
    outcome = executor.run(python("import time; time.sleep(30)", timeout=1))
    assert outcome.reason == "timed out after 1s"


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")
def test_interrupt_terminates_child(reporter, tmp_path):
    """
    Test Ctrl-C while a captured command runs.
    Expected: KeyboardInterrupt propagates and the child is gone afterwards.
    """
    # Arrange - the child records its pid, then sleeps
    pid_file = tmp_path / "pid"
    code = f"import os, time\nopen({str(pid_file)!r}, 'w').write(str(os.getpid()))\ntime.sleep(60)"
    executor = CommandExecutor(reporter)
    timer = threading.Timer(1.0, os.kill, (os.getpid(), signal.SIGINT))

    # Act
    timer.start()
    try:
        with pytest.raises(KeyboardInterrupt):
            executor.run(python(code))
    finally:
        timer.cancel()

    # Assert
    pid = int(pid_file.read_text())
    with pytest.raises(ProcessLookupError):
        os.kill(pid, 0)


def test_lingering_writer_is_detached(reporter, monkeypatch):
    """
    Test a child whose background process keeps the output pipe open.
    Expected: the reason holds what was read before exit, later output is dropped.
    """
    # Arrange - the grandchild inherits stdout and writes after its parent exited
    monkeypatch.setattr("topup.core.executor.TERMINATE_GRACE", 0.2)
    late = "import time\\ntime.sleep(1)\\nfor _ in range(20): print('late', flush=True); time.sleep(0.05)"
    code = (
        "import subprocess, sys\n"
        f"subprocess.Popen([sys.executable, '-c', \"{late}\"])\n"
        "print('early', flush=True)\n"
        "sys.exit(1)"
    )
    executor = CommandExecutor(reporter)

    # Act
    outcome = executor.run(python(code))
    time.sleep(2)

    # Assert
    assert outcome.reason == "exit status 1\nearly"
    assert reporter.lines == ["early"]


def test_dry_run_spawns_nothing(reporter, tmp_path):
    """
    Test dry-run mode.
    Expected: the command is echoed, not executed, and reported as success.
    """
    # Arrange
    marker = tmp_path / "ran"
    executor = CommandExecutor(reporter, dry_run=True)

    # Act
    outcome = executor.run(python(f"open({str(marker)!r}, 'w')"))

    # Assert
    assert outcome.status is Status.SUCCESS
    assert not marker.exists()
    assert len(reporter.commands) == 1
    assert sys.executable in reporter.commands[0]


def test_sudo_command_is_prefixed(reporter):
    """
    Test commands needing elevation.
    Expected: argv is prefixed with the cached sudo program.
    """
    # Arrange
    cell = SudoCell(lambda: Sudo(Path("/usr/bin/doas"), "doas"))
    executor = CommandExecutor(reporter, dry_run=True, sudo=cell)

    # Act
    executor.run(Command.of("pacman", "-Syu", sudo=True))

    # Assert
    assert reporter.commands == ["/usr/bin/doas pacman -Syu"]


def test_failed_elevation_fails_command(reporter):
    """
    Test a command needing elevation when none is available.
    Expected: failure with the elevation message, nothing spawned.
    """
    # Arrange
    def refuse():
        raise ElevationError("no sudo program found")

    executor = CommandExecutor(reporter, dry_run=True, sudo=SudoCell(refuse))

    # Act
    outcome = executor.run(Command.of("pacman", "-Syu", sudo=True))

    # Assert
    assert outcome.status is Status.FAILURE
    assert outcome.reason == "no sudo program found"
    assert reporter.commands == []


def test_sudo_without_cell(reporter):
    executor = CommandExecutor(reporter)
    outcome = executor.run(Command.of("apt-get", "update", sudo=True))
    assert outcome.status is Status.FAILURE


def test_quiet_command_is_not_streamed(reporter):
    """
    Test quiet commands.
    Expected: no output lines, tail still used on failure.
    """
    executor = CommandExecutor(reporter)
    outcome = executor.run(python("print('hidden'); raise SystemExit(1)", quiet=True))
    assert reporter.lines == []
    assert outcome.reason == "exit status 1\nhidden"


def test_env_and_cwd(reporter, tmp_path):
    """
    Test environment overrides and working directory.
    Expected: the child sees both.
    """
    code = "import os; print(os.environ['TOPUP_TEST']); print(os.getcwd())"
    executor = CommandExecutor(reporter)

    outcome = executor.run(python(code, env={"TOPUP_TEST": "value"}, cwd=tmp_path))

    assert outcome.status is Status.SUCCESS
    assert reporter.lines[0] == "value"
    assert Path(reporter.lines[1]).resolve() == tmp_path.resolve()


def test_output_query():
    """
    Test read-only queries.
    Expected: stdout returned, non-zero exit raises StepError.
    """
    executor = CommandExecutor(NullReporter(), dry_run=True)

    assert executor.output(sys.executable, "-c", "print('4.0.7')").strip() == "4.0.7"
    with pytest.raises(StepError):
        executor.output(sys.executable, "-c", "raise SystemExit(3)")


def test_command_helpers():
    """
    Test Command construction helpers.
    Expected: with_args appends, display shows sudo.
    """
    command = Command.of("apt-get", "dist-upgrade", sudo=True)
    extended = command.with_args(["-y"])

    assert extended.argv == ("apt-get", "dist-upgrade", "-y")
    assert extended.sudo
    assert command.argv == ("apt-get", "dist-upgrade")
    assert extended.display() == "sudo apt-get dist-upgrade -y"
    assert Command.of(Path("/usr/bin/brew"), "update").argv == ("/usr/bin/brew", "update")
