"""Command executor: the single place where update commands are spawned."""

import logging
import os
import shlex
import subprocess
import threading
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Deque, FrozenSet, IO, List, Mapping, Optional, Tuple

from .errors import ElevationError, StepError
from .outcome import Outcome

logger = logging.getLogger(__name__)

# Lines of captured output kept as the failure reason
TAIL_LINES = 10
# Seconds a terminated child gets before it is killed
TERMINATE_GRACE = 5


@dataclass(frozen=True)
class Command:
    """One external process invocation.

    ``interactive`` commands inherit the terminal (password prompts, pagers,
    progress bars). Otherwise output is captured and streamed line by line.
    """

    argv: Tuple[str, ...]
    cwd: Optional[Path] = None
    env: Mapping[str, str] = field(default_factory=dict)
    interactive: bool = True
    ok_codes: FrozenSet[int] = frozenset({0})
    sudo: bool = False
    timeout: Optional[int] = None
    quiet: bool = False

    @classmethod
    def of(cls, program, *args, **kwargs) -> "Command":
        return cls(tuple(str(a) for a in (program,) + args), **kwargs)

    def with_args(self, extra: List[str]) -> "Command":
        """Copy of this command with ``extra`` appended to argv."""
        return Command(
            self.argv + tuple(extra),
            cwd=self.cwd,
            env=self.env,
            interactive=self.interactive,
            ok_codes=self.ok_codes,
            sudo=self.sudo,
            timeout=self.timeout,
            quiet=self.quiet,
        )

    def display(self) -> str:
        text = shlex.join(self.argv)
        return f"sudo {text}" if self.sudo else text


class CommandExecutor:
    """Runs commands to completion and classifies the exit status.

    Args:
        reporter: Receives dry-run echoes and live output lines
        dry_run: Print commands instead of running them
        sudo: ``SudoCell`` used for commands with ``sudo=True``
        timeout: Default per-command timeout in seconds
    """

    def __init__(self, reporter, dry_run: bool = False, sudo=None, timeout: Optional[int] = None):
        self.reporter = reporter
        self.dry_run = dry_run
        self.sudo = sudo
        self.timeout = timeout

    def run(self, command: Command) -> Outcome:
        """Execute ``command`` once. Never raises for process failures."""
        argv = list(command.argv)
        if command.sudo:
            if self.sudo is None:
                return Outcome.failure("sudo is required but elevation is not configured")
            try:
                argv = self.sudo.get().prefix(argv)
            except ElevationError as e:
                return Outcome.failure(str(e))

        if self.dry_run:
            self.reporter.command(shlex.join(argv))
            return Outcome.success()

        env = None
        if command.env:
            env = dict(os.environ)
            env.update(command.env)
        timeout = command.timeout or self.timeout

        logger.debug("Running %s", shlex.join(argv))
        try:
            if command.interactive:
                proc = subprocess.Popen(argv, cwd=command.cwd, env=env)
            else:
                proc = subprocess.Popen(
                    argv,
                    cwd=command.cwd,
                    env=env,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,
                    text=True,
                    errors="replace",
                )
        except OSError as e:
            logger.warning("Cannot spawn %s: %s", argv[0], e)
            return Outcome.failure(f"spawn error: {e}")

        pump = None
        if not command.interactive:
            pump = _OutputPump(proc.stdout, self.reporter, command.quiet)
            pump.start()

        try:
            code = proc.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            terminate(proc)
            _finish(pump)
            return Outcome.failure(f"timed out after {timeout}s")
        except BaseException:
            # KeyboardInterrupt and friends: never leave the child behind
            terminate(proc)
            _finish(pump)
            raise

        tail = _finish(pump)
        if code in command.ok_codes:
            return Outcome.success()

        reason = f"exit status {code}"
        if tail:
            reason += "\n" + "\n".join(tail)
        return Outcome.failure(reason)

    def output(self, *argv) -> str:
        """Run a read-only query (e.g. ``--version``) and return its stdout.

        Queries run even in dry-run mode since they change nothing.
        """
        args = [str(a) for a in argv]
        try:
            result = subprocess.run(args, capture_output=True, text=True, timeout=30)
        except (OSError, subprocess.TimeoutExpired) as e:
            raise StepError(f"Cannot run {shlex.join(args)}: {e}") from e
        if result.returncode != 0:
            raise StepError(f"{shlex.join(args)} exited with status {result.returncode}")
        return result.stdout


class _OutputPump:
    """Reads a captured child's merged output on a daemon thread.

    Each line is forwarded to the reporter and the last ``TAIL_LINES`` are
    kept for the failure reason.
    """

    def __init__(self, stream: IO[str], reporter, quiet: bool):
        self._stream = stream
        self._reporter = reporter
        self._quiet = quiet
        self._tail: Deque[str] = deque(maxlen=TAIL_LINES)
        self._lock = threading.Lock()
        self._detached = False
        self._thread = threading.Thread(target=self._run, daemon=True)

    def start(self) -> None:
        self._thread.start()

    def _run(self) -> None:
        try:
            for line in self._stream:
                line = line.rstrip("\n")
                with self._lock:
                    if self._detached:
                        break
                    self._tail.append(line)
                if not self._quiet:
                    self._reporter.output(line)
        finally:
            # Closing our end makes a lingering writer fail with EPIPE
            self._stream.close()

    def finish(self) -> List[str]:
        """Wait for the output to drain and return a copy of the tail.

        A grandchild can keep the pipe open after the child exits. The
        reader is then detached: whatever it reads later is dropped.
        """
        self._thread.join(timeout=TERMINATE_GRACE)
        with self._lock:
            if self._thread.is_alive():
                logger.debug("Output pipe still open after exit, detaching reader")
                self._detached = True
            return list(self._tail)


def _finish(pump: Optional[_OutputPump]) -> List[str]:
    return pump.finish() if pump is not None else []


def terminate(proc: subprocess.Popen) -> None:
    """Terminate ``proc``, escalating to kill if it does not exit."""
    if proc.poll() is not None:
        return
    logger.debug("Terminating child process %s", proc.pid)
    proc.terminate()
    try:
        proc.wait(timeout=TERMINATE_GRACE)
    except subprocess.TimeoutExpired:
        proc.kill()
        proc.wait()
