"""Runner: executes registry steps in sequence and records their outcomes."""

import logging
import signal
import threading
import time
from contextlib import contextmanager
from enum import Enum
from typing import Callable, Iterable, List

from .errors import ElevationError, FatalError, Interrupted, RegistryError, StepError, UserAbort
from .outcome import ABORTED, DECLINED, NOT_INSTALLED, Outcome, Status
from .registry import RegistryEntry, StepRegistry
from .report import Report
from .steps.base import Step

logger = logging.getLogger(__name__)

YES_ANSWERS = {"", "y", "yes"}
NO_ANSWERS = {"n", "no", "s", "skip"}
QUIT_ANSWERS = {"q", "quit"}


class RunnerState(Enum):
    IDLE = "idle"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    EXECUTING = "executing"
    RECORDING = "recording"
    DONE = "done"


class Runner:
    """Walk the registry once, isolating each step's failure.

    A failing step never stops the run. Only fatal conditions (an unreadable
    terminal, quitting at the prompt, SIGINT/SIGTERM, a malformed step) abort
    it; the remaining steps are then recorded as skipped so the report still
    has one entry per registry step.

    Args:
        ctx: The execution context
        registry: Steps in execution order
        clock: Monotonic time source used for step durations
    """

    def __init__(self, ctx, registry: StepRegistry, clock: Callable[[], float] = time.monotonic):
        self.ctx = ctx
        self.registry = registry
        self.report = Report()
        self.state = RunnerState.IDLE
        self._clock = clock

    def run(self) -> Report:
        """Execute every entry and return the closed report."""
        if self.report.closed:
            raise RuntimeError("A runner can only run once")

        entries = list(self.registry)
        try:
            with _terminate_as_interrupt():
                if self.ctx.opts.pre_sudo:
                    self._pre_sudo()
                for entry in entries:
                    self._run_entry(entry)
        except (FatalError, KeyboardInterrupt) as e:
            self._abort(entries, e)
        else:
            self.report.close()

        self.state = RunnerState.DONE
        return self.report

    def _run_entry(self, entry: RegistryEntry) -> None:
        self.state = RunnerState.IDLE
        step = entry.step

        if self.ctx.opts.is_ignored(step.name):
            self._record(step.name, Outcome.ignored(), 0.0)
            return
        if not entry.applicable:
            self._record(step.name, Outcome.skipped(NOT_INSTALLED), 0.0)
            return

        if not self.ctx.yes(step.name):
            self.state = RunnerState.AWAITING_CONFIRMATION
            if not self._confirm(step):
                self._record(step.name, Outcome.skipped(DECLINED), 0.0)
                return

        self.state = RunnerState.EXECUTING
        self.ctx.reporter.step(step.name)
        start = self._clock()
        outcome = self._execute(step)
        duration = self._clock() - start

        self._record(step.name, outcome, duration)
        self.ctx.reporter.outcome(step.name, outcome)

    def _confirm(self, step: Step) -> bool:
        while True:
            answer = self.ctx.prompt(f"Update {step.name}? (Y)es/(n)o/(q)uit", "y")
            answer = (answer or "").strip().lower()
            if answer in YES_ANSWERS:
                return True
            if answer in NO_ANSWERS:
                return False
            if answer in QUIT_ANSWERS:
                raise UserAbort(f"Quit at the prompt for {step.name}")
            self.ctx.reporter.warning(f"Please answer yes, no or quit (got {answer!r})")

    def _execute(self, step: Step) -> Outcome:
        try:
            outcome = step.execute(self.ctx)
        except StepError as e:
            outcome = Outcome.failure(str(e))
        except FatalError:
            raise
        except Exception as e:
            logger.exception("Step %s raised an unexpected error", step.name)
            outcome = Outcome.failure(f"unexpected error: {e}")

        if not isinstance(outcome, Outcome):
            raise RegistryError(f"Step {step.name!r} returned {outcome!r} instead of an Outcome")
        if outcome.status is Status.FAILURE:
            logger.warning("Step %s failed: %s", step.name, outcome.reason)
        return outcome

    def _record(self, name: str, outcome: Outcome, duration: float) -> None:
        self.state = RunnerState.RECORDING
        self.report.record(name, outcome, duration)

    def _pre_sudo(self) -> None:
        try:
            self.ctx.sudo.get()
        except ElevationError as e:
            self.ctx.reporter.warning(f"Could not acquire sudo up front: {e}")

    def _abort(self, entries: List[RegistryEntry], error: BaseException) -> None:
        if isinstance(error, KeyboardInterrupt):
            message = "Interrupted"
        else:
            message = str(error) or error.__class__.__name__
        logger.error("Aborting run: %s", message)
        self.ctx.reporter.error(f"Aborting: {message}")

        # Every entry is recorded exactly once, so the unrecorded tail is what is left
        for entry in entries[len(self.report):]:
            self.report.record(entry.name, Outcome.skipped(ABORTED), 0.0)
        self.report.close(aborted=True)


@contextmanager
def _terminate_as_interrupt():
    """Turn SIGTERM into an ``Interrupted`` exception for the duration of a run."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _handler(signum, frame):
        raise Interrupted(f"Received signal {signum}")

    previous = signal.signal(signal.SIGTERM, _handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGTERM, previous)


def run_updates(ctx, steps: Iterable[Step]) -> Report:
    """Build the registry for ``steps`` and run it.

    Args:
        ctx: The execution context
        steps: Candidate steps in registration order

    Returns:
        The closed report
    """
    registry = StepRegistry.build(steps, ctx)
    return Runner(ctx, registry).run()
