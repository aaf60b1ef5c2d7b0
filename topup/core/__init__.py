"""Core infrastructure for step-based update runs."""

from .context import ExecutionContext
from .executor import Command, CommandExecutor
from .options import RunOptions
from .outcome import Outcome, Status
from .registry import StepRegistry
from .report import EXIT_FAILURE, EXIT_FATAL, EXIT_OK, Report
from .reporter import NullReporter, Reporter
from .runner import Runner, RunnerState, run_updates
from .steps import Category, Step

__all__ = [
    "ExecutionContext",
    "Command",
    "CommandExecutor",
    "RunOptions",
    "Outcome",
    "Status",
    "StepRegistry",
    "Report",
    "EXIT_OK",
    "EXIT_FAILURE",
    "EXIT_FATAL",
    "Reporter",
    "NullReporter",
    "Runner",
    "RunnerState",
    "run_updates",
    "Category",
    "Step",
]
