"""Context object shared by every step during a run."""

from typing import Callable, Optional, Union

from ..environment import Environment
from .executor import CommandExecutor
from .options import RunOptions
from .reporter import NullReporter, Reporter
from .sudo import SudoCell, acquire_sudo


class ExecutionContext:
    """Per-run configuration snapshot passed to the registry, runner and steps.

    Everything here is read-only during the run except ``sudo``, a cell that
    acquires the elevation credential the first time a step asks for it.

    Args:
        opts: Resolved run options
        env: Host environment (PATH lookups, OS detection)
        reporter: Terminal output sink
        prompt: ``(message, default) -> answer`` used for confirmations;
            defaults to ``reporter.ask``
        elevate: Zero-argument callable returning a ``Sudo``; defaults
            to validating credentials with the first sudo-like program found
        executor: Command executor; built from the other arguments if omitted
    """

    def __init__(
        self,
        opts: Optional[RunOptions] = None,
        env: Optional[Environment] = None,
        reporter: Union[Reporter, NullReporter, None] = None,
        prompt: Optional[Callable[[str, str], str]] = None,
        elevate: Optional[Callable] = None,
        executor: Optional[CommandExecutor] = None,
    ):
        self.opts = opts or RunOptions()
        self.env = env or Environment()
        self.reporter = reporter or NullReporter()
        self.prompt = prompt or self.reporter.ask

        if elevate is None:
            elevate = self._default_elevate
        self.sudo = SudoCell(elevate)

        self.executor = executor or CommandExecutor(
            self.reporter,
            dry_run=self.opts.dry_run,
            sudo=self.sudo,
            timeout=self.opts.timeout,
        )

    def _default_elevate(self):
        return acquire_sudo(self.env, dry_run=self.opts.dry_run)

    def yes(self, step: str) -> bool:
        return self.opts.yes(step)

    def extra_args(self, step: str):
        return self.opts.extra_args(step)

    @property
    def cleanup(self) -> bool:
        return self.opts.cleanup
