"""Base step class for the update run."""

import logging
from abc import ABC, abstractmethod
from enum import IntEnum
from typing import List, Optional, Sequence

from ..errors import MissingBinaryError, StepError
from ..executor import Command
from ..outcome import Outcome, Status

logger = logging.getLogger(__name__)


class Category(IntEnum):
    """Fixed execution order: foundational system updates run first."""

    SYSTEM = 0
    LANGUAGE = 1
    EDITOR = 2
    DOTFILES = 3
    SELF_UPDATE = 4


class Step(ABC):
    """Base class for all update steps.

    Steps are the building blocks of a run. Each step:
    1. Checks whether its tool is present (applicable)
    2. Builds the commands that update it (commands)
    3. Runs them through the context's executor (execute)

    Subclasses set ``name`` and ``category`` as class attributes and must not
    change state after construction.
    """

    name: str = ""
    category: Category = Category.SYSTEM

    @abstractmethod
    def applicable(self, ctx) -> bool:
        """Determine if the tool this step updates is present.

        Must be free of side effects: look at PATH and the filesystem only.

        Args:
            ctx: The execution context

        Returns:
            True if the step should be offered, False to skip it
        """

    @abstractmethod
    def commands(self, ctx) -> List[Command]:
        """Build the commands that perform the update, in order.

        Raise ``StepError`` (for example through ``require``) when the
        update cannot be attempted.
        """

    def execute(self, ctx) -> Outcome:
        """Run ``commands`` in order, stopping at the first failure.

        Args:
            ctx: The execution context (its executor spawns the commands)

        Returns:
            Outcome of the first failing command, or success
        """
        try:
            commands = self.commands(ctx)
            for command in commands:
                outcome = ctx.executor.run(command)
                if outcome.status is not Status.SUCCESS:
                    return outcome
            self.after(ctx)
        except StepError as e:
            logger.info("Step %s failed: %s", self.name, e)
            return Outcome.failure(str(e))
        return Outcome.success()

    def after(self, ctx) -> None:
        """Hook run once every command succeeded."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name}>"


class CommandStep(Step):
    """A step that runs one binary with fixed arguments.

    Covers most tools: ``rustup update``, ``chezmoi update`` and so on.
    Extra arguments configured for the step are appended to the main
    command; ``yes_args`` are added when confirmations are pre-answered and
    ``cleanup`` commands run afterwards when cleanup is enabled.

    Args:
        name: Step identity
        binary: Program looked up on PATH
        args: Arguments of the main update command
        requires: Other binaries that must be present
        platforms: ``platform.system()`` names the step runs on, empty for all
        distros: os-release ids of the distribution family, empty for any
        yes_args: Appended when ``--yes`` applies to this step
        cleanup: Argument lists run with ``binary`` when cleanup is enabled
        sudo: Run through the cached elevation program
        interactive: Inherit the terminal instead of capturing output
    """

    def __init__(
        self,
        name: str,
        binary: str,
        args: Sequence[str] = (),
        requires: Sequence[str] = (),
        platforms: Sequence[str] = (),
        distros: Sequence[str] = (),
        yes_args: Sequence[str] = (),
        cleanup: Sequence[Sequence[str]] = (),
        sudo: bool = False,
        interactive: bool = False,
        category: Optional[Category] = None,
    ):
        self.name = name
        self.binary = binary
        self.args = tuple(args)
        self.requires = tuple(requires)
        self.platforms = tuple(platforms)
        self.distros = tuple(distros)
        self.yes_args = tuple(yes_args)
        self.cleanup_args = tuple(tuple(c) for c in cleanup)
        self.sudo = sudo
        self.interactive = interactive
        if category is not None:
            self.category = category

    def applicable(self, ctx) -> bool:
        if self.platforms and ctx.env.os_name not in self.platforms:
            return False
        # An unreadable os-release does not rule the step out
        if self.distros and ctx.env.distro_id() and not ctx.env.is_distro(*self.distros):
            return False
        return all(ctx.env.which(b) is not None for b in (self.binary,) + self.requires)

    def commands(self, ctx) -> List[Command]:
        binary = require(ctx, self.binary)
        for other in self.requires:
            require(ctx, other)

        yes = list(self.yes_args) if ctx.yes(self.name) else []
        main = self.command(binary, *self.args).with_args(yes + ctx.extra_args(self.name))
        commands = [main]
        if ctx.cleanup:
            commands.extend(self.command(binary, *args).with_args(yes) for args in self.cleanup_args)
        return commands

    def command(self, *argv) -> Command:
        return Command.of(*argv, sudo=self.sudo, interactive=self.interactive)


def require(ctx, binary: str):
    """Return the path of ``binary`` or raise ``MissingBinaryError``."""
    path = ctx.env.which(binary)
    if path is None:
        raise MissingBinaryError(binary)
    return path
