"""Steps command: show the registry without running anything."""

import click

from ..config import ConfigManager, load_run_options
from ..core import ExecutionContext, NullReporter, StepRegistry
from ..environment import Environment
from ..steps import default_steps
from ..utils import echo_table, handle_errors


@click.command("steps")
@click.pass_context
@handle_errors
def steps_command(click_ctx: click.Context):
    """List known steps in execution order and whether they would run."""
    config = ConfigManager(click_ctx.obj.get("config_path"))
    opts = load_run_options(config)
    ctx = ExecutionContext(opts, Environment(), NullReporter())
    registry = StepRegistry.build(default_steps(), ctx)

    rows = []
    for index, entry in enumerate(registry, 1):
        if opts.is_ignored(entry.name):
            state = "ignored"
        elif entry.applicable:
            state = "will run"
        else:
            state = "not installed"
        rows.append((index, entry.name, entry.step.category.name.lower(), state))

    echo_table(rows, ["#", "Step", "Category", "Status"])
