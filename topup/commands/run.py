"""Run command: update every applicable tool."""

import logging
from typing import Optional, Tuple

import click

from ..config import ConfigManager, load_run_options
from ..core import ExecutionContext, Reporter, Runner, StepRegistry
from ..environment import Environment
from ..steps import default_steps
from ..utils import handle_errors, loading_status, split_names

logger = logging.getLogger(__name__)


def warn_unknown_steps(ctx: ExecutionContext, registry: StepRegistry) -> None:
    """Point out step names in the configuration that match nothing."""
    known = set(registry.names)
    opts = ctx.opts
    mentioned = set(opts.skip) | set(opts.only) | set(opts.yes_steps) | set(opts.arguments)
    for name in sorted(mentioned - known):
        ctx.reporter.warning(f"Unknown step '{name}' (see 'topup steps')")


@click.command("run")
@click.option("--dry-run", "-n", is_flag=True, help="Print the commands instead of running them.")
@click.option("--yes", "-y", is_flag=True, help="Do not ask before each step; pass --yes style flags to tools.")
@click.option("--yes-for", multiple=True, metavar="STEP", help="Like --yes, for the given step only.")
@click.option("--skip", "--disable", "skip", multiple=True, metavar="STEP", help="Do not run this step.")
@click.option("--only", multiple=True, metavar="STEP", help="Run only these steps.")
@click.option("--cleanup", is_flag=True, help="Remove caches and orphans after upgrading.")
@click.option("--show-skipped", is_flag=True, help="List uninstalled and ignored steps in the summary.")
@click.option("--pre-sudo", is_flag=True, help="Ask for the sudo password before the first step.")
@click.option("--timeout", type=click.IntRange(min=1), help="Stop any single command after this many seconds.")
@click.pass_context
@handle_errors
def run_command(
    click_ctx: click.Context,
    dry_run: bool,
    yes: bool,
    yes_for: Tuple[str, ...],
    skip: Tuple[str, ...],
    only: Tuple[str, ...],
    cleanup: bool,
    show_skipped: bool,
    pre_sudo: bool,
    timeout: Optional[int],
):
    """Update every installed package manager and toolchain.

    \b
    Steps run in a fixed order: system packages, language toolchains,
    editor plugins, dotfiles, then topup itself. A failing step never stops
    the others; the summary at the end lists what failed.

    \b
    At each prompt: Enter/y runs the step, n/skip skips it, q quits.
    Exit status is 0 when nothing failed, 1 when a step failed and 3 when
    the run was aborted.
    """
    config = ConfigManager(click_ctx.obj.get("config_path"))
    opts = load_run_options(
        config,
        dry_run=dry_run,
        yes=yes,
        yes_for=split_names(yes_for),
        skip=split_names(skip),
        only=split_names(only),
        cleanup=cleanup,
        show_skipped=show_skipped,
        pre_sudo=pre_sudo,
        timeout=timeout,
    )

    reporter = Reporter()
    ctx = ExecutionContext(opts, Environment(), reporter)

    with loading_status("Detecting installed tools"):
        registry = StepRegistry.build(default_steps(), ctx)
    logger.debug("Registry: %s", ", ".join(registry.names))
    warn_unknown_steps(ctx, registry)
    if opts.dry_run:
        reporter.info("Dry run: commands are printed, not executed")

    report = Runner(ctx, registry).run()
    reporter.summary(report.render(show_skipped=opts.show_skipped), report.exit_code)
    click_ctx.exit(report.exit_code)
