"""Entry point for the topup command line."""

import click

from . import __version__
from .commands.config import config_command
from .commands.run import run_command
from .commands.steps import steps_command
from .utils import configure_logging


@click.group(invoke_without_command=True)
@click.version_option(__version__, prog_name="topup")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Use this config file instead of ~/.topup/config.ini.")
@click.option("--verbose", "-v", is_flag=True, help="Log debug details to stderr.")
@click.option("--log-file", type=click.Path(dir_okay=False), help="Also write the full log to this file.")
@click.pass_context
def cli(ctx: click.Context, config_path, verbose: bool, log_file):
    """Upgrade all the things.

    \b
    Detects the package managers, toolchains, editor plugins and dotfile
    managers on this machine and updates each of them in turn.

    \b
    Examples:
      topup run                     # Update everything, asking before each step
      topup run -y                  # Update everything without asking
      topup run --only apt --only npm
      topup run --skip snap -n      # Dry run without snap
      topup steps                   # Show what would run, in order
    """
    configure_logging(verbose, log_file)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(run_command)
cli.add_command(steps_command)
cli.add_command(config_command)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
