#!/usr/bin/env python
import logging
import os
import typing as t
from importlib import import_module

import click

import ghref.clickExt as clickExt
from ghref.config import Env
from ghref.config import UserInfo
from ghref.logging import ClickFormatter
from ghref.logging import EchoHandler


# This should be the root module logger, even though __name__ is 'ghref.ghref'
logger = logging.getLogger("ghref")


@click.group(
    cls=clickExt.CatchErrorsGroup,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.pass_context
@click.version_option(package_name="ghref")
def cli(ctx: click.Context):
    """Resolve GitHub repo specs into downloadable archives."""
    # Logging should not be setup in the global scope or it breaks pytest log capturing
    handler = EchoHandler()
    handler.setFormatter(ClickFormatter())
    logger.addHandler(handler)
    ctx.call_on_close(lambda: logger.removeHandler(handler))
    # Required to avoid duplicate logging from subprocesses, among other things
    logger.propagate = False

    ctx.obj = ctx.with_resource(UserInfo())
    # Inject another context as the parent
    env_ctx = click.Context(ctx.command, ctx.parent, obj=Env())
    ctx.parent = env_ctx


@cli.command()
@click.argument("command", required=False)
@click.pass_context
def help(ctx: click.Context, command: t.Optional[str]):
    """Display help text for a command."""
    if not command:
        click.echo((ctx.parent or ctx).get_help())
        return

    cmd = cli.get_command(ctx, command)
    if not cmd:
        raise click.BadArgumentUsage(f"No help entry for '{command}'.", ctx)
    # usage text should name the command, not 'help'
    ctx.info_name = command
    click.echo(cmd.get_help(ctx))


cmd_folder = os.path.abspath(os.path.join(os.path.dirname(__file__), "commands"))
for filename in os.listdir(cmd_folder):
    if filename.endswith(".py") and not filename.startswith("__"):
        import_module(f"ghref.commands.{filename[:-3]}")
