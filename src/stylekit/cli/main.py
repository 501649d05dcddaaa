"""stylekit CLI entry point."""

import click

from stylekit.config import StylekitConfig


@click.group()
@click.pass_context
def cli(ctx: click.Context):
    """stylekit: stylesheet rule engine CLI."""
    config = StylekitConfig.from_env()
    config.configure_logging()
    ctx.obj = config


# Register subcommands
from stylekit.cli.stylesheet_cmd import (  # noqa: E402
    check,
    eval_expression,
    get,
    list_functions,
)

cli.add_command(check)
cli.add_command(get)
cli.add_command(eval_expression)
cli.add_command(list_functions)
