"""Configuration context decorators for CLI commands"""

from functools import wraps
from typing import Callable

import click

from ..utils.output import console
from ...api.exceptions import ConfigError
from ...constants import EMOJI_ERROR, EXIT_FAILURE


def require_config(func: Callable) -> Callable:
    """Decorator that loads the deployment configuration before the command

    The loaded DeployConfig is passed as the `config` keyword argument.
    A missing or invalid configuration ends the command with exit code 1.

    Args:
        func: Command function to decorate

    Returns:
        Decorated function
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        ctx = click.get_current_context()

        try:
            config = ctx.obj.load_config()
        except ConfigError as e:
            console.print(f"[red]{EMOJI_ERROR} Configuration error:[/red] {e}")
            ctx.exit(EXIT_FAILURE)

        return func(*args, config=config, **kwargs)

    return wrapper


def _usage_and_exit(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    click.echo(ctx.get_help())
    ctx.exit(EXIT_FAILURE)


def usage_option(func: Callable) -> Callable:
    """`-h/--help` that prints usage and exits non-zero

    Use together with `add_help_option=False` on the command.
    """
    return click.option(
        '-h', '--help',
        is_flag=True,
        expose_value=False,
        is_eager=True,
        callback=_usage_and_exit,
        help='Show usage and exit'
    )(func)
