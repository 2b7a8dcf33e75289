"""Servers command implementation"""

import click

from ..decorators import require_config, usage_option
from ..utils.output import console, format_servers
from ...api.exceptions import ConfigError
from ...constants import EXIT_FAILURE, EMOJI_ERROR
from ...core import ConfigResolver
from ...models import InstanceRole
from .deploy import INSTANCE_CHOICE


@click.command(add_help_option=False)
@usage_option
@click.argument('environment')
@click.argument('instance', type=INSTANCE_CHOICE)
@click.argument('pool')
@click.pass_context
@require_config
def servers(ctx, environment, instance, pool, config):
    """Show the servers a deployment would target

    Resolves ENVIRONMENT, INSTANCE and POOL against the configuration
    exactly as the deploy command does, without contacting any server.
    """
    try:
        resolver = ConfigResolver(config)
        targets, build_allowed = resolver.resolve(environment, pool, instance)
    except ConfigError as e:
        console.print(f"[red]{EMOJI_ERROR} Configuration error:[/red] {e}")
        ctx.exit(EXIT_FAILURE)

    keys = resolver.source_keys(environment, pool, InstanceRole.from_string(instance))
    format_servers(targets, build_allowed, keys)
