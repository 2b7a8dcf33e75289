# content_deploy/cli/main.py
"""Main CLI entry point for content-deploy"""

import sys
import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler

from ..constants import (
    APP_NAME,
    LOG_FORMAT,
    ENV_SERVER_CONFIG,
    EXIT_FAILURE,
    EXIT_INTERRUPTED,
)
from ..models import DeployConfig
from ..services import ConfigService

# Import all commands
from .commands import deploy, check_filter, servers
from .decorators import usage_option

console = Console()


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Setup logging configuration

    Args:
        verbose: Enable verbose output (INFO level)
        debug: Enable debug output (DEBUG level)
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            RichHandler(
                console=console,
                show_time=debug,
                show_path=debug,
                rich_tracebacks=True,
                tracebacks_suppress=[click]
            )
        ]
    )

    # Adjust third-party loggers
    logging.getLogger("urllib3").setLevel(logging.WARNING)


class Context:
    """CLI context object with lazy configuration loading

    The configuration file is only read when a command asks for it, so
    `--help` and commands that work without configuration never touch it.
    """

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path
        self.verbose: bool = False
        self.debug: bool = False
        self._service: Optional[ConfigService] = None

    @property
    def service(self) -> ConfigService:
        if self._service is None:
            self._service = ConfigService(self.config_path)
        return self._service

    def config_exists(self) -> bool:
        """Whether the resolved configuration file is present"""
        return self.service.config_path.is_file()

    def load_config(self) -> DeployConfig:
        """Load configuration (cached after the first call)

        Raises:
            ConfigError: If the configuration is missing or invalid
        """
        return self.service.config


@click.group(name=APP_NAME, add_help_option=False)
@usage_option
@click.option('-c', '--config', 'config_path', type=click.Path(path_type=Path),
              envvar=ENV_SERVER_CONFIG,
              help='Server configuration file (default: config/server.properties)')
@click.option('-v', '--verbose', is_flag=True, help='Enable verbose output')
@click.option('-d', '--debug-log', 'debug_log', is_flag=True, help='Enable debug logging')
@click.option('-q', '--quiet', is_flag=True, help='Suppress all output except errors')
@click.pass_context
def cli(ctx, config_path, verbose, debug_log, quiet):
    """Content Deploy - Deploy CMS content packages to repository servers

    Locates a content package, checks its declared filter roots against
    the approved list for its group and project, then uploads and installs
    it on every author and/or publish server configured for an
    environment and pool.
    """
    if quiet:
        logging.disable(logging.CRITICAL)
    else:
        setup_logging(verbose=verbose, debug=debug_log)

    ctx.obj = Context(config_path)
    ctx.obj.verbose = verbose
    ctx.obj.debug = debug_log


# Register commands
cli.add_command(deploy.deploy)
cli.add_command(deploy.deploy_workspace)
cli.add_command(check_filter.check_filter)
cli.add_command(servers.servers)


def main():
    """Main entry point for the CLI application

    This function handles:
    - Keyboard interrupts
    - Unexpected exceptions with proper error display
    """
    try:
        cli(prog_name=APP_NAME)

    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(EXIT_INTERRUPTED)

    except Exception as e:
        console.print(f"[red]Unexpected error: {e}[/red]")
        if '--debug-log' in sys.argv or '-d' in sys.argv:
            console.print_exception()
        sys.exit(EXIT_FAILURE)


if __name__ == "__main__":
    main()
