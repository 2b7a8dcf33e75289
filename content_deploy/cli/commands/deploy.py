"""Deploy command implementation"""

import json
import logging
from pathlib import Path

import click

from ..decorators import require_config, usage_option
from ..utils.output import console, format_deploy_result, format_workspace_results
from ...api import Deployer
from ...api.exceptions import NotFoundError
from ...constants import EXIT_SUCCESS, EXIT_FAILURE, EMOJI_ERROR
from ...models import DeploymentRequest

INSTANCE_CHOICE = click.Choice(['author', 'publish', 'both'], case_sensitive=False)


def _show_debug_trace() -> None:
    """Make the 'would install' trace visible in debug mode"""
    package_logger = logging.getLogger("content_deploy")
    if package_logger.getEffectiveLevel() > logging.INFO:
        package_logger.setLevel(logging.INFO)


@click.command(add_help_option=False)
@usage_option
@click.argument('package_path', type=click.Path(path_type=Path))
@click.argument('package_name')
@click.argument('group')
@click.argument('project')
@click.argument('environment')
@click.argument('instance', type=INSTANCE_CHOICE)
@click.argument('pool')
@click.option('--debug', is_flag=True,
              help='Skip filter validation and install calls; uploads still happen')
@click.option('--json', 'output_json', is_flag=True,
              help='Print the result as JSON instead of tables')
@click.pass_context
@require_config
def deploy(ctx, package_path, package_name, group, project, environment,
           instance, pool, debug, output_json, config):
    """Deploy a content package to repository servers

    PACKAGE_PATH is a package file or a directory; in a directory the most
    recently modified file starting with PACKAGE_NAME is deployed.

    The package's filter definition is checked against the approved list
    for GROUP/PROJECT, then the package is uploaded and installed on every
    server configured for ENVIRONMENT, INSTANCE (author, publish or both)
    and POOL, one server at a time. The first failure stops the run.

    Examples:

        # Deploy the newest mysite package to dev authors of pool kstl
        content-deploy deploy ./target mysite web mysite dev author kstl

        # Dry run against all dev servers
        content-deploy deploy ./target/mysite-1.0.zip mysite web mysite dev both kstl --debug

        # Machine-readable result
        content-deploy deploy ./target mysite web mysite dev author kstl --json
    """
    if debug:
        _show_debug_trace()

    request = DeploymentRequest(
        package_path=package_path,
        package_name=package_name,
        group=group,
        project=project,
        environment=environment,
        instance=instance,
        pool=pool,
        debug=debug
    )

    if not output_json:
        console.print(
            f"\n[cyan]Deploying {package_name} to {request.environment}/{request.pool} "
            f"({request.instance})...[/cyan]"
        )

    result = Deployer(config).deploy(request)
    if output_json:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        format_deploy_result(result)

    ctx.exit(result.exit_code)


@click.command(name='deploy-workspace', add_help_option=False)
@usage_option
@click.argument('workspace', type=click.Path(path_type=Path))
@click.argument('group')
@click.argument('project')
@click.argument('environment')
@click.argument('instance', type=INSTANCE_CHOICE)
@click.argument('pool')
@click.option('--debug', is_flag=True,
              help='Skip filter validation and install calls; uploads still happen')
@click.pass_context
@require_config
def deploy_workspace(ctx, workspace, group, project, environment, instance, pool, debug, config):
    """Deploy every .zip package found in WORKSPACE

    Each package is deployed with its file name (without extension) as the
    package name. Processing stops at the first package that fails.

    Example:

        content-deploy deploy-workspace ./packages web mysite dev both kstl
    """
    if debug:
        _show_debug_trace()

    deployer = Deployer(config)

    try:
        results = deployer.deploy_workspace(
            workspace,
            group=group,
            project=project,
            environment=environment,
            instance=instance,
            pool=pool,
            debug=debug
        )
    except NotFoundError as e:
        console.print(f"[red]{EMOJI_ERROR} Error:[/red] {e}")
        ctx.exit(EXIT_FAILURE)

    failed = [result for result in results if not result.is_success]
    if failed:
        format_deploy_result(failed[-1])
    format_workspace_results(results)

    if failed:
        ctx.exit(EXIT_FAILURE)

    console.print("\n[green]All packages in workspace processed.[/green]")
    ctx.exit(EXIT_SUCCESS)
