"""Check-filter command implementation"""

from pathlib import Path

import click

from ..decorators import usage_option
from ..utils.output import format_validation
from ...constants import EXIT_SUCCESS, EXIT_FAILURE, DEFAULT_REFERENCE_ROOT
from ...core import FilterValidator


@click.command(name='check-filter', add_help_option=False)
@usage_option
@click.argument('package', type=click.Path(exists=True, path_type=Path))
@click.argument('group')
@click.argument('project')
@click.option('--reference-root', type=click.Path(path_type=Path),
              help='Directory holding GROUP/PROJECT/filter.txt '
                   '(default: REFERENCE_FILTER_ROOT from the configuration)')
@click.pass_context
def check_filter(ctx, package, group, project, reference_root):
    """Check a package's filter roots against the approved list

    PACKAGE is a package archive or an exploded package directory
    containing META-INF/vault/filter.xml. Prints 1 and exits 0 when every
    declared filter root is approved, prints 0 and exits 1 otherwise.
    """
    if reference_root is None:
        if ctx.obj.config_exists():
            reference_root = ctx.obj.load_config().reference_root
        else:
            reference_root = Path(DEFAULT_REFERENCE_ROOT)

    result = FilterValidator(reference_root).check(package, group, project)

    if ctx.obj.verbose or not result.is_valid:
        format_validation(result)

    click.echo("1" if result.is_valid else "0")
    ctx.exit(EXIT_SUCCESS if result.is_valid else EXIT_FAILURE)
