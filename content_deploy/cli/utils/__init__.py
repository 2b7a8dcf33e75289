"""CLI utility functions"""

from .output import (
    console,
    format_deploy_result,
    format_workspace_results,
    format_servers,
    format_validation,
)

__all__ = [
    'console',
    'format_deploy_result',
    'format_workspace_results',
    'format_servers',
    'format_validation',
]
