# content_deploy/cli/commands/__init__.py
"""CLI commands"""

from . import deploy
from . import check_filter
from . import servers

__all__ = [
    "deploy",
    "check_filter",
    "servers",
]
