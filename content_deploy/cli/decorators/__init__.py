# content_deploy/cli/decorators/__init__.py
"""CLI decorators"""

from .config import require_config, usage_option

__all__ = [
    'require_config',
    'usage_option',
]
