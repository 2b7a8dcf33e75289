# content_deploy/utils/file_utils.py
"""File operation utilities"""

import logging
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

from ..constants import BYTES_PER_MB

logger = logging.getLogger(__name__)


def get_file_size(file_path: Path) -> int:
    """
    Get file size in bytes

    Args:
        file_path: Path to file

    Returns:
        Size in bytes
    """
    return file_path.stat().st_size


def size_in_mb(size: int) -> int:
    """Size in whole megabytes, truncating"""
    return size // BYTES_PER_MB


def format_size(size: int) -> str:
    """
    Format file size in human-readable format

    Args:
        size: Size in bytes

    Returns:
        Formatted size string
    """
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0
    return f"{size:.2f} PB"


def find_files_by_prefix(directory: Path, prefix: str) -> List[Path]:
    """
    Find regular files whose name starts with a prefix

    Args:
        directory: Directory to search (not recursive)
        prefix: File name prefix

    Returns:
        Matching files in directory listing order
    """
    return [
        path for path in directory.iterdir()
        if path.is_file() and path.name.startswith(prefix)
    ]


def newest_file(files: List[Path]) -> Optional[Path]:
    """
    Pick the most recently modified file

    The sort is stable, so files with equal modification times keep
    their listing order.

    Args:
        files: Candidate files

    Returns:
        Newest file or None if there are no candidates
    """
    if not files:
        return None
    return sorted(files, key=lambda p: p.stat().st_mtime, reverse=True)[0]


@contextmanager
def exploded_workspace(root: Path, group: str, project: str) -> Iterator[Path]:
    """
    Temporary extraction directory owned by one deployment run

    Created under `<root>/<group>/<project>` and removed on exit,
    whether the run succeeds or fails.

    Args:
        root: Explode root directory
        group: Package group
        project: Project name

    Yields:
        Path to the temporary directory
    """
    parent = Path(root) / group / project
    parent.mkdir(parents=True, exist_ok=True)

    with tempfile.TemporaryDirectory(prefix="explode-", dir=parent) as temp_dir:
        logger.debug(f"Exploded workspace: {temp_dir}")
        yield Path(temp_dir)
