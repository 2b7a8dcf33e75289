"""Utility functions for content-deploy"""

from .file_utils import (
    get_file_size,
    size_in_mb,
    format_size,
    find_files_by_prefix,
    newest_file,
    exploded_workspace,
)

from .archive_utils import (
    extract_entry,
    read_entry_from_directory,
)

__all__ = [
    # File utilities
    "get_file_size",
    "size_in_mb",
    "format_size",
    "find_files_by_prefix",
    "newest_file",
    "exploded_workspace",

    # Archive utilities
    "extract_entry",
    "read_entry_from_directory",
]
