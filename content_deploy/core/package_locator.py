# content_deploy/core/package_locator.py
"""Locate a package archive and read its vault metadata"""

import logging
import re
import tempfile
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Optional, Tuple, Union

from ..api.exceptions import NotFoundError, UnsupportedTypeError, SizeExceededError
from ..constants import VAULT_PROPERTIES_ENTRY, VAULT_FILTER_ENTRY
from ..models.artifact import ArchiveKind, PackageArtifact
from ..utils.archive_utils import extract_entry
from ..utils.file_utils import (
    get_file_size,
    size_in_mb,
    format_size,
    find_files_by_prefix,
    newest_file,
)

logger = logging.getLogger(__name__)

NAME_ELEMENT_PATTERN = re.compile(r'<name>\s*([^<]*?)\s*</name>')
NAME_ENTRY_PATTERN = re.compile(r'<entry\s+key="name"\s*>\s*([^<]*?)\s*</entry>')


def _local_name(tag: str) -> str:
    return tag.rsplit('}', 1)[-1]


def parse_package_name(properties_file: Path) -> Optional[str]:
    """
    Read the package name from a vault properties file

    Understands both `<entry key="name">` and a plain `<name>` element.
    Malformed XML is scanned line by line instead.

    Args:
        properties_file: Extracted properties.xml

    Returns:
        Package name or None if it cannot be found
    """
    try:
        root = ET.parse(properties_file).getroot()
    except ET.ParseError:
        logger.debug(f"Malformed {properties_file}, scanning for <name>")
        return _scan_package_name(properties_file)
    except OSError:
        return None

    for element in root.iter():
        tag = _local_name(element.tag)
        if tag == 'entry' and element.get('key') == 'name' and (element.text or '').strip():
            return element.text.strip()
        if tag == 'name' and (element.text or '').strip():
            return element.text.strip()

    return None


def _scan_package_name(properties_file: Path) -> Optional[str]:
    try:
        content = properties_file.read_text(encoding='utf-8', errors='replace')
    except OSError:
        return None

    for line in content.splitlines():
        match = NAME_ELEMENT_PATTERN.search(line) or NAME_ENTRY_PATTERN.search(line)
        if match and match.group(1):
            return match.group(1)
    return None


def parse_filter_roots(filter_file: Path) -> Optional[List[str]]:
    """
    Read declared filter roots from a vault filter definition

    Args:
        filter_file: Extracted filter.xml

    Returns:
        `root` attributes of all `filter` elements in document order,
        or None if the file cannot be parsed
    """
    try:
        root = ET.parse(filter_file).getroot()
    except (ET.ParseError, OSError) as e:
        logger.warning(f"Cannot parse filter definition {filter_file}: {e}")
        return None

    return [
        element.get('root')
        for element in root.iter()
        if _local_name(element.tag) == 'filter' and element.get('root') is not None
    ]


class PackageLocator:
    """Select the package archive to deploy and describe it"""

    def __init__(self, max_package_size: Optional[int] = None):
        """
        Initialize locator

        Args:
            max_package_size: Maximum package size in MB, None disables the check
        """
        self.max_package_size = max_package_size

    def select(self, path: Union[str, Path], name_prefix: str) -> Path:
        """
        Select the package file

        Args:
            path: Package file, or directory to search
            name_prefix: File name prefix to match in a directory

        Returns:
            Newest matching file

        Raises:
            NotFoundError: If nothing matches
        """
        path = Path(path)

        if path.is_file():
            return path

        if not path.is_dir():
            raise NotFoundError(f"Package path '{path}' does not exist", str(path))

        selected = newest_file(find_files_by_prefix(path, name_prefix))
        if selected is None:
            raise NotFoundError(
                f"No file matching '{name_prefix}*' found in {path}", str(path)
            )
        return selected

    def check_size(self, path: Path) -> int:
        """
        Enforce the maximum package size

        The size in whole MB must be strictly below the maximum.

        Returns:
            Size in bytes

        Raises:
            SizeExceededError: If the package is too large
        """
        size = get_file_size(path)

        if self.max_package_size is None:
            logger.debug("max_package_size not configured, skipping size check")
            return size

        size_mb = size_in_mb(size)
        if size_mb >= self.max_package_size:
            raise SizeExceededError(str(path), size_mb, self.max_package_size)

        logger.info(f"Package size {size_mb}MB within limit {self.max_package_size}MB")
        return size

    def locate(self,
               path: Union[str, Path],
               name_prefix: str,
               workspace: Optional[Path] = None) -> PackageArtifact:
        """
        Locate a package and read its metadata

        Args:
            path: Package file, or directory containing packages
            name_prefix: Package file name prefix
            workspace: Directory for extracted metadata; a temporary one is
                used and removed if omitted

        Returns:
            PackageArtifact

        Raises:
            NotFoundError: If no package matches
            UnsupportedTypeError: If the package is not a zip or jar
            SizeExceededError: If the package is too large
        """
        if workspace is None:
            with tempfile.TemporaryDirectory() as temp_dir:
                return self.locate(path, name_prefix, Path(temp_dir))

        package_file = self.select(path, name_prefix)
        logger.info(f"Selected package: {package_file}")

        kind = ArchiveKind.from_path(package_file)
        if kind is None:
            raise UnsupportedTypeError(str(package_file))
        logger.info(f"{kind.value.capitalize()} file detected")

        size = self.check_size(package_file)

        logical_name, roots, has_declaration = self.read_metadata(
            package_file, name_prefix, workspace
        )

        artifact = PackageArtifact(
            path=package_file,
            logical_name=logical_name,
            kind=kind,
            size=size,
            filter_roots=tuple(roots),
            has_filter_declaration=has_declaration,
        )
        logger.info(
            f"Package property name: {artifact.logical_name} ({format_size(artifact.size)})"
        )
        return artifact

    def read_metadata(self,
                      package_file: Path,
                      name_prefix: str,
                      workspace: Path) -> Tuple[str, List[str], bool]:
        """
        Extract logical name and filter roots from the archive

        Never fails: a missing name falls back to the prefix, a missing or
        unparseable filter definition yields no roots.

        Returns:
            (logical_name, filter_roots, has_filter_declaration)
        """
        logical_name = None
        properties_file = extract_entry(package_file, VAULT_PROPERTIES_ENTRY, workspace)
        if properties_file is not None:
            logical_name = parse_package_name(properties_file)
        if not logical_name:
            logger.debug(f"No package name in metadata, using '{name_prefix}'")
            logical_name = name_prefix

        roots = None
        filter_file = extract_entry(package_file, VAULT_FILTER_ENTRY, workspace)
        if filter_file is not None:
            roots = parse_filter_roots(filter_file)
        else:
            logger.warning(f"{VAULT_FILTER_ENTRY} not found in {package_file}")

        if roots is None:
            return logical_name, [], False
        return logical_name, roots, True
