# content_deploy/core/package_discovery.py
"""Locate an uploaded package in a target's package listing"""

import logging
import re
import xml.etree.ElementTree as ET
from typing import Dict, Optional, Union

from ..constants import (
    ARCHIVE_EXTENSIONS,
    LISTING_WINDOW,
    STRATEGY_STRUCTURED,
    STRATEGY_WINDOW,
    STRATEGY_FALLBACK,
)
from ..models.target import DeploymentTarget, RemotePackageLocation

logger = logging.getLogger(__name__)

ARCHIVE_SUFFIXES = tuple(ARCHIVE_EXTENSIONS)

GROUP_PATTERN = re.compile(r'<group>([^<]*)</group>')
VERSION_PATTERN = re.compile(r'<version>([^<]*)</version>')


def _local_name(tag: str) -> str:
    return tag.rsplit('}', 1)[-1]


def _child_text(element: ET.Element, name: str) -> Optional[str]:
    for child in element:
        if _local_name(child.tag) == name:
            text = (child.text or '').strip()
            return text or None
    return None


def parse_listing(listing: Union[str, bytes], name: str) -> Optional[Dict[str, Optional[str]]]:
    """
    Find a package in an XML listing

    Args:
        listing: Listing document, raw bytes or text
        name: Logical package name

    Returns:
        {'group': ..., 'version': ...} for the first matching package, or None

    Raises:
        ET.ParseError: If the listing is not well-formed XML
    """
    root = ET.fromstring(listing)

    for element in root.iter():
        if _local_name(element.tag) != 'package':
            continue
        if _child_text(element, 'name') == name:
            return {
                'group': _child_text(element, 'group'),
                'version': _child_text(element, 'version'),
            }

    return None


def scan_listing(listing: str,
                 name: str,
                 package_base_path: str,
                 window: int = LISTING_WINDOW) -> Optional[Dict[str, Optional[str]]]:
    """
    Proximity search for a package in a listing that is not well-formed XML

    The group is the last `<group>` within `window` lines before the
    matching `<name>` line (a `<package_base_path>/...` path token is used
    when there is none); the version is the first `<version>` within
    `window` lines after it. Densely packed listings can mis-associate
    fields.

    Returns:
        {'group': ..., 'version': ..., 'path': ...} or None if the name is absent
    """
    lines = listing.splitlines()
    needle = f"<name>{name}</name>"

    for index, line in enumerate(lines):
        if needle in line:
            break
    else:
        return None

    before = "\n".join(lines[max(0, index - window):index + 1])
    after = "\n".join(lines[index:index + window + 1])

    group = None
    path = None
    groups = GROUP_PATTERN.findall(before)
    if groups and groups[-1].strip():
        group = groups[-1].strip()
    else:
        path_pattern = re.compile(re.escape(package_base_path) + r'/[^<\s]+')
        path_match = path_pattern.search(before)
        if path_match:
            path = path_match.group(0).rstrip('/')
            if path.lower().endswith(ARCHIVE_SUFFIXES):
                path = path.rsplit('/', 1)[0]
            path += '/'

    version = None
    version_match = VERSION_PATTERN.search(after)
    if version_match and version_match.group(1).strip():
        version = version_match.group(1).strip()

    return {'group': group, 'version': version, 'path': path}


class PackageDiscovery:
    """Discover remote group, version and install path of a package"""

    def __init__(self, client, package_base_path: str, window: int = LISTING_WINDOW):
        """
        Initialize discovery

        Args:
            client: PackageManagerClient used for listing calls
            package_base_path: Repository base path of packages (e.g. /etc/packages)
            window: Lines searched around a name in non-XML listings
        """
        self.client = client
        self.package_base_path = package_base_path.rstrip('/')
        self.window = window

    def group_path(self, group: str) -> str:
        return f"{self.package_base_path}/{group.strip('/')}/"

    def fallback_location(self, name: str, requested_group: str) -> RemotePackageLocation:
        """Best-guess location built from the requested group alone"""
        return RemotePackageLocation(
            name=name,
            install_path=self.group_path(requested_group),
            group=requested_group,
            found=False,
            strategy=STRATEGY_FALLBACK,
        )

    def locate_in_listing(self,
                          listing: Union[str, bytes],
                          name: str,
                          requested_group: str) -> Optional[RemotePackageLocation]:
        """
        Find a package in listing text

        Args:
            listing: Listing document
            name: Logical package name
            requested_group: Group from the deployment request, used when
                the listing has none for the package

        Returns:
            RemotePackageLocation or None if the package is not listed
        """
        try:
            fields = parse_listing(listing, name)
            strategy = STRATEGY_STRUCTURED
        except ET.ParseError as e:
            logger.debug(f"Listing is not well-formed XML ({e}), using proximity search")
            if isinstance(listing, bytes):
                listing = listing.decode('utf-8', errors='replace')
            fields = scan_listing(listing, name, self.package_base_path, self.window)
            strategy = STRATEGY_WINDOW

        if fields is None:
            return None

        group = fields.get('group')
        if group:
            install_path = self.group_path(group)
        elif fields.get('path'):
            install_path = fields['path']
        else:
            install_path = self.group_path(requested_group)

        return RemotePackageLocation(
            name=name,
            install_path=install_path,
            group=group,
            version=fields.get('version'),
            found=True,
            strategy=strategy,
        )

    def discover(self,
                 target: DeploymentTarget,
                 name: str,
                 requested_group: str) -> Optional[RemotePackageLocation]:
        """
        Query a target's listing for a package

        Returns:
            RemotePackageLocation or None if the package is not listed

        Raises:
            RemoteDiscoveryAmbiguous: If the listing cannot be retrieved
        """
        listing = self.client.list_packages(target)
        location = self.locate_in_listing(listing, name, requested_group)

        if location is not None:
            logger.info(
                f"Found {name} on {target} at {location.package_path} ({location.strategy})"
            )
        return location
