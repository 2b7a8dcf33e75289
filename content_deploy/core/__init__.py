"""Core functionality for content-deploy"""

from .config_resolver import ConfigResolver, parse_build_flag
from .package_locator import PackageLocator, parse_package_name, parse_filter_roots
from .filter_validator import (
    FilterValidator,
    ReferenceFilterSet,
    ValidationResult,
    validate,
    unmatched_roots,
)
from .package_discovery import PackageDiscovery, parse_listing, scan_listing

__all__ = [
    "ConfigResolver",
    "parse_build_flag",
    "PackageLocator",
    "parse_package_name",
    "parse_filter_roots",
    "FilterValidator",
    "ReferenceFilterSet",
    "ValidationResult",
    "validate",
    "unmatched_roots",
    "PackageDiscovery",
    "parse_listing",
    "scan_listing",
]
