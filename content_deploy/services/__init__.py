"""Service layer for content-deploy"""

from .config_service import ConfigService, load_config, parse_properties
from .package_manager_client import PackageManagerClient, is_install_success

__all__ = [
    "ConfigService",
    "load_config",
    "parse_properties",
    "PackageManagerClient",
    "is_install_success",
]
