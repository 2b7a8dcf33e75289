# content_deploy/api/__init__.py
"""API layer for content-deploy"""

from .exceptions import (
    ContentDeployError,
    ConfigError,
    PackageError,
    NotFoundError,
    UnsupportedTypeError,
    SizeExceededError,
    FilterMismatchError,
    RemoteDiscoveryAmbiguous,
    TargetError,
    UploadFailure,
    InstallFailure,
)
from .deployer import Deployer, deploy

__all__ = [
    # Main classes
    "Deployer",

    # Convenience functions
    "deploy",

    # Exceptions
    "ContentDeployError",
    "ConfigError",
    "PackageError",
    "NotFoundError",
    "UnsupportedTypeError",
    "SizeExceededError",
    "FilterMismatchError",
    "RemoteDiscoveryAmbiguous",
    "TargetError",
    "UploadFailure",
    "InstallFailure",
]
