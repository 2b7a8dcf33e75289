"""Content Deploy - deployment pipeline for CMS content packages.

Resolves target repository servers from configuration, validates a
package's declared content filters against an approved reference list,
then uploads and installs the package through each server's package
manager.
"""

from .__version__ import __version__, __version_info__, __author__, __license__

# Core API
from .api.deployer import Deployer, deploy

# Data models
from .models import (
    DeployConfig,
    DeploymentRequest,
    DeploymentTarget,
    PackageArtifact,
    RemotePackageLocation,
    DeployResult,
    TargetResult,
)

# Exceptions
from .api.exceptions import (
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

# Services
from .services import ConfigService, load_config

__all__ = [
    # Version information
    "__version__",
    "__version_info__",
    "__author__",
    "__license__",

    # Main classes
    "Deployer",
    "ConfigService",

    # Core API functions
    "deploy",
    "load_config",

    # Data models
    "DeployConfig",
    "DeploymentRequest",
    "DeploymentTarget",
    "PackageArtifact",
    "RemotePackageLocation",
    "DeployResult",
    "TargetResult",

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
