# content_deploy/models/__init__.py
"""Data models for content-deploy"""

from .artifact import ArchiveKind, PackageArtifact
from .target import InstanceRole, DeploymentTarget, RemotePackageLocation
from .request import DeploymentRequest
from .config import DeployConfig, Credentials, ServerEntry
from .result import OperationStatus, ErrorDetail, Result, TargetResult, DeployResult

__all__ = [
    # Artifact models
    "ArchiveKind",
    "PackageArtifact",

    # Target models
    "InstanceRole",
    "DeploymentTarget",
    "RemotePackageLocation",

    # Request
    "DeploymentRequest",

    # Config models
    "DeployConfig",
    "Credentials",
    "ServerEntry",

    # Result models
    "OperationStatus",
    "ErrorDetail",
    "Result",
    "TargetResult",
    "DeployResult",
]
