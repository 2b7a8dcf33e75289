"""Deployment target data models"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Dict, Any


class InstanceRole(Enum):
    """Repository server roles"""
    AUTHOR = "author"
    PUBLISH = "publish"
    BOTH = "both"

    @classmethod
    def from_string(cls, value: str) -> 'InstanceRole':
        """Create InstanceRole from string

        Raises:
            ValueError: If the value is not a known role
        """
        return cls(value.strip().lower())


@dataclass(frozen=True)
class DeploymentTarget:
    """A package manager endpoint on one repository server"""

    host: str
    port: int
    role: InstanceRole

    @property
    def base_url(self) -> str:
        """Get the HTTP base URL of the target"""
        return f"http://{self.host}:{self.port}"

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "host": self.host,
            "port": self.port,
            "role": self.role.value,
        }


@dataclass(frozen=True)
class RemotePackageLocation:
    """Where a logical package lives in a target's package manager"""

    name: str
    install_path: str
    group: Optional[str] = None
    version: Optional[str] = None
    found: bool = True
    strategy: str = "structured"

    @property
    def filename(self) -> str:
        """Installable file name, versioned when the version is known"""
        if self.version:
            return f"{self.name}-{self.version}.zip"
        return f"{self.name}.zip"

    @property
    def package_path(self) -> str:
        """Full repository path of the package file"""
        return f"{self.install_path}{self.filename}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "name": self.name,
            "group": self.group,
            "version": self.version,
            "install_path": self.install_path,
            "package_path": self.package_path,
            "found": self.found,
            "strategy": self.strategy,
        }
