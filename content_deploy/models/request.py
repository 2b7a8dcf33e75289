"""Deployment request model"""

from dataclasses import dataclass
from pathlib import Path


@dataclass
class DeploymentRequest:
    """One unit of deployment work

    Environment, instance and pool are matched case-insensitively against
    configuration keys, so they are normalized to lowercase.
    """

    package_path: Path
    package_name: str
    group: str
    project: str
    environment: str
    instance: str
    pool: str
    debug: bool = False

    def __post_init__(self):
        if isinstance(self.package_path, str):
            self.package_path = Path(self.package_path)

        self.environment = self.environment.strip().lower()
        self.instance = self.instance.strip().lower()
        self.pool = self.pool.strip().lower()
