"""Operation result models"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Any

from ..constants import EXIT_SUCCESS, EXIT_FAILURE
from .artifact import PackageArtifact
from .target import DeploymentTarget, RemotePackageLocation


class OperationStatus(Enum):
    """Operation status"""
    SUCCESS = "success"
    FAILED = "failed"
    PARTIAL = "partial"
    SKIPPED = "skipped"
    IN_PROGRESS = "in_progress"


@dataclass
class ErrorDetail:
    """Detailed error information"""

    code: str
    message: str
    kind: str = "ContentDeployError"
    context: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "code": self.code,
            "message": self.message,
            "kind": self.kind,
            "context": self.context,
            "timestamp": self.timestamp.isoformat()
        }


@dataclass
class Result:
    """Base result class"""

    status: OperationStatus
    message: str = ""
    errors: List[ErrorDetail] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    start_time: datetime = field(default_factory=datetime.now)
    end_time: Optional[datetime] = None

    @property
    def is_success(self) -> bool:
        """Check if operation was successful"""
        return self.status == OperationStatus.SUCCESS

    @property
    def duration(self) -> Optional[float]:
        """Get operation duration in seconds"""
        if self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return None

    @property
    def error(self) -> Optional[ErrorDetail]:
        """First recorded error"""
        return self.errors[0] if self.errors else None

    def add_error(self, code: str, message: str, kind: str = "ContentDeployError", **context) -> None:
        """Add an error"""
        self.errors.append(ErrorDetail(code=code, message=message, kind=kind, context=context))

    def add_warning(self, message: str) -> None:
        """Add a warning"""
        self.warnings.append(message)

    def complete(self, status: Optional[OperationStatus] = None) -> None:
        """Mark operation as complete"""
        self.end_time = datetime.now()
        if status:
            self.status = status


@dataclass
class TargetResult:
    """Result for a single deployment target"""

    target: DeploymentTarget
    status: OperationStatus = OperationStatus.IN_PROGRESS
    uploaded: bool = False
    installed: bool = False
    location: Optional[RemotePackageLocation] = None
    install_url: Optional[str] = None
    message: str = ""
    error: Optional[ErrorDetail] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data = {
            "target": self.target.to_dict(),
            "status": self.status.value,
            "uploaded": self.uploaded,
            "installed": self.installed,
            "message": self.message,
        }

        if self.location:
            data["location"] = self.location.to_dict()
        if self.install_url:
            data["install_url"] = self.install_url
        if self.error:
            data["error"] = self.error.to_dict()

        return data


@dataclass
class DeployResult(Result):
    """Result of a deployment run"""

    package_name: Optional[str] = None
    environment: Optional[str] = None
    instance: Optional[str] = None
    pool: Optional[str] = None
    debug: bool = False
    artifact: Optional[PackageArtifact] = None
    targets: List[DeploymentTarget] = field(default_factory=list)
    target_results: List[TargetResult] = field(default_factory=list)

    @property
    def completed_targets(self) -> List[TargetResult]:
        """Targets that finished, including debug runs with install skipped"""
        return [
            r for r in self.target_results
            if r.status in (OperationStatus.SUCCESS, OperationStatus.SKIPPED)
        ]

    @property
    def failed_target(self) -> Optional[TargetResult]:
        """The target that aborted the run, if any"""
        for target_result in self.target_results:
            if target_result.status == OperationStatus.FAILED:
                return target_result
        return None

    @property
    def is_filter_mismatch(self) -> bool:
        return bool(self.error and self.error.kind == "FilterMismatchError")

    @property
    def exit_code(self) -> int:
        """Process exit status for this result"""
        return EXIT_SUCCESS if self.is_success else EXIT_FAILURE

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "status": self.status.value,
            "message": self.message,
            "package_name": self.package_name,
            "environment": self.environment,
            "instance": self.instance,
            "pool": self.pool,
            "debug": self.debug,
            "artifact": self.artifact.to_dict() if self.artifact else None,
            "targets": [t.to_dict() for t in self.targets],
            "target_results": [r.to_dict() for r in self.target_results],
            "errors": [e.to_dict() for e in self.errors],
            "warnings": self.warnings,
            "duration": self.duration
        }
