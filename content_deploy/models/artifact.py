"""Package artifact data models"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Tuple, Any, Optional

from ..constants import ARCHIVE_EXTENSIONS, BYTES_PER_MB


class ArchiveKind(Enum):
    """Supported archive formats"""
    ZIP = "zip"
    JAR = "jar"

    @classmethod
    def from_path(cls, path: Path) -> Optional['ArchiveKind']:
        """Detect archive kind from file extension, None if unsupported"""
        kind = ARCHIVE_EXTENSIONS.get(Path(path).suffix.lower())
        return cls(kind) if kind else None


@dataclass(frozen=True)
class PackageArtifact:
    """A built content package selected for deployment"""

    path: Path
    logical_name: str
    kind: ArchiveKind
    size: int
    filter_roots: Tuple[str, ...] = field(default_factory=tuple)
    has_filter_declaration: bool = False

    @property
    def size_mb(self) -> int:
        """Size in whole megabytes, truncated"""
        return self.size // BYTES_PER_MB

    @property
    def file_name(self) -> str:
        return self.path.name

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "path": str(self.path),
            "logical_name": self.logical_name,
            "kind": self.kind.value,
            "size": self.size,
            "filter_roots": list(self.filter_roots),
            "has_filter_declaration": self.has_filter_declaration,
        }
