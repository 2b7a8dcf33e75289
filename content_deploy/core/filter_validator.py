# content_deploy/core/filter_validator.py
"""Filter validation against approved reference lists"""

import logging
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence, Tuple, Union

from ..constants import REFERENCE_FILTER_FILE, VAULT_FILTER_ENTRY
from ..models.artifact import PackageArtifact
from ..utils.archive_utils import extract_entry, read_entry_from_directory
from .package_locator import parse_filter_roots

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Validation result container"""
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    info: List[str] = field(default_factory=list)
    unmatched: List[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        """Add error message"""
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str) -> None:
        """Add warning message"""
        self.warnings.append(message)

    def add_info(self, message: str) -> None:
        """Add info message"""
        self.info.append(message)

    def __str__(self) -> str:
        """String representation"""
        lines = []

        if self.errors:
            lines.append("Errors:")
            for error in self.errors:
                lines.append(f"  ✗ {error}")

        if self.warnings:
            lines.append("Warnings:")
            for warning in self.warnings:
                lines.append(f"  ⚠ {warning}")

        if self.info:
            lines.append("Info:")
            for info in self.info:
                lines.append(f"  {info}")

        if self.is_valid and not self.errors and not self.warnings:
            lines.append("✓ All validations passed")

        return '\n'.join(lines)


@dataclass(frozen=True)
class ReferenceFilterSet:
    """Approved filter roots for one group/project"""

    group: str
    project: str
    lines: Tuple[str, ...]
    path: Path

    @classmethod
    def load(cls, path: Path, group: str, project: str) -> 'ReferenceFilterSet':
        """
        Load a reference list, one path prefix per line

        Blank lines are dropped.

        Raises:
            OSError: If the file is missing or unreadable
            UnicodeDecodeError: If the file is not valid UTF-8
        """
        with open(path, 'r', encoding='utf-8') as f:
            lines = tuple(line.strip() for line in f if line.strip())
        return cls(group=group, project=project, lines=lines, path=Path(path))


def matching_line(root: str, reference_lines: Sequence[str]):
    """First non-empty reference line contained in a declared root, else None"""
    for line in reference_lines:
        if line and line in root:
            return line
    return None


def unmatched_roots(declared_roots: Sequence[str],
                    reference: Union[ReferenceFilterSet, Sequence[str]]) -> List[str]:
    """Declared roots that contain none of the reference lines"""
    lines = reference.lines if isinstance(reference, ReferenceFilterSet) else reference
    return [root for root in declared_roots if matching_line(root, lines) is None]


def validate(declared_roots: Sequence[str],
             reference: Union[ReferenceFilterSet, Sequence[str]]) -> bool:
    """
    Check declared filter roots against a reference list

    A root matches when it contains at least one non-empty reference line
    as a substring (the root is the haystack). The package is valid when
    every root matches. An empty declaration is valid.

    Args:
        declared_roots: Filter roots declared by the package
        reference: Reference filter set or its lines

    Returns:
        True if every declared root matches
    """
    return not unmatched_roots(declared_roots, reference)


class FilterValidator:
    """Gate that keeps packages within their approved content scope"""

    def __init__(self, reference_root: Path):
        """
        Initialize validator

        Args:
            reference_root: Directory holding `<group>/<project>/filter.txt`
        """
        self.reference_root = Path(reference_root)

    def reference_path(self, group: str, project: str) -> Path:
        """Location of the reference list for a group/project"""
        return self.reference_root / group / project / REFERENCE_FILTER_FILE

    def load_reference(self, group: str, project: str) -> ReferenceFilterSet:
        """Load the reference list for a group/project"""
        return ReferenceFilterSet.load(self.reference_path(group, project), group, project)

    def validate_roots(self,
                       declared_roots: Sequence[str],
                       group: str,
                       project: str) -> ValidationResult:
        """
        Validate declared roots against the group/project reference list

        A missing or unreadable reference list fails validation.
        """
        result = ValidationResult()
        path = self.reference_path(group, project)

        try:
            reference = self.load_reference(group, project)
        except (OSError, UnicodeDecodeError) as e:
            result.add_error(f"Reference filter list {path} unavailable: {e}")
            return result

        if not declared_roots:
            result.add_info("Package declares no filter roots")

        for root in declared_roots:
            line = matching_line(root, reference.lines)
            if line is None:
                result.unmatched.append(root)
                result.add_error(f"Filter root '{root}' not approved in {path}")
            else:
                result.add_info(f"✓ {root} (matches '{line}')")

        return result

    def validate_package(self,
                         artifact: PackageArtifact,
                         group: str,
                         project: str) -> ValidationResult:
        """
        Validate a located package

        A package without a readable filter definition fails validation.
        """
        if not artifact.has_filter_declaration:
            result = ValidationResult()
            result.add_error(
                f"No readable {VAULT_FILTER_ENTRY} in {artifact.path}"
            )
            return result

        return self.validate_roots(artifact.filter_roots, group, project)

    def check(self, package: Union[str, Path], group: str, project: str) -> ValidationResult:
        """
        Validate a package archive or an exploded package directory

        Args:
            package: Archive file or directory containing META-INF/vault
            group: Package group
            project: Project name

        Returns:
            ValidationResult
        """
        package = Path(package)

        if package.is_dir():
            return self._check_filter_file(
                read_entry_from_directory(package, VAULT_FILTER_ENTRY), package, group, project
            )

        with tempfile.TemporaryDirectory() as temp_dir:
            filter_file = extract_entry(package, VAULT_FILTER_ENTRY, Path(temp_dir))
            return self._check_filter_file(filter_file, package, group, project)

    def _check_filter_file(self, filter_file, package: Path, group: str, project: str) -> ValidationResult:
        roots = parse_filter_roots(filter_file) if filter_file is not None else None

        if roots is None:
            result = ValidationResult()
            result.add_error(f"No readable {VAULT_FILTER_ENTRY} in {package}")
            return result

        return self.validate_roots(roots, group, project)
