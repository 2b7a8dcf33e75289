"""Archive entry extraction for zip and jar packages"""

import logging
import shutil
import zipfile
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def extract_entry(archive_path: Path, entry_name: str, dest_dir: Path) -> Optional[Path]:
    """
    Extract a single named entry from a zip or jar archive

    Args:
        archive_path: Archive file
        entry_name: Entry path inside the archive (forward slashes)
        dest_dir: Directory to extract into; the entry's relative path is kept

    Returns:
        Path of the extracted file, or None if the archive has no such
        entry or cannot be read
    """
    try:
        with zipfile.ZipFile(archive_path) as archive:
            try:
                info = archive.getinfo(entry_name)
            except KeyError:
                logger.debug(f"{entry_name} not present in {archive_path}")
                return None

            target = Path(dest_dir).joinpath(*entry_name.split('/'))
            target.parent.mkdir(parents=True, exist_ok=True)

            with archive.open(info) as src, open(target, 'wb') as dst:
                shutil.copyfileobj(src, dst)

            return target

    except (zipfile.BadZipFile, OSError) as e:
        logger.warning(f"Cannot read {entry_name} from {archive_path}: {e}")
        return None


def read_entry_from_directory(package_dir: Path, entry_name: str) -> Optional[Path]:
    """
    Locate an entry inside an already exploded package directory

    Args:
        package_dir: Exploded package root
        entry_name: Entry path relative to the root

    Returns:
        Path to the file, or None if it does not exist
    """
    path = Path(package_dir).joinpath(*entry_name.split('/'))
    return path if path.is_file() else None
