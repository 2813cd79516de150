import hashlib
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from change_plan_manager import config

logger = logging.getLogger(__name__)

WRITE_PROBE_NAME = ".write-test"


def app_instance_id(package_dir: str = config.PACKAGE_DIR) -> str:
    """Short stable id derived from the install location.

    Keeps separate installs from sharing one temp-dir plans file.
    """
    digest = hashlib.md5(package_dir.encode("utf-8"), usedforsecurity=False)
    return digest.hexdigest()[:8]


def candidate_storage_dirs(
    storage_path: Optional[str] = None,
) -> list[tuple[str, str]]:
    """Return ``(directory, description)`` pairs in order of preference.

    Args:
        storage_path: Explicit directory, normally the STORAGE_PATH setting.
            Skipped when empty.
    """
    storage_path = config.STORAGE_PATH if storage_path is None else storage_path
    dirs = [
        (storage_path, "environment variable STORAGE_PATH"),
        (
            os.path.join(tempfile.gettempdir(), config.APP_NAME, app_instance_id()),
            "system temporary directory",
        ),
        (os.path.join(config.PACKAGE_DIR, "storage"), "application directory"),
        (os.path.join(os.getcwd(), ".mcp-storage"), "current working directory"),
    ]
    return [(d, desc) for d, desc in dirs if d]


def is_writable_dir(directory: str) -> bool:
    """Create ``directory`` if needed and prove it is writable with a probe file."""
    try:
        path = Path(directory)
        path.mkdir(parents=True, exist_ok=True)
        probe = path / WRITE_PROBE_NAME
        probe.write_text("test", encoding="utf-8")
        probe.unlink()
        return True
    except OSError as e:
        logger.warning("Cannot use %s for storage: %s", directory, e)
        return False


def select_storage_file(
    storage_path: Optional[str] = None,
    file_name: str = config.STORAGE_FILE_NAME,
) -> Optional[str]:
    """Pick the plans file inside the first writable candidate directory.

    Returns:
        Optional[str]: The file path, or None when no location is writable;
        plans are then kept in memory only.
    """
    for directory, description in candidate_storage_dirs(storage_path):
        if is_writable_dir(directory):
            logger.info("Using %s for storage: %s", description, directory)
            return os.path.join(directory, file_name)

    logger.critical(
        "No valid storage location found. Plans will only be stored in memory!"
    )
    return None
