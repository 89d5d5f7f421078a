import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def make_storage_dir(parent: Optional[Path] = None) -> Path:
    """Create the shared temp directory every downloaded file lands in."""
    path = Path(tempfile.mkdtemp(prefix="temp-dir-", dir=str(parent) if parent else None))
    logger.info("Storage directory %s", path)
    return path


def create_destination(storage_dir: Path, task_number: str, extension: str) -> Path:
    """
    Create an empty file with a unique name, e.g. file-task-2-k3j9x1ab.pdf.

    mkstemp opens with O_EXCL, so two requests can never get the same name.
    """
    fd, name = tempfile.mkstemp(
        prefix=f"file-task-{task_number}-",
        suffix=extension,
        dir=str(storage_dir),
    )
    os.close(fd)
    return Path(name)


def remove_storage_dir(path: Path) -> None:
    if not Path(path).exists():
        logger.warning("Storage directory %s already gone", path)
        return
    shutil.rmtree(path)
    logger.info("Removed storage directory %s", path)
