"""
Output storage for generated images.

The file at the target path is either absent or complete: bytes go to a
temporary file in the same directory first and are moved into place with
os.replace(), which is atomic on the same filesystem.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from models.image_buffer import ImageBuffer
from logging_config import get_logger


logger = get_logger(__name__)


def write_image(buffer: ImageBuffer, path: str | Path) -> Path:
    """
    Write an image buffer to disk.

    Args:
        buffer: Complete image file contents
        path: Destination file path (parent directories are created)

    Returns:
        Resolved destination path

    Raises:
        OSError: If the file cannot be written; no partial file is left behind
    """
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent)
    )
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(buffer.data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, target)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise

    logger.info(f"Wrote {buffer.size} bytes ({buffer.source.value}) to {target}")
    return target.resolve()
