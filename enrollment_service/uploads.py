# enrollment_service/uploads.py
"""Local storage for files posted to /api/upload."""
import logging
import os
import shutil
import time
from typing import BinaryIO, Optional

from .exceptions import InvalidRequest

logger = logging.getLogger("enrollment_service.uploads")


def safe_filename(filename: str) -> str:
    """Drop any directory part a client sent along with the name."""
    return os.path.basename(filename.replace("\\", "/")).strip()


def save_upload(upload_dir: str, filename: Optional[str], stream: BinaryIO) -> str:
    """Write stream to ``{upload_dir}/{epoch_millis}-{filename}`` and return the path."""
    name = safe_filename(filename or "")
    if not name:
        raise InvalidRequest("A file is required in the 'file' field.")

    os.makedirs(upload_dir, exist_ok=True)
    path = os.path.join(upload_dir, f"{int(time.time() * 1000)}-{name}")
    with open(path, "wb") as out:
        shutil.copyfileobj(stream, out)

    logger.info(f"Stored upload {name!r} at {path}")
    return path
