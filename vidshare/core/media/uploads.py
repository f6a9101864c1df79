"""Staging of multipart uploads on local disk before they go to the media store."""

import asyncio
import logging
import os
import shutil
from pathlib import Path
from uuid import uuid4

from fastapi import UploadFile

from vidshare.core.config import get_settings

logger = logging.getLogger(__name__)


async def stage_upload(upload: UploadFile | None) -> str | None:
    """
    Copy an uploaded file to MEDIA_UPLOAD_DIR.

    Args:
        upload: File received by the route, or None.

    Returns:
        Local path of the staged copy, or None if no file was sent.
    """
    if upload is None or not upload.filename:
        return None

    upload_dir = Path(get_settings().MEDIA_UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)
    staged = upload_dir / f"{uuid4().hex}{Path(upload.filename).suffix.lower()}"

    def _copy() -> None:
        with open(staged, "wb") as out:
            shutil.copyfileobj(upload.file, out)

    await asyncio.to_thread(_copy)
    return str(staged)


def discard_staged(*local_paths: str | None) -> None:
    """Remove staged files. Paths already removed are skipped."""
    for local_path in local_paths:
        if not local_path:
            continue
        try:
            os.remove(local_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove staged upload {local_path}: {e}")
