"""Media host integration."""

from vidshare.core.media.storage import (
    BaseMediaStore,
    LocalMediaStore,
    S3MediaStore,
    get_media_store,
)
from vidshare.core.media.uploads import discard_staged, stage_upload

__all__ = [
    "BaseMediaStore",
    "LocalMediaStore",
    "S3MediaStore",
    "discard_staged",
    "get_media_store",
    "stage_upload",
]
