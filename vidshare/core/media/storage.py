"""Media stores that host avatars and cover images."""

import asyncio
import logging
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from uuid import uuid4

from vidshare.core.config import get_settings
from vidshare.core.media.uploads import discard_staged

logger = logging.getLogger(__name__)


class BaseMediaStore(ABC):
    """Abstract base class for media stores.

    upload() has a binary outcome: a public URL, or None when the file
    could not be stored. The staged local file is removed either way.
    """

    async def upload(self, local_path: str | None) -> str | None:
        """Upload a staged local file and return its public URL.

        Args:
            local_path: Path of the file to upload.

        Returns:
            Public URL, or None if there was nothing to upload or the upload failed.
        """
        if not local_path:
            return None
        try:
            return await self._store(Path(local_path))
        except Exception as e:
            logger.error(f"Media upload failed for {local_path}: {e}")
            return None
        finally:
            discard_staged(local_path)

    async def delete(self, url: str | None) -> bool:
        """Remove a previously uploaded file.

        Args:
            url: Public URL returned by upload().

        Returns:
            True if the file was removed, False if there was nothing to remove
            or the removal failed.
        """
        if not url:
            return False
        key = url.rsplit("/", 1)[-1]
        try:
            await self._remove(key)
        except Exception as e:
            logger.error(f"Media delete failed for {url}: {e}")
            return False
        return True

    @staticmethod
    def object_key(local_path: Path) -> str:
        """Unique storage key that keeps the original file extension."""
        return f"{uuid4().hex}{local_path.suffix.lower()}"

    @abstractmethod
    async def _store(self, local_path: Path) -> str:
        """Store the file and return its public URL. May raise on failure."""

    @abstractmethod
    async def _remove(self, key: str) -> None:
        """Remove the object stored under key. May raise on failure."""


class LocalMediaStore(BaseMediaStore):
    """Local filesystem media store, served under MEDIA_BASE_URL."""

    def __init__(self, root: str | None = None, base_url: str | None = None):
        """Initialize local media store.

        Args:
            root: Directory the files are copied into (default: MEDIA_ROOT)
            base_url: URL prefix the directory is served from (default: MEDIA_BASE_URL)
        """
        settings = get_settings()
        self.root = Path(root or settings.MEDIA_ROOT)
        self.base_url = (base_url or settings.MEDIA_BASE_URL).rstrip("/")
        self.root.mkdir(parents=True, exist_ok=True)

    async def _store(self, local_path: Path) -> str:
        key = self.object_key(local_path)
        await asyncio.to_thread(shutil.copyfile, local_path, self.root / key)
        logger.info(f"Media stored locally: {self.root / key}")
        return f"{self.base_url}/{key}"

    async def _remove(self, key: str) -> None:
        await asyncio.to_thread((self.root / key).unlink)
        logger.info(f"Media deleted locally: {self.root / key}")


class S3MediaStore(BaseMediaStore):
    """AWS S3 media store with public object URLs."""

    def __init__(
        self,
        bucket_name: str | None = None,
        aws_access_key_id: str | None = None,
        aws_secret_access_key: str | None = None,
        region: str | None = None,
        timeout: int | None = None,
    ):
        """Initialize S3 media store.

        Args:
            bucket_name: S3 bucket name
            aws_access_key_id: AWS access key ID
            aws_secret_access_key: AWS secret access key
            region: AWS region
            timeout: Connect and read timeout in seconds
        """
        settings = get_settings()
        self.bucket_name = bucket_name or settings.S3_BUCKET_NAME
        self.aws_access_key_id = aws_access_key_id or settings.AWS_ACCESS_KEY_ID
        self.aws_secret_access_key = aws_secret_access_key or settings.AWS_SECRET_ACCESS_KEY
        self.region = region or settings.AWS_REGION
        self.timeout = timeout or settings.MEDIA_TIMEOUT_SECONDS
        self._boto3_client = None

    def _get_client(self):
        """Get boto3 S3 client (lazy initialization)."""
        if self._boto3_client is None:
            import boto3
            from botocore.config import Config

            self._boto3_client = boto3.client(
                "s3",
                aws_access_key_id=self.aws_access_key_id or None,
                aws_secret_access_key=self.aws_secret_access_key or None,
                region_name=self.region,
                config=Config(
                    connect_timeout=self.timeout,
                    read_timeout=self.timeout,
                    retries={"max_attempts": 2},
                ),
            )
        return self._boto3_client

    def get_url(self, key: str) -> str:
        """Public URL of an object in the bucket."""
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{key}"

    async def _store(self, local_path: Path) -> str:
        client = self._get_client()
        key = self.object_key(local_path)

        await asyncio.to_thread(client.upload_file, str(local_path), self.bucket_name, key)
        logger.info(f"Media uploaded to S3: s3://{self.bucket_name}/{key}")
        return self.get_url(key)

    async def _remove(self, key: str) -> None:
        client = self._get_client()

        await asyncio.to_thread(client.delete_object, Bucket=self.bucket_name, Key=key)
        logger.info(f"Media deleted from S3: s3://{self.bucket_name}/{key}")


def get_media_store() -> BaseMediaStore:
    """Media store selected by MEDIA_BACKEND. Used as a FastAPI dependency."""
    settings = get_settings()
    if settings.MEDIA_BACKEND == "s3":
        return S3MediaStore()
    return LocalMediaStore()
