"""
Image storage for catalog assets.

One strategy per process, chosen by STORAGE_TYPE:
- local: files under PHOTOS_DIR, the reference is the bare filename and the
  file is served at /photos/<filename>
- r2: Cloudflare R2 bucket, the reference is the public URL of the object

Both stores guarantee:
- save() is all-or-nothing and never overwrites an existing asset
- delete() is idempotent (a missing asset is not an error)
"""

import asyncio
import logging
import re
import time
import uuid
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Union

import boto3
from botocore.config import Config as BotocoreConfig
from botocore.exceptions import BotoCoreError, ClientError

from ..config import Settings
from ..exceptions import AssetCleanupError, AssetStorageError

logger = logging.getLogger(__name__)


# ============================================================
# Reference helpers (pure)
# ============================================================

def unique_filename(original_filename: Optional[str], now: Optional[float] = None) -> str:
    """Timestamp-prefixed, randomized, sanitized version of the uploaded name."""
    name = Path(original_filename or "").name
    name = re.sub(r"[^A-Za-z0-9._-]", "_", name) or "image"
    millis = int((time.time() if now is None else now) * 1000)
    return f"{millis}-{uuid.uuid4().hex[:8]}-{name}"


def photo_path(directory: Union[str, Path], reference: str) -> Path:
    """
    Resolve a local reference back to its file.

    Raises:
        ValueError: if the reference is empty or carries any path component
    """
    if not reference or reference in (".", "..") or Path(reference).name != reference or "\\" in reference:
        raise ValueError(f"Invalid photo reference: {reference!r}")
    return Path(directory) / reference


def object_key_from_url(url: str, public_url: str) -> str:
    """
    Derive the bucket object key from a public URL produced by R2ImageStore.

    "https://media.example.com/images/1700000000000-ab12cd34-poster.png"
        -> "images/1700000000000-ab12cd34-poster.png"

    Raises:
        ValueError: if the URL was not issued under ``public_url``
    """
    prefix = public_url.rstrip("/") + "/"
    if not url or not url.startswith(prefix):
        raise ValueError(f"URL is not served from {public_url}: {url!r}")
    key = url[len(prefix):].split("?", 1)[0].split("#", 1)[0]
    if not key:
        raise ValueError(f"URL carries no object key: {url!r}")
    return key


# ============================================================
# Stores
# ============================================================

class ImageStore:
    """Interface shared by every storage strategy"""

    storage_type = "none"

    async def save(self, data: bytes, filename: str, content_type: str) -> str:
        """Store ``data`` and return its reference. Raises AssetStorageError."""
        raise NotImplementedError

    async def delete(self, reference: str) -> bool:
        """Remove the asset; False if it did not exist. Raises AssetCleanupError."""
        raise NotImplementedError

    def public_url(self, reference: str) -> str:
        return reference

    def close(self) -> None:
        pass


class LocalImageStore(ImageStore):
    storage_type = "local"

    def __init__(self, directory: Union[str, Path], url_prefix: str = "/photos"):
        self.directory = Path(directory)
        self.url_prefix = url_prefix.rstrip("/")
        self.directory.mkdir(parents=True, exist_ok=True)

    async def save(self, data: bytes, filename: str, content_type: str = "image/jpeg") -> str:
        reference = unique_filename(filename)
        path = self.directory / reference

        try:
            # "x" refuses to open a file that already exists
            with open(path, "xb") as f:
                f.write(data)
        except FileExistsError as e:
            logger.error(f"❌ Refusing to overwrite existing photo: {reference}")
            raise AssetStorageError() from e
        except OSError as e:
            path.unlink(missing_ok=True)
            logger.error(f"❌ Failed to store photo {reference}: {e}")
            raise AssetStorageError() from e

        logger.info(f"✅ Image stored locally: {reference} ({len(data)} bytes)")
        return reference

    async def delete(self, reference: str) -> bool:
        try:
            path = photo_path(self.directory, reference)
        except ValueError as e:
            raise AssetCleanupError() from e

        try:
            path.unlink()
        except FileNotFoundError:
            logger.debug(f"Photo already gone: {reference}")
            return False
        except OSError as e:
            logger.error(f"❌ Failed to delete photo {reference}: {e}")
            raise AssetCleanupError() from e

        logger.info(f"✅ Deleted photo: {reference}")
        return True

    def public_url(self, reference: str) -> str:
        return f"{self.url_prefix}/{reference}"


class R2ImageStore(ImageStore):
    """Cloudflare R2 (S3 API); blocking boto3 calls run in a thread pool"""

    storage_type = "r2"

    def __init__(self, client, bucket: str, public_url: str, folder: str = "images"):
        self.client = client
        self.bucket = bucket
        self.public_base = public_url.rstrip("/")
        self.folder = folder
        self.executor = ThreadPoolExecutor(max_workers=10, thread_name_prefix="upload_worker")

    async def save(self, data: bytes, filename: str, content_type: str = "image/jpeg") -> str:
        object_key = f"{self.folder}/{unique_filename(filename)}"
        loop = asyncio.get_running_loop()

        def _upload():
            self.client.put_object(
                Bucket=self.bucket,
                Key=object_key,
                Body=data,
                ContentType=content_type,
                CacheControl='max-age=31536000',  # 1 year cache
                IfNoneMatch='*',  # fail instead of overwriting
            )

        try:
            await loop.run_in_executor(self.executor, _upload)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"❌ R2 upload failed for {object_key}: {e}")
            raise AssetStorageError() from e

        logger.info(f"✅ Image uploaded to R2: {object_key} ({len(data)} bytes)")
        return f"{self.public_base}/{object_key}"

    async def delete(self, reference: str) -> bool:
        try:
            object_key = object_key_from_url(reference, self.public_base)
        except ValueError as e:
            raise AssetCleanupError() from e

        loop = asyncio.get_running_loop()

        def _delete():
            # S3 DeleteObject succeeds for missing keys
            self.client.delete_object(Bucket=self.bucket, Key=object_key)

        try:
            await loop.run_in_executor(self.executor, _delete)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"❌ Failed to delete from R2: {e}")
            raise AssetCleanupError() from e

        logger.info(f"✅ Deleted from R2: {object_key}")
        return True

    def close(self) -> None:
        self.executor.shutdown(wait=True)
        logger.info("✅ Storage thread pool cleaned up")


def build_image_store(settings: Settings) -> ImageStore:
    """Pick the storage strategy for this process from configuration."""
    if settings.STORAGE_TYPE == 'r2':
        if not settings.is_r2_enabled:
            raise RuntimeError("STORAGE_TYPE=r2 requires R2 credentials and R2_PUBLIC_URL")

        boto_config = BotocoreConfig(
            signature_version='s3v4',
            retries={'total_max_attempts': 1},  # no automatic retries
            connect_timeout=10,
            read_timeout=60,
        )
        client = boto3.client(
            's3',
            endpoint_url=settings.r2_endpoint_url,
            aws_access_key_id=settings.R2_ACCESS_KEY_ID,
            aws_secret_access_key=settings.R2_SECRET_ACCESS_KEY,
            config=boto_config,
            region_name='auto',
        )
        logger.info("✅ Cloudflare R2 client initialized")
        return R2ImageStore(client, settings.R2_BUCKET_NAME, settings.R2_PUBLIC_URL)

    if settings.STORAGE_TYPE == 'local':
        return LocalImageStore(settings.PHOTOS_DIR)

    raise RuntimeError(f"Unsupported STORAGE_TYPE: {settings.STORAGE_TYPE}")
