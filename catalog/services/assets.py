"""
Asset lifecycle around records: validate and store incoming images, release
replaced or orphaned ones.

Releasing is best-effort: a failure is logged and never rolls back or blocks
the record mutation it accompanies.
"""
from typing import Optional
from fastapi import UploadFile
import logging

from ..config import Settings
from ..exceptions import AssetCleanupError, ValidationError
from ..utils.storage import ImageStore

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/jpg", "image/webp", "image/gif"}


def has_upload(upload: Optional[UploadFile]) -> bool:
    """Browsers post an empty part with no filename when no file was picked."""
    return upload is not None and bool(upload.filename)


async def store_image(store: ImageStore, upload: UploadFile, settings: Settings) -> str:
    """
    Validate an uploaded image and store it.

    Returns:
        The asset reference to save on the record

    Raises:
        ValidationError: unsupported content type, empty or oversized payload
        AssetStorageError: the store could not persist the image
    """
    if upload.content_type not in ALLOWED_IMAGE_TYPES:
        raise ValidationError(
            f"Tipo de imagen no permitido. Permitidos: {', '.join(sorted(ALLOWED_IMAGE_TYPES))}"
        )

    # One byte past the limit is enough to know it is too large
    data = await upload.read(settings.MAX_IMAGE_SIZE + 1)
    if not data:
        raise ValidationError("La imagen está vacía")
    if len(data) > settings.MAX_IMAGE_SIZE:
        raise ValidationError(
            f"Imagen demasiado grande. Máximo: {settings.MAX_IMAGE_SIZE / (1024*1024):.0f}MB"
        )

    logger.info(f"📤 Storing image: {upload.filename} ({len(data) / 1024:.1f}KB)")
    return await store.save(data, upload.filename, upload.content_type)


async def release_image(store: ImageStore, reference: Optional[str]) -> None:
    """Delete an asset no record points to anymore, best-effort."""
    if not reference:
        return
    try:
        await store.delete(reference)
    except AssetCleanupError as e:
        logger.warning(f"⚠️ {e.message}: {reference} (left orphaned)")
    except Exception as e:
        logger.error(f"⚠️ Unexpected error releasing image {reference}: {e}", exc_info=True)
