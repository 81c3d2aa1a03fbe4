# catalog/api/v1/upload.py
"""
Standalone image upload; the returned reference can be attached to a record
by the client. Nothing links it until then.
"""
from fastapi import APIRouter, Depends, File, UploadFile
import logging

from ...config import Settings, get_settings
from ...exceptions import CatalogError, InternalError
from ...services.assets import store_image
from ...utils.storage import ImageStore
from ..deps import AuthContext, get_current_user, get_image_store

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/upload", tags=["upload"])


@router.post("")
async def upload_image(
    image: UploadFile = File(...),
    auth: AuthContext = Depends(get_current_user),
    store: ImageStore = Depends(get_image_store),
    app_settings: Settings = Depends(get_settings),
):
    """
    Store a single image

    POST /upload (multipart field "image")

    Returns:
    - imageUrl: where the image can be fetched
    - image: the asset reference to keep on a record
    - storage_type: 'local' or 'r2'
    """
    try:
        reference = await store_image(store, image, app_settings)

        logger.info(f"✅ Image uploaded by user {auth.user_id}: {reference}")
        return {
            "imageUrl": store.public_url(reference),
            "image": reference,
            "storage_type": store.storage_type,
        }

    except CatalogError:
        raise
    except Exception as e:
        logger.error(f"❌ Upload error: {e}", exc_info=True)
        raise InternalError("Error al subir la imagen")
