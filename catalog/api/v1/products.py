# catalog/api/v1/products.py
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session
import logging

from ...config import Settings, get_settings
from ...crud.product import product as crud_product
from ...database import get_db
from ...exceptions import CatalogError, InternalError
from ...models.product import Product
from ...schemas.product import ProductCreate, ProductUpdate
from ...services.assets import has_upload, release_image, store_image
from ...utils.storage import ImageStore
from ..deps import AuthContext, get_current_user, get_image_store

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/products", tags=["products"])
public_router = APIRouter(prefix="/public", tags=["public"])


def format_product(product: Product, with_category: bool = False) -> dict:
    """Helper function to format product, optionally with its category name"""
    data = {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "price": product.price,
        "image": product.image,
        "activo": product.active,
        "category_id": product.category_id,
        "user_id": product.user_id,
        "created_at": product.created_at.isoformat() if product.created_at else None,
    }
    if with_category:
        data["category_name"] = product.category.name if product.category else None
    return data


@public_router.get("/products")
def list_public_products(
    category_id: Optional[int] = Query(None, alias="categoryId"),
    db: Session = Depends(get_db),
):
    """Active products of every user, with category name"""
    try:
        products = crud_product.list_public(db, category_id=category_id)
        return [format_product(p, with_category=True) for p in products]
    except Exception as e:
        logger.error(f"Error fetching public products: {e}", exc_info=True)
        raise InternalError("Error al obtener productos")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    category_id: Optional[str] = Form(None, alias="categoryId"),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_current_user),
    store: ImageStore = Depends(get_image_store),
    app_settings: Settings = Depends(get_settings),
):
    """
    Create a product owned by the caller
    - image is optional; it is stored before the record is written
    """
    image_ref = None
    try:
        fields = crud_product.prepare_create(
            db,
            owner_id=auth.user_id,
            obj_in=ProductCreate(name=name, description=description, price=price, category_id=category_id),
        )

        if has_upload(image):
            image_ref = await store_image(store, image, app_settings)

        product = crud_product.create(db, owner_id=auth.user_id, fields=fields, image=image_ref)

        logger.info(f"✅ Product created: {product.name} (ID: {product.id})")
        return format_product(product)

    except CatalogError:
        raise
    except Exception as e:
        db.rollback()
        await release_image(store, image_ref)
        logger.error(f"❌ Error creating product: {e}", exc_info=True)
        raise InternalError("Error al crear producto")


@router.get("")
def list_products(
    category_id: Optional[int] = Query(None, alias="categoryId"),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_current_user),
):
    """Products owned by the caller, optionally within one category"""
    try:
        products = crud_product.list_owned(db, owner_id=auth.user_id, category_id=category_id)
        return [format_product(p) for p in products]
    except Exception as e:
        logger.error(f"Error fetching products: {e}", exc_info=True)
        raise InternalError("Error al obtener productos")


@router.get("/{product_id}")
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_current_user),
):
    try:
        product = crud_product.get_owned(db, owner_id=auth.user_id, id=product_id)
        return format_product(product, with_category=True)
    except CatalogError:
        raise
    except Exception as e:
        logger.error(f"Error fetching product {product_id}: {e}", exc_info=True)
        raise InternalError("Error al obtener producto")


@router.put("/{product_id}")
async def update_product(
    product_id: int,
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_current_user),
    store: ImageStore = Depends(get_image_store),
    app_settings: Settings = Depends(get_settings),
):
    """Update an owned product with optional image replacement"""
    new_image = None
    try:
        product = crud_product.get_owned(db, owner_id=auth.user_id, id=product_id)
        old_image = product.image

        if has_upload(image):
            new_image = await store_image(store, image, app_settings)

        product = crud_product.update(
            db,
            db_obj=product,
            obj_in=ProductUpdate(name=name, description=description, price=price),
            image=new_image,
        )
    except CatalogError:
        db.rollback()
        await release_image(store, new_image)
        raise
    except Exception as e:
        db.rollback()
        await release_image(store, new_image)
        logger.error(f"❌ Error updating product {product_id}: {e}", exc_info=True)
        raise InternalError("Error al actualizar producto")

    if new_image:
        await release_image(store, old_image)

    logger.info(f"✅ Product updated: {product.name}")
    return format_product(product)


@router.put("/{product_id}/toggle-active")
def toggle_product_active(
    product_id: int,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_current_user),
):
    """Flip the active flag of an owned product"""
    try:
        product = crud_product.toggle_active(db, owner_id=auth.user_id, id=product_id)
        logger.info(f"Product {product.id} active={product.active}")
        return {"message": "Estado actualizado", "activo": product.active}

    except CatalogError:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Error toggling product {product_id}: {e}", exc_info=True)
        raise InternalError("Error al actualizar estado del producto")


@router.delete("/{product_id}")
async def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_current_user),
    store: ImageStore = Depends(get_image_store),
):
    """Delete an owned product and release its image"""
    try:
        product = crud_product.get_owned(db, owner_id=auth.user_id, id=product_id)
        image = product.image
        crud_product.remove(db, product)
    except CatalogError:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting product {product_id}: {e}", exc_info=True)
        raise InternalError("Error al eliminar producto")

    await release_image(store, image)

    logger.info(f"Product deleted: {product_id}")
    return {"message": "Producto eliminado"}
