# catalog/api/v1/categories.py
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import logging

from ...crud.category import category as crud_category
from ...database import get_db
from ...exceptions import CatalogError, InternalError
from ...schemas.category import Category, CategoryCreate, CategoryUpdate
from ...services.assets import release_image
from ...utils.storage import ImageStore
from ..deps import AuthContext, get_current_user, get_image_store

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/categories", tags=["categories"])
public_router = APIRouter(prefix="/public", tags=["public"])


@public_router.get("/categories", response_model=List[Category])
def list_public_categories(db: Session = Depends(get_db)):
    """Every category of every user"""
    try:
        return crud_category.list_all(db)
    except Exception as e:
        logger.error(f"Error fetching public categories: {e}", exc_info=True)
        raise InternalError("Error al obtener categorías")


@router.post("", response_model=Category, status_code=status.HTTP_201_CREATED)
def create_category(
    category_data: CategoryCreate,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_current_user),
):
    """Create a category owned by the caller"""
    try:
        category = crud_category.create(db, owner_id=auth.user_id, obj_in=category_data)
        logger.info(f"Category created: {category.name} (ID: {category.id}, owner: {auth.user_id})")
        return category

    except CatalogError:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Error creating category: {e}", exc_info=True)
        raise InternalError("Error al crear categoría")


@router.get("", response_model=List[Category])
def list_categories(
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_current_user),
):
    """Categories owned by the caller"""
    try:
        return crud_category.list_owned(db, owner_id=auth.user_id)
    except Exception as e:
        logger.error(f"Error fetching categories: {e}", exc_info=True)
        raise InternalError("Error interno del servidor")


@router.get("/{category_id}", response_model=Category)
def get_category(
    category_id: int,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_current_user),
):
    try:
        return crud_category.get_owned(db, owner_id=auth.user_id, id=category_id)
    except CatalogError:
        raise
    except Exception as e:
        logger.error(f"Error fetching category {category_id}: {e}", exc_info=True)
        raise InternalError("Error al obtener categoría")


@router.put("/{category_id}", response_model=Category)
def update_category(
    category_id: int,
    category_data: CategoryUpdate,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_current_user),
):
    """Rename an owned category"""
    try:
        category = crud_category.update(db, owner_id=auth.user_id, id=category_id, obj_in=category_data)
        logger.info(f"Category updated: {category.name}")
        return category

    except CatalogError:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Error updating category {category_id}: {e}", exc_info=True)
        raise InternalError("Error al actualizar categoría")


@router.delete("/{category_id}")
async def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_current_user),
    store: ImageStore = Depends(get_image_store),
):
    """Delete an owned category together with the caller's products filed under it"""
    images = []
    try:
        category = crud_category.get_owned(db, owner_id=auth.user_id, id=category_id)
        images = crud_category.delete_products(db, owner_id=auth.user_id, category=category)
        crud_category.remove(db, category)
    except CatalogError:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting category {category_id}: {e}", exc_info=True)
        raise InternalError("Error al eliminar categoría")
    finally:
        # Product rows are already committed once images is filled
        for image in images:
            await release_image(store, image)

    logger.info(f"Category {category_id} deleted with {len(images)} products")
    return {"message": "Categoría eliminada", "deleted_products": len(images)}
