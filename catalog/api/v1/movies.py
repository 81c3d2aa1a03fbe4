# catalog/api/v1/movies.py
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session
import logging

from ...config import Settings, get_settings
from ...crud.movie import movie as crud_movie
from ...database import get_db
from ...exceptions import CatalogError, InternalError, ValidationError
from ...schemas.movie import Movie, MovieCreate, MovieUpdate
from ...services.assets import has_upload, release_image, store_image
from ...utils.storage import ImageStore
from ..deps import AuthContext, get_current_user, get_image_store

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/movies", tags=["movies"])


# Declared before /{movie_id} so "public" is never parsed as an id
@router.get("/public", response_model=List[Movie])
def list_public_movies(db: Session = Depends(get_db)):
    """Movie listings of every user"""
    try:
        return crud_movie.list_all(db)
    except Exception as e:
        logger.error(f"Error fetching public movies: {e}", exc_info=True)
        raise InternalError("Error al obtener películas")


@router.get("", response_model=List[Movie])
def list_movies(
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_current_user),
):
    """Movie listings owned by the caller"""
    try:
        return crud_movie.list_owned(db, owner_id=auth.user_id)
    except Exception as e:
        logger.error(f"Error fetching movies: {e}", exc_info=True)
        raise InternalError("Error al obtener películas")


@router.post("", response_model=Movie, status_code=status.HTTP_201_CREATED)
async def create_movie(
    name: Optional[str] = Form(None),
    genre: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    date_time: Optional[str] = Form(None, alias="dateTime"),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_current_user),
    store: ImageStore = Depends(get_image_store),
    app_settings: Settings = Depends(get_settings),
):
    """
    Create a movie listing owned by the caller
    - every field and the image are required
    """
    image_ref = None
    try:
        fields = crud_movie.prepare_create(
            MovieCreate(name=name, genre=genre, description=description, date_time=date_time)
        )
        if not has_upload(image):
            raise ValidationError("La imagen es obligatoria")

        image_ref = await store_image(store, image, app_settings)
        movie = crud_movie.create(db, owner_id=auth.user_id, fields=fields, image=image_ref)

        logger.info(f"✅ Movie created: {movie.name} (ID: {movie.id})")
        return movie

    except CatalogError:
        raise
    except Exception as e:
        db.rollback()
        await release_image(store, image_ref)
        logger.error(f"❌ Error creating movie: {e}", exc_info=True)
        raise InternalError("Error al crear película")


@router.get("/{movie_id}", response_model=Movie)
def get_movie(
    movie_id: int,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_current_user),
):
    try:
        return crud_movie.get_owned(db, owner_id=auth.user_id, id=movie_id)
    except CatalogError:
        raise
    except Exception as e:
        logger.error(f"Error fetching movie {movie_id}: {e}", exc_info=True)
        raise InternalError("Error al obtener la película")


@router.put("/{movie_id}", response_model=Movie)
async def update_movie(
    movie_id: int,
    name: Optional[str] = Form(None),
    genre: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    date_time: Optional[str] = Form(None, alias="dateTime"),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_current_user),
    store: ImageStore = Depends(get_image_store),
    app_settings: Settings = Depends(get_settings),
):
    """Update an owned movie listing with optional image replacement"""
    new_image = None
    try:
        movie = crud_movie.get_owned(db, owner_id=auth.user_id, id=movie_id)
        old_image = movie.image

        if has_upload(image):
            new_image = await store_image(store, image, app_settings)

        movie = crud_movie.update(
            db,
            db_obj=movie,
            obj_in=MovieUpdate(name=name, genre=genre, description=description, date_time=date_time),
            image=new_image,
        )
    except CatalogError:
        db.rollback()
        await release_image(store, new_image)
        raise
    except Exception as e:
        db.rollback()
        await release_image(store, new_image)
        logger.error(f"❌ Error updating movie {movie_id}: {e}", exc_info=True)
        raise InternalError("Error al actualizar la película")

    if new_image:
        await release_image(store, old_image)

    logger.info(f"✅ Movie updated: {movie.name}")
    return movie


@router.delete("/{movie_id}")
async def delete_movie(
    movie_id: int,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_current_user),
    store: ImageStore = Depends(get_image_store),
):
    """Delete an owned movie listing and release its image"""
    try:
        movie = crud_movie.get_owned(db, owner_id=auth.user_id, id=movie_id)
        image = movie.image
        crud_movie.remove(db, movie)
    except CatalogError:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Error deleting movie {movie_id}: {e}", exc_info=True)
        raise InternalError("Error al eliminar la película")

    await release_image(store, image)

    logger.info(f"✅ Movie deleted: {movie_id}")
    return {"message": "Película eliminada con éxito"}
