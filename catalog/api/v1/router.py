from fastapi import APIRouter
from . import auth, categories, products, movies, upload

api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(categories.public_router)
api_router.include_router(products.public_router)
api_router.include_router(categories.router)
api_router.include_router(products.router)
api_router.include_router(movies.router)
api_router.include_router(upload.router)

__all__ = ["api_router"]
