from catalog.database import Base
from catalog.models.user import User
from catalog.models.category import Category
from catalog.models.product import Product
from catalog.models.movie import Movie

# This ensures all models are registered with Base.metadata
__all__ = ["Base", "User", "Category", "Product", "Movie"]
