from typing import List, Optional
from sqlalchemy.orm import Session
from ..crud.base import CRUDBase, require_text
from ..models.category import Category
from ..models.product import Product
from ..schemas.category import CategoryCreate, CategoryUpdate

class CRUDCategory(CRUDBase[Category, CategoryCreate, CategoryUpdate]):
    def create(self, db: Session, *, owner_id: int, obj_in: CategoryCreate) -> Category:
        name = require_text(obj_in.name, "El nombre es obligatorio")
        return self.save(db, Category(name=name, user_id=owner_id))

    def update(self, db: Session, *, owner_id: int, id: int, obj_in: CategoryUpdate) -> Category:
        category = self.get_owned(db, owner_id=owner_id, id=id)
        # Empty name means "keep the current one"
        if obj_in.name and obj_in.name.strip():
            category.name = obj_in.name.strip()
        return self.save(db, category)

    def delete_products(self, db: Session, *, owner_id: int, category: Category) -> List[Optional[str]]:
        """
        Delete every product of ``owner_id`` filed under ``category`` and
        return their image references so they can be released.

        Commits on its own; the category itself is removed by a separate
        ``remove`` call, so a failure in between leaves the products gone and
        the category in place.
        """
        products = (
            db.query(Product)
            .filter(Product.category_id == category.id, Product.user_id == owner_id)
            .all()
        )
        images = [p.image for p in products]
        for product in products:
            db.delete(product)
        db.commit()
        return images

category = CRUDCategory(Category, not_found_message="Categoría no encontrada")
