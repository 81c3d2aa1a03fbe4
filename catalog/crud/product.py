import math
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
from ..crud.base import CRUDBase, require_text
from ..exceptions import ValidationError
from ..models.category import Category
from ..models.product import Product
from ..schemas.product import ProductCreate, ProductUpdate


def parse_price(value: Optional[str]) -> Optional[float]:
    if value is None or not str(value).strip():
        return None
    try:
        price = float(value)
    except (TypeError, ValueError):
        raise ValidationError("El precio debe ser numérico")
    if math.isnan(price) or math.isinf(price):
        raise ValidationError("El precio debe ser numérico")
    return price


def parse_category_id(value: Optional[str]) -> Optional[int]:
    if value is None or not str(value).strip():
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("Categoría no válida")


class CRUDProduct(CRUDBase[Product, ProductCreate, ProductUpdate]):
    def prepare_create(self, db: Session, *, owner_id: int, obj_in: ProductCreate) -> Dict[str, Any]:
        """Validated column values for a new product; raises ValidationError."""
        category_id = parse_category_id(obj_in.category_id)
        if category_id is not None:
            owned = (
                db.query(Category.id)
                .filter(Category.id == category_id, Category.user_id == owner_id)
                .first()
            )
            if owned is None:
                raise ValidationError("Categoría no válida")

        return {
            "name": require_text(obj_in.name, "El nombre es obligatorio"),
            "description": (obj_in.description or "").strip() or None,
            "price": parse_price(obj_in.price),
            "category_id": category_id,
        }

    def create(self, db: Session, *, owner_id: int, fields: Dict[str, Any], image: Optional[str] = None) -> Product:
        return self.save(db, Product(**fields, image=image, active=True, user_id=owner_id))

    def list_owned(self, db: Session, *, owner_id: int, category_id: Optional[int] = None) -> List[Product]:
        query = db.query(Product).filter(Product.user_id == owner_id)
        if category_id is not None:
            query = query.filter(Product.category_id == category_id)
        return query.order_by(Product.id).all()

    def list_public(self, db: Session, *, category_id: Optional[int] = None) -> List[Product]:
        """Active products of every owner, optionally within one category."""
        query = db.query(Product).filter(Product.active == True)  # noqa: E712
        if category_id is not None:
            query = query.filter(Product.category_id == category_id)
        return query.order_by(Product.id).all()

    def update(self, db: Session, *, db_obj: Product, obj_in: ProductUpdate, image: Optional[str] = None) -> Product:
        """
        Apply supplied fields. Empty values, including a price of 0, are
        treated as not supplied and keep the stored value.
        """
        price = parse_price(obj_in.price)

        if obj_in.name and obj_in.name.strip():
            db_obj.name = obj_in.name.strip()
        if obj_in.description and obj_in.description.strip():
            db_obj.description = obj_in.description.strip()
        if price:
            db_obj.price = price
        if image is not None:
            db_obj.image = image

        return self.save(db, db_obj)

    def toggle_active(self, db: Session, *, owner_id: int, id: int) -> Product:
        product = self.get_owned(db, owner_id=owner_id, id=id)
        product.active = not product.active
        return self.save(db, product)

product = CRUDProduct(Product, not_found_message="Producto no encontrado")
