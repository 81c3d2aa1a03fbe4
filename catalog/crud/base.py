from typing import Any, Generic, List, Optional, Type, TypeVar
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..database import Base
from ..exceptions import NotFoundError, ValidationError

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


def require_text(value: Optional[str], message: str) -> str:
    """Non-empty, stripped string or ValidationError."""
    if value is None or not str(value).strip():
        raise ValidationError(message)
    return str(value).strip()


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    Owner-scoped persistence for a model carrying a ``user_id`` column.

    A record owned by someone else is reported exactly like a missing one,
    so callers cannot discover other users' ids.
    """

    def __init__(self, model: Type[ModelType], not_found_message: str = "Recurso no encontrado"):
        self.model = model
        self.not_found_message = not_found_message

    def get_owned(self, db: Session, *, owner_id: int, id: Any) -> ModelType:
        obj = (
            db.query(self.model)
            .filter(self.model.id == id, self.model.user_id == owner_id)
            .first()
        )
        if obj is None:
            raise NotFoundError(self.not_found_message)
        return obj

    def list_owned(self, db: Session, *, owner_id: int) -> List[ModelType]:
        return (
            db.query(self.model)
            .filter(self.model.user_id == owner_id)
            .order_by(self.model.id)
            .all()
        )

    def list_all(self, db: Session) -> List[ModelType]:
        return db.query(self.model).order_by(self.model.id).all()

    def save(self, db: Session, obj: ModelType) -> ModelType:
        db.add(obj)
        db.commit()
        db.refresh(obj)
        return obj

    def remove(self, db: Session, obj: ModelType) -> None:
        db.delete(obj)
        db.commit()
