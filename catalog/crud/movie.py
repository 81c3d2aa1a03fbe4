from datetime import datetime, timezone
from typing import Any, Dict, Optional
from sqlalchemy.orm import Session
from ..crud.base import CRUDBase, require_text
from ..exceptions import ValidationError
from ..models.movie import Movie
from ..schemas.movie import MovieCreate, MovieUpdate


def parse_date_time(value: Optional[str]) -> datetime:
    """ISO-8601 date-time; naive values are taken as UTC."""
    raw = require_text(value, "Todos los campos son obligatorios")
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError("Fecha inválida")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class CRUDMovie(CRUDBase[Movie, MovieCreate, MovieUpdate]):
    def prepare_create(self, obj_in: MovieCreate) -> Dict[str, Any]:
        """Validated column values for a new movie; raises ValidationError."""
        message = "Todos los campos son obligatorios"
        return {
            "name": require_text(obj_in.name, message),
            "genre": require_text(obj_in.genre, message),
            "description": require_text(obj_in.description, message),
            "date_time": parse_date_time(obj_in.date_time),
        }

    def create(self, db: Session, *, owner_id: int, fields: Dict[str, Any], image: str) -> Movie:
        return self.save(db, Movie(**fields, image=image, user_id=owner_id))

    def update(self, db: Session, *, db_obj: Movie, obj_in: MovieUpdate, image: Optional[str] = None) -> Movie:
        """Apply supplied fields; empty values keep the stored ones."""
        if obj_in.date_time and obj_in.date_time.strip():
            db_obj.date_time = parse_date_time(obj_in.date_time)
        for field in ("name", "genre", "description"):
            value = getattr(obj_in, field)
            if value and value.strip():
                setattr(db_obj, field, value.strip())
        if image is not None:
            db_obj.image = image

        return self.save(db, db_obj)

movie = CRUDMovie(Movie, not_found_message="Película no encontrada")
