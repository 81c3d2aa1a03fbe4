from pydantic import BaseModel
from typing import Optional
from datetime import datetime

# Raw multipart values; parsing and validation happen in crud/movie.py

class MovieCreate(BaseModel):
    name: Optional[str] = None
    genre: Optional[str] = None
    description: Optional[str] = None
    date_time: Optional[str] = None

class MovieUpdate(MovieCreate):
    pass

class Movie(BaseModel):
    id: int
    name: str
    image: str
    genre: str
    description: str
    date_time: datetime
    user_id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
