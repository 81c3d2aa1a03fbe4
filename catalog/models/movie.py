# catalog/models/movie.py
"""Movie listing model"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from ..database import Base


class Movie(Base):
    __tablename__ = "movies"

    # ==================== PRIMARY KEY ====================
    id = Column(Integer, primary_key=True, index=True)

    # ==================== BASIC INFO ====================
    name = Column(String(255), nullable=False, index=True)
    genre = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    date_time = Column(DateTime(timezone=True), nullable=False)  # scheduled showing

    # ==================== MEDIA ====================
    image = Column(String(500), nullable=False)  # asset reference, see utils/storage.py

    # ==================== OWNERSHIP ====================
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Movie(id={self.id}, name={self.name})>"
