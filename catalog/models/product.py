# catalog/models/product.py
"""Product model - optionally categorized, with an active flag toggled separately"""
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Float, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from ..database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=True)
    image = Column(String(500), nullable=True)  # asset reference, see utils/storage.py
    active = Column(Boolean, default=True, nullable=False, index=True)
    category_id = Column(
        Integer,
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    category = relationship("Category", lazy="joined")

    def __repr__(self):
        return f"<Product(id={self.id}, name={self.name}, active={self.active})>"
