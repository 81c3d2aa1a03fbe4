from pydantic import BaseModel
from typing import Optional
from datetime import datetime

class CategoryCreate(BaseModel):
    name: Optional[str] = None

class CategoryUpdate(BaseModel):
    name: Optional[str] = None

class Category(BaseModel):
    id: int
    name: str
    user_id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
