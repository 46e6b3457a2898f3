from pydantic import BaseModel, ConfigDict, Field
from typing import List

from app.models.product import Category


class ProductBase(BaseModel):
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    price: float = Field(ge=0)
    category: Category
    show: bool = True


class ProductCreate(ProductBase):
    pass


class ProductSearchOut(ProductBase):
    id: str
    img_urls: List[str] = []

    model_config = ConfigDict(from_attributes=True)


class ProductOut(ProductSearchOut):
    # Legacy comma-joined form kept for older clients
    img_url: str = ""


class CategoryCount(BaseModel):
    category: Category
    count: int
