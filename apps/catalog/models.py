from typing import List, Optional
from sqlmodel import Field, Relationship
from framework.database.entity import BaseEntity


class Category(BaseEntity, table=True):
    """Product category."""
    __tablename__ = "categories"

    name: str = Field(unique=True, index=True, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)

    products: List["Product"] = Relationship(back_populates="category")


class Product(BaseEntity, table=True):
    """Catalog product."""
    __tablename__ = "products"

    sku: str = Field(unique=True, index=True, max_length=32, description="Stock keeping unit")
    name: str = Field(index=True, max_length=200)
    price: float = Field(default=0.0, ge=0)
    stock: int = Field(default=0)

    category_id: Optional[int] = Field(default=None, foreign_key="categories.id", index=True)
    category: Optional[Category] = Relationship(back_populates="products")
