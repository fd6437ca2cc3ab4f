"""
Model registration: import every table model here so SQLModel.metadata knows all tables
(create_all in tests and scripts relies on it).
"""
from apps.catalog.models import Category, Product

__all__ = ["Category", "Product"]
