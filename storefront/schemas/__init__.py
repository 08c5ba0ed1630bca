from __future__ import annotations

# Re-export common schema classes for convenient imports
from .categories import AttributeTemplate, CategoryCreate, CategoryUpdate  # noqa: F401
from .admin import AdminListQuery  # noqa: F401

__all__ = [
    "AttributeTemplate",
    "CategoryCreate",
    "CategoryUpdate",
    "AdminListQuery",
]
