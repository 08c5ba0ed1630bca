from __future__ import annotations

from storefront.models.base import generate_hex_id
from storefront.models.user import User
from storefront.models.category import Category

__all__ = [
    "generate_hex_id",
    "User",
    "Category",
]
