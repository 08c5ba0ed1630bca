# Import all repository functions to maintain compatibility
from storefront.repositories.category import (
    AdminPage,
    compute_lineage,
    create_category,
    delete_category,
    get_category_by_id,
    get_category_by_slug,
    has_children,
    list_categories,
    list_children,
    list_featured,
    list_for_admin,
    require_category,
    update_category,
)

__all__ = [
    "AdminPage",
    "compute_lineage",
    "create_category",
    "delete_category",
    "get_category_by_id",
    "get_category_by_slug",
    "has_children",
    "list_categories",
    "list_children",
    "list_featured",
    "list_for_admin",
    "require_category",
    "update_category",
]
