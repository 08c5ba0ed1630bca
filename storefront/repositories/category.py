from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Optional

import structlog
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from storefront.errors import (
    CategoryCycle,
    CategoryHasChildren,
    CategoryNotFound,
    CategoryValidationError,
    DuplicateSlug,
)
from storefront.extensions import CATEGORY_TREE_CACHE_KEY, cache, db
from storefront.models.category import Category
from storefront.utils.db_retry import retry_db_operation

log = structlog.get_logger(__name__)

REQUIRED_FIELDS = ("name", "slug", "image")
UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "slug",
        "parent_id",
        "image",
        "banner_image",
        "is_featured",
        "description",
        "attribute_templates",
    }
)
NULLABLE_FIELDS = frozenset({"parent_id", "banner_image", "description"})


@dataclass
class AdminPage:
    records: list[Category] = field(default_factory=list)
    total_pages: int = 0
    total_records: int = 0
    range_start: int = 0
    range_end: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "records": [c.to_dict() for c in self.records],
            "total_pages": self.total_pages,
            "total_records": self.total_records,
            "range_start": self.range_start,
            "range_end": self.range_end,
        }


def compute_lineage(parent: Category | None) -> tuple[int, list[str], bool]:
    """Return ``(depth, path, is_parent)`` for a node placed under ``parent``."""
    if parent is None:
        return 0, [], True
    return parent.depth + 1, [*(parent.path or []), parent.id], False


# Reads
def get_category_by_id(category_id: str) -> Optional[Category]:
    return db.session.execute(db.select(Category).filter_by(id=category_id)).scalar_one_or_none()


def get_category_by_slug(slug: str) -> Optional[Category]:
    return db.session.execute(db.select(Category).filter_by(slug=slug)).scalar_one_or_none()


def require_category(category_id: str) -> Category:
    cat = get_category_by_id(category_id)
    if cat is None:
        raise CategoryNotFound(f'Category with ID "{category_id}" not found', category_id=category_id)
    return cat


def list_children(parent_id: str) -> list[Category]:
    stmt = db.select(Category).filter_by(parent_id=parent_id).order_by(Category.name)
    return list(db.session.execute(stmt).scalars())


def has_children(category_id: str) -> bool:
    stmt = db.select(Category.id).filter_by(parent_id=category_id).limit(1)
    return db.session.execute(stmt).first() is not None


@retry_db_operation()
def list_categories() -> list[Category]:
    return list(db.session.execute(db.select(Category).order_by(Category.name)).scalars())


@retry_db_operation()
def list_for_admin(*, query: str = "", page: int = 1, limit: int = 10, fetch_all: bool = False) -> AdminPage:
    page = max(1, page)
    limit = max(1, limit)

    stmt = db.select(Category)
    count_stmt = db.select(func.count(Category.id))
    if query:
        condition = Category.name.icontains(query, autoescape=True)
        stmt = stmt.where(condition)
        count_stmt = count_stmt.where(condition)

    total = db.session.execute(count_stmt).scalar_one()
    stmt = stmt.order_by(Category.updated_at.desc(), Category.id)

    skip = 0
    if not fetch_all:
        skip = (page - 1) * limit
        stmt = stmt.offset(skip).limit(limit)

    records = list(db.session.execute(stmt).scalars())

    if fetch_all:
        return AdminPage(records, total_pages=1, total_records=total, range_start=1, range_end=total)
    return AdminPage(
        records,
        total_pages=math.ceil(total / limit),
        total_records=total,
        range_start=skip + 1,
        range_end=skip + len(records),
    )


@retry_db_operation()
def list_featured(limit: int = 4) -> list[Category]:
    stmt = (
        db.select(Category)
        .where(Category.parent_id.is_(None))
        .order_by(Category.is_featured.desc(), Category.updated_at.desc())
        .limit(limit)
    )
    return list(db.session.execute(stmt).scalars())


# Writes
def _require_fields(values: dict[str, Any]) -> None:
    missing = [
        name for name in REQUIRED_FIELDS
        if not isinstance(values.get(name), str) or not values[name].strip()
    ]
    if missing:
        raise CategoryValidationError(f"Missing required field(s): {', '.join(missing)}", fields=missing)


def _ensure_slug_available(slug: str, *, exclude_id: str | None = None) -> None:
    existing = get_category_by_slug(slug)
    if existing is not None and existing.id != exclude_id:
        raise DuplicateSlug(slug)


def _require_parent(parent_id: str) -> Category:
    parent = get_category_by_id(parent_id)
    if parent is None:
        raise CategoryNotFound(f'Parent category with ID "{parent_id}" not found', category_id=parent_id)
    return parent


def _ensure_not_descendant(cat: Category, candidate: Category) -> None:
    ancestry = [*(candidate.path or []), candidate.id]
    if cat.id in ancestry:
        raise CategoryCycle(
            f'Category "{cat.slug}" cannot be moved under "{candidate.slug}", which is itself or one of its descendants',
            category_id=cat.id,
        )


def _cascade_lineage(root: Category) -> int:
    """Recompute depth/path for every descendant of ``root``, breadth first."""
    touched = 0
    seen = {root.id}
    queue = deque([root])
    while queue:
        node = queue.popleft()
        for child in list_children(node.id):
            if child.id in seen:
                raise CategoryCycle(f'Ancestry loop detected at "{child.slug}"', category_id=child.id)
            seen.add(child.id)
            child.depth, child.path, child.is_parent = compute_lineage(node)
            touched += 1
            queue.append(child)
    return touched


def _commit(slug: str) -> None:
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise DuplicateSlug(slug)
    except SQLAlchemyError:
        db.session.rollback()
        raise
    cache.delete(CATEGORY_TREE_CACHE_KEY)


def create_category(
    *,
    name: str,
    slug: str,
    image: str,
    parent_id: str | None = None,
    banner_image: str | None = None,
    is_featured: bool = False,
    description: str | None = None,
    attribute_templates: list[dict] | None = None,
) -> Category:
    _require_fields({"name": name, "slug": slug, "image": image})
    parent = _require_parent(parent_id) if parent_id else None
    _ensure_slug_available(slug)

    depth, path, is_parent = compute_lineage(parent)
    cat = Category(
        name=name.strip(),
        slug=slug,
        parent_id=parent.id if parent else None,
        depth=depth,
        path=path,
        is_parent=is_parent,
        image=image,
        banner_image=banner_image or None,
        is_featured=bool(is_featured),
        description=description,
        attribute_templates=list(attribute_templates or []),
    )
    db.session.add(cat)
    _commit(slug)
    log.info("category_created", category_id=cat.id, slug=cat.slug, depth=cat.depth)
    return cat


def update_category(category_id: str, **changes: Any) -> Category:
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise CategoryValidationError(f"Unknown field(s): {', '.join(sorted(unknown))}", fields=sorted(unknown))
    nulled = sorted(name for name, value in changes.items() if value is None and name not in NULLABLE_FIELDS)
    if nulled:
        raise CategoryValidationError(f"Field(s) may not be null: {', '.join(nulled)}", fields=nulled)

    cat = require_category(category_id)

    merged = {name: changes.get(name, getattr(cat, name)) for name in REQUIRED_FIELDS}
    _require_fields(merged)
    slug = merged["slug"]
    if slug != cat.slug:
        _ensure_slug_available(slug, exclude_id=cat.id)

    reparent = "parent_id" in changes
    new_parent: Category | None = None
    if reparent and changes["parent_id"]:
        new_parent = _require_parent(changes["parent_id"])
        _ensure_not_descendant(cat, new_parent)

    # All checks passed; from here on only writes
    moved = 0
    try:
        for name, value in changes.items():
            if name == "parent_id":
                continue
            if name == "name":
                value = value.strip()
            elif name == "is_featured":
                value = bool(value)
            elif name == "attribute_templates":
                value = list(value or [])
            setattr(cat, name, value)

        if reparent:
            cat.parent_id = new_parent.id if new_parent else None
            cat.depth, cat.path, cat.is_parent = compute_lineage(new_parent)
            moved = _cascade_lineage(cat)
    except IntegrityError:
        # autoflush during the descendant walk
        db.session.rollback()
        raise DuplicateSlug(slug)
    except CategoryCycle:
        db.session.rollback()
        raise

    _commit(slug)
    if reparent:
        log.info("category_moved", category_id=cat.id, parent_id=cat.parent_id, depth=cat.depth, descendants=moved)
    else:
        log.info("category_updated", category_id=cat.id, slug=cat.slug)
    return cat


def delete_category(category_id: str) -> None:
    cat = require_category(category_id)
    if has_children(cat.id):
        raise CategoryHasChildren(f'Cannot delete category "{cat.slug}" with children', category_id=cat.id)
    slug = cat.slug
    db.session.delete(cat)
    try:
        db.session.commit()
    except IntegrityError:
        # RESTRICT foreign key: a child was added since the check
        db.session.rollback()
        raise CategoryHasChildren(f'Cannot delete category "{slug}" with children', category_id=category_id)
    except SQLAlchemyError:
        db.session.rollback()
        raise
    cache.delete(CATEGORY_TREE_CACHE_KEY)
    log.info("category_deleted", category_id=category_id)
