"""Bulk import and export of nested category documents.

A document is a list of nodes, each a category field mapping plus an
optional ``children`` list. Import upserts by slug through the category
repository, so depth and path are always computed by the store.
"""
from __future__ import annotations

import re
from collections import deque
from dataclasses import dataclass, field
from typing import Any

import structlog

from storefront.errors import CategoryError
from storefront.repositories.category import (
    create_category,
    get_category_by_slug,
    list_categories,
    update_category,
)
from storefront.services.category_tree import build_tree, nest_tree
from storefront.utils.slug import slugify

log = structlog.get_logger(__name__)

SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
IMPORT_FIELDS = ("name", "slug", "image", "banner_image", "is_featured", "description", "attribute_templates")
EXPORT_EXCLUDE = ("id", "parent", "depth", "path", "is_parent", "created_at", "updated_at")


@dataclass
class ImportReport:
    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


def _label(node: Any, fallback: str) -> str:
    name = node.get("name") if isinstance(node, dict) else None
    return name if isinstance(name, str) and name else fallback


def validate_category_structure(nodes: list[dict]) -> list[str]:
    """Return a list of problems in a nested document; empty means valid."""
    errors: list[str] = []
    slugs: set[str] = set()
    if not isinstance(nodes, list):
        return ["Document must be a list of categories"]

    stack = [(node, _label(node, f"Category {i + 1}")) for i, node in reversed(list(enumerate(nodes)))]
    while stack:
        node, where = stack.pop()
        if not isinstance(node, dict):
            errors.append(f"{where}: Category entry must be an object")
            continue
        for required in ("name", "image"):
            value = node.get(required)
            if value is None or value == "":
                errors.append(f"{where}: Missing required field '{required}'")
            elif not isinstance(value, str):
                errors.append(f"{where}: '{required}' must be a string")

        slug = node.get("slug")
        if slug is None or slug == "":
            errors.append(f"{where}: Missing required field 'slug'")
        elif not isinstance(slug, str):
            errors.append(f"{where}: 'slug' must be a string")
        else:
            if slug in slugs:
                errors.append(f"{where}: Duplicate slug '{slug}'")
            else:
                slugs.add(slug)
            if not SLUG_RE.match(slug):
                errors.append(
                    f"{where}: Invalid slug format '{slug}'. Use lowercase letters, numbers, and hyphens only."
                )

        children = node.get("children") or []
        if not isinstance(children, list):
            errors.append(f"{where}: 'children' must be a list")
            continue
        for i, child in reversed(list(enumerate(children))):
            stack.append((child, f"{where} > {_label(child, f'Child {i + 1}')}"))
    return errors


def import_category_tree(nodes: list[dict], *, default_image: str | None = None) -> ImportReport:
    """Create or update every node, parents before children.

    A node that fails is reported under its location (``Parent > Child``)
    and its subtree is skipped; earlier writes stay committed.
    """
    report = ImportReport()
    queue: deque[tuple[dict, str | None, str]] = deque(
        (node, None, _label(node, f"Category {i + 1}")) for i, node in enumerate(nodes)
    )
    while queue:
        node, parent_id, where = queue.popleft()
        fields: dict[str, Any] = {k: node[k] for k in IMPORT_FIELDS if k in node}
        if not fields.get("slug") and isinstance(fields.get("name"), str):
            fields["slug"] = slugify(fields["name"])
        if not fields.get("image") and default_image:
            fields["image"] = default_image
        for required in ("name", "slug", "image"):
            fields.setdefault(required, "")
        slug = fields["slug"]

        try:
            existing = get_category_by_slug(slug) if isinstance(slug, str) and slug else None
            if existing is None:
                cat = create_category(parent_id=parent_id, **fields)
                report.created.append(cat.slug)
            else:
                cat = update_category(existing.id, parent_id=parent_id, **fields)
                report.updated.append(cat.slug)
        except CategoryError as exc:
            report.failed[where] = f"{exc.kind}: {exc}"
            log.warning("category_import_failed", location=where, slug=slug, kind=exc.kind, error=str(exc))
            continue

        queue.extend(
            (child, cat.id, f"{where} > {_label(child, f'Child {i + 1}')}")
            for i, child in enumerate(node.get("children") or [])
        )

    log.info(
        "category_import_finished",
        created=len(report.created),
        updated=len(report.updated),
        failed=len(report.failed),
    )
    return report


def _export_fields(category) -> dict:
    data = category.to_dict()
    for key in EXPORT_EXCLUDE:
        data.pop(key, None)
    return {k: v for k, v in data.items() if v not in (None, [], "")}


def export_category_tree() -> list[dict]:
    """Nested document of the whole hierarchy, importable as-is."""
    return nest_tree(build_tree(list_categories()), _export_fields, prune_empty=True)


def category_template(default_image: str) -> list[dict]:
    return [
        {
            "name": "Main Category Name",
            "slug": "main-category-slug",
            "image": default_image,
            "description": "Description of the category",
            "is_featured": False,
            "children": [
                {
                    "name": "Subcategory Name",
                    "slug": "subcategory-slug",
                    "image": default_image,
                    "description": "Description of the subcategory",
                    "children": [
                        {
                            "name": "Sub-subcategory Name",
                            "slug": "sub-subcategory-slug",
                            "image": default_image,
                            "description": "Description of the sub-subcategory",
                        }
                    ],
                }
            ],
        }
    ]
