"""Public category endpoints used by the storefront sidebar and home page.

These never surface internal errors to shoppers: a failed read degrades to
an empty result and is logged.
"""
from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from storefront.extensions import CATEGORY_TREE_CACHE_KEY, cache, db, limiter
from storefront.models.category import Category
from storefront.repositories.category import get_category_by_id, get_category_by_slug, list_categories, list_featured
from storefront.services.banner import effective_banner, memoized_fetch
from storefront.services.category_tree import build_tree, nest_tree

bp = Blueprint("shop", __name__)


def _public_fields(cat: Category) -> dict:
    return {
        "id": cat.id,
        "name": cat.name,
        "slug": cat.slug,
        "parent": cat.parent_id,
        "depth": cat.depth,
        "image": cat.image or current_app.config["DEFAULT_CATEGORY_IMAGE"],
        "is_featured": cat.is_featured,
    }


@bp.get("/categories")
@limiter.limit("120 per minute")
def category_tree():
    tree = cache.get(CATEGORY_TREE_CACHE_KEY)
    if tree is None:
        try:
            tree = nest_tree(build_tree(list_categories()), _public_fields)
        except SQLAlchemyError as e:
            current_app.logger.error(f"Error building category tree: {str(e)}")
            return jsonify({"status": "ok", "categories": []})
        cache.set(CATEGORY_TREE_CACHE_KEY, tree, timeout=current_app.config.get("CATEGORY_TREE_CACHE_TIMEOUT", 300))
    return jsonify({"status": "ok", "categories": tree})


@bp.get("/categories/featured")
@limiter.limit("120 per minute")
def featured_categories():
    default_limit = current_app.config.get("FEATURED_CATEGORY_LIMIT", 4)
    limit = min(50, max(1, request.args.get("limit", default_limit, type=int)))
    try:
        items = [_public_fields(c) for c in list_featured(limit)]
    except SQLAlchemyError as e:
        current_app.logger.error(f"Error fetching featured categories: {str(e)}")
        items = []
    return jsonify({"status": "ok", "categories": items})


@bp.get("/categories/<slug>")
@limiter.limit("120 per minute")
def category_page(slug: str):
    try:
        cat = get_category_by_slug(slug)
        if cat is None:
            return jsonify({"error": "not_found"}), 404

        ancestors = {}
        if cat.path:
            stmt = db.select(Category).where(Category.id.in_(cat.path))
            ancestors = {a.id: a for a in db.session.execute(stmt).scalars()}
        fetch = memoized_fetch(get_category_by_id, ancestors.values())

        data = _public_fields(cat)
        data["description"] = cat.description
        data["effective_banner"] = effective_banner(cat, fetch)
        data["breadcrumbs"] = [
            {"id": a.id, "name": a.name, "slug": a.slug}
            for a in (ancestors.get(i) for i in cat.path or [])
            if a is not None
        ]
    except SQLAlchemyError as e:
        current_app.logger.error(f"Error loading category {slug}: {str(e)}")
        return jsonify({"status": "ok", "category": None})
    return jsonify({"status": "ok", "category": data})
