from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from storefront.decorators import admin_required
from storefront.errors import CategoryError
from storefront.extensions import limiter
from storefront.repositories.category import (
    create_category,
    delete_category,
    get_category_by_id,
    has_children,
    list_for_admin,
    require_category,
    update_category,
)
from storefront.schemas.admin import AdminListQuery
from storefront.schemas.categories import CategoryCreate, CategoryUpdate
from storefront.services.admin_tree import AdminTreeController, AdminTreeState
from storefront.services.banner import banner_map, effective_banner, memoized_fetch

bp = Blueprint("admin", __name__)


@bp.errorhandler(CategoryError)
def category_error(e: CategoryError):
    return jsonify(e.to_dict()), e.status_code


def _validation_response(e: ValidationError, message: str):
    return (
        jsonify(
            {
                "error": "validation",
                "message": message,
                "details": [
                    {"field": "/".join(map(str, err["loc"])), "message": err["msg"]}
                    for err in e.errors()
                ],
            }
        ),
        400,
    )


def _list_params() -> AdminListQuery:
    cfg = current_app.config
    params = AdminListQuery.model_validate(
        {
            "query": request.args.get("query", ""),
            "page": request.args.get("page", 1),
            "limit": request.args.get("limit", cfg.get("CATEGORY_PAGE_SIZE", 10)),
            "fetch_all": request.args.get("fetch_all", False),
            "expanded": request.args.get("expanded", ""),
        }
    )
    params.limit = min(params.limit, cfg.get("CATEGORY_PAGE_SIZE_MAX", 100))
    return params


@bp.get("/api/categories")
@admin_required
def categories_list():
    try:
        params = _list_params()
    except ValidationError as e:
        return _validation_response(e, "invalid listing parameters")
    result = list_for_admin(query=params.query, page=params.page, limit=params.limit, fetch_all=params.fetch_all)
    return jsonify({"status": "ok", "page": params.page, "limit": params.limit, **result.to_dict()})


@bp.get("/api/categories/tree")
@admin_required
def categories_tree():
    """Display rows of the admin hierarchy for the given view state."""
    try:
        params = _list_params()
    except ValidationError as e:
        return _validation_response(e, "invalid listing parameters")

    controller = AdminTreeController(
        list_for_admin,
        AdminTreeState(
            page=params.page,
            page_size=params.limit,
            query=params.query,
            fetch_all=params.fetch_all,
            expanded=set(params.expanded),
        ),
    )
    controller.load()
    rows = controller.rows()
    banners = banner_map([row.category for row in rows], get_category_by_id)
    result = controller.result
    return jsonify(
        {
            "status": "ok",
            "mode": controller.mode.value,
            "expanded": sorted(controller.state.expanded),
            "page": controller.state.page,
            "total_pages": result.total_pages,
            "total_records": result.total_records,
            "range_start": result.range_start,
            "range_end": result.range_end,
            "rows": [
                {
                    "category": row.category.to_dict(),
                    "level": row.level,
                    "has_children": row.has_children,
                    "expanded": row.expanded,
                    "effective_banner": banners.get(row.category.id),
                }
                for row in rows
            ],
        }
    )


@bp.get("/api/categories/<category_id>")
@admin_required
def category_detail(category_id: str):
    cat = require_category(category_id)
    data = cat.to_dict()
    data["has_children"] = has_children(cat.id)
    data["effective_banner"] = effective_banner(cat, memoized_fetch(get_category_by_id))
    return jsonify({"status": "ok", "category": data})


@bp.post("/api/categories")
@limiter.limit("10 per minute; 150 per hour")
@admin_required
def category_create():
    data = request.get_json(silent=True) or {}
    try:
        payload = CategoryCreate.model_validate(data)
    except ValidationError as e:
        return _validation_response(e, "invalid category payload")
    cat = create_category(**payload.to_fields())
    return jsonify({"status": "ok", "id": cat.id, "category": cat.to_dict()}), 201


@bp.patch("/api/categories/<category_id>")
@limiter.limit("10 per minute; 150 per hour")
@admin_required
def category_update(category_id: str):
    data = request.get_json(silent=True) or {}
    try:
        payload = CategoryUpdate.model_validate(data)
    except ValidationError as e:
        return _validation_response(e, "invalid category payload")
    cat = update_category(category_id, **payload.to_changes())
    return jsonify({"status": "ok", "category": cat.to_dict()}), 200


@bp.delete("/api/categories/<category_id>")
@limiter.limit("10 per minute; 150 per hour")
@admin_required
def category_delete(category_id: str):
    delete_category(category_id)
    return jsonify({"status": "ok"}), 200
