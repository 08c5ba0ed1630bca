"""Structured errors raised by the category store.

Every failure carries a stable ``kind`` string so that callers (the admin
API, the import CLI) can report it without parsing messages.
"""
from __future__ import annotations


class CategoryError(ValueError):
    kind: str = "category_error"
    status_code: int = 400

    def __init__(self, message: str, *, category_id: str | None = None) -> None:
        super().__init__(message)
        self.category_id = category_id

    def to_dict(self) -> dict:
        return {"error": self.kind, "message": str(self)}


class CategoryNotFound(CategoryError):
    kind = "not_found"
    status_code = 404


class DuplicateSlug(CategoryError):
    kind = "duplicate_slug"
    status_code = 409

    def __init__(self, slug: str) -> None:
        super().__init__(f'Category with slug "{slug}" already exists')
        self.slug = slug


class CategoryCycle(CategoryError):
    """Proposed parent is the category itself or one of its descendants."""

    kind = "cycle"
    status_code = 409


class CategoryHasChildren(CategoryError):
    kind = "has_children"
    status_code = 409


class CategoryValidationError(CategoryError):
    kind = "validation"
    status_code = 400

    def __init__(self, message: str, *, fields: list[str] | None = None) -> None:
        super().__init__(message)
        self.fields = fields or []

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.fields:
            body["fields"] = self.fields
        return body


__all__ = [
    "CategoryError",
    "CategoryNotFound",
    "DuplicateSlug",
    "CategoryCycle",
    "CategoryHasChildren",
    "CategoryValidationError",
]
