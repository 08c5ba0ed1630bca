from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column

from storefront.extensions import db
from storefront.models.base import generate_hex_id


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Category(db.Model):
    """A node in the materialized-path category tree.

    ``depth``, ``path`` and ``is_parent`` are derived from the parent chain and
    are only ever written by the category repository.
    """

    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(db.String(32), primary_key=True, default=generate_hex_id)
    name: Mapped[str] = mapped_column(db.String(120), nullable=False)
    slug: Mapped[str] = mapped_column(db.String(160), unique=True, nullable=False, index=True)
    parent_id: Mapped[str | None] = mapped_column(
        db.ForeignKey("categories.id", ondelete="RESTRICT"), nullable=True, index=True
    )
    depth: Mapped[int] = mapped_column(db.Integer, default=0, nullable=False)
    path: Mapped[list[str]] = mapped_column(db.JSON, default=list, nullable=False)
    image: Mapped[str] = mapped_column(db.String(500), nullable=False)
    banner_image: Mapped[str | None] = mapped_column(db.String(500), nullable=True)
    is_featured: Mapped[bool] = mapped_column(db.Boolean, default=False, nullable=False)
    description: Mapped[str | None] = mapped_column(db.Text, nullable=True)
    is_parent: Mapped[bool] = mapped_column(db.Boolean, default=True, nullable=False)
    attribute_templates: Mapped[list[dict]] = mapped_column(db.JSON, default=list, nullable=False)
    created_at: Mapped[datetime] = mapped_column(db.DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        db.DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    __table_args__ = (
        CheckConstraint("depth >= 0", name="ck_categories_depth_non_negative"),
        Index("ix_categories_updated_at", "updated_at"),
        Index("ix_categories_featured", "is_featured", "updated_at"),
    )

    def __repr__(self) -> str:
        return f"<Category {self.slug} depth={self.depth}>"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "parent": self.parent_id,
            "depth": self.depth,
            "path": list(self.path or []),
            "image": self.image,
            "banner_image": self.banner_image,
            "is_featured": self.is_featured,
            "description": self.description,
            "is_parent": self.is_parent,
            "attribute_templates": list(self.attribute_templates or []),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
