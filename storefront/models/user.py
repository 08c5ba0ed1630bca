from __future__ import annotations

from datetime import datetime

from flask_login import UserMixin
from sqlalchemy import func
from sqlalchemy.orm import Mapped, mapped_column

from storefront.extensions import db
from storefront.models.base import generate_hex_id


class User(db.Model, UserMixin):
    """Account record mirrored from the external auth service.

    Credentials live with the auth service; this table only backs the
    Flask-Login session lookup and the admin pre-check.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    hex_id: Mapped[str] = mapped_column(db.String(32), unique=True, nullable=False, index=True, default=generate_hex_id)
    username: Mapped[str] = mapped_column(db.String(50), unique=True, nullable=False, index=True)
    email: Mapped[str | None] = mapped_column(db.String(255), nullable=True)
    is_admin: Mapped[bool] = mapped_column(db.Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(db.DateTime(timezone=True), server_default=func.now(), nullable=False)

    def get_id(self) -> str:  # Flask-Login compatibility
        return str(self.id)
