from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class AdminListQuery(BaseModel):
    """Query-string parameters of the admin category listing."""

    query: str = Field(default="", max_length=120)
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1)
    fetch_all: bool = False
    expanded: list[str] = Field(default_factory=list)

    @field_validator("query", mode="before")
    @classmethod
    def query_strip(cls, v):
        return (v or "").strip()

    @field_validator("fetch_all", mode="before")
    @classmethod
    def parse_flag(cls, v):
        if isinstance(v, str):
            return v.strip().lower() in {"1", "true", "yes", "on"}
        return bool(v)

    @field_validator("expanded", mode="before")
    @classmethod
    def split_ids(cls, v):
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v or []
