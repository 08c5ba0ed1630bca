from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class AttributeTemplate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=80)
    type: Literal["text", "number", "boolean", "select"] = "text"
    options: list[str] | None = None
    required: bool = False


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    slug: str = Field(min_length=1, max_length=160, pattern=SLUG_PATTERN)
    parent: str | None = None
    image: str = Field(min_length=1, max_length=500)
    banner_image: str | None = Field(default=None, max_length=500)
    is_featured: bool = False
    description: str | None = None
    attribute_templates: list[AttributeTemplate] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def name_strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    @field_validator("slug", mode="before")
    @classmethod
    def slug_lower(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("parent", "banner_image", mode="before")
    @classmethod
    def empty_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def to_fields(self) -> dict:
        data = self.model_dump()
        data["parent_id"] = data.pop("parent")
        data["attribute_templates"] = [t.model_dump(exclude_none=True) for t in self.attribute_templates]
        return data


class CategoryUpdate(BaseModel):
    """Partial update; only the fields present in the payload are applied.

    An explicit ``"parent": null`` moves the category to the top level.
    """

    name: str | None = Field(default=None, min_length=1, max_length=120)
    slug: str | None = Field(default=None, min_length=1, max_length=160, pattern=SLUG_PATTERN)
    parent: str | None = None
    image: str | None = Field(default=None, min_length=1, max_length=500)
    banner_image: str | None = Field(default=None, max_length=500)
    is_featured: bool | None = None
    description: str | None = None
    attribute_templates: list[AttributeTemplate] | None = None

    # Omit a field to leave it unchanged; only parent, banner and description may be cleared
    @field_validator("name", "slug", "image", "is_featured", "attribute_templates", mode="before")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v

    @field_validator("slug", mode="before")
    @classmethod
    def slug_lower(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("parent", "banner_image", mode="before")
    @classmethod
    def empty_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def to_changes(self) -> dict:
        changes = {name: getattr(self, name) for name in self.model_fields_set}
        if "parent" in changes:
            changes["parent_id"] = changes.pop("parent")
        if "attribute_templates" in changes and changes["attribute_templates"] is not None:
            changes["attribute_templates"] = [
                t.model_dump(exclude_none=True) for t in self.attribute_templates or []
            ]
        return changes
