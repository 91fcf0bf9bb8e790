"""Category Schemas — create, edit and merge-removal bodies.

Invariants:
    - type and color are required, non-empty strings on create and edit
    - removal targets are checked by core/enforce_categories (shared with services)
"""

from pydantic import BaseModel, field_validator


class CategoryBody(BaseModel):
    type: str
    color: str

    @field_validator("type", "color")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if v == "":
            raise ValueError("parameters cannot be empty strings")
        return v


class CategoryDelete(BaseModel):
    types: list[str] | None = None
