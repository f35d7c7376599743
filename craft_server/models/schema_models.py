from pydantic import BaseModel
from uuid import UUID
from datetime import datetime


class ElementSchema(BaseModel):
    element_id: UUID
    name: str
    emoji: str
    created_at: datetime

    class Config:
        from_attributes = True


class RecipeSchema(BaseModel):
    recipe_id: UUID
    element_a_id: UUID
    element_b_id: UUID
    result_id: UUID
    first_discoverer: str | None
    created_at: datetime
    result: ElementSchema

    class Config:
        from_attributes = True


class RecipeDetailSchema(BaseModel):
    element_a_name: str
    element_b_name: str
    result_name: str
    result_emoji: str
    first_discoverer: str | None
    created_at: datetime


class CombinationResultSchema(BaseModel):
    """Outcome of resolving a pair: the result element and whether it was just discovered."""

    result: ElementSchema
    first_discoverer: str | None
    is_new: bool
