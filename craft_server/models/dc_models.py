from pydantic import BaseModel
from uuid import UUID
from datetime import datetime
from typing import Optional, List


class CombineRequestModel(BaseModel):
    a: Optional[str] = None
    b: Optional[str] = None
    userId: Optional[str] = None


class CombineResultModel(BaseModel):
    name: str
    emoji: str
    firstDiscoverer: str | None


class CombineResponseModel(BaseModel):
    success: bool = True
    isNew: bool
    result: CombineResultModel


class ElementModel(BaseModel):
    id: UUID
    name: str
    emoji: str
    created_at: datetime


class ElementListModel(BaseModel):
    success: bool = True
    count: int
    elements: List[ElementModel]


class RecipeModel(BaseModel):
    element_a_name: str
    element_b_name: str
    result_name: str
    result_emoji: str
    first_discoverer: str | None
    created_at: datetime

    class Config:
        from_attributes = True


class RecipeListModel(BaseModel):
    success: bool = True
    count: int
    recipes: List[RecipeModel]


class HealthModel(BaseModel):
    ok: bool = True
