from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Diet(str, Enum):
    vegetarian = "vegetarian"
    non_vegetarian = "non vegetarian"


def normalize_diet(raw: str) -> str:
    """Fold case and hyphens so `Non-Vegetarian` reads as `non vegetarian`."""
    return raw.strip().lower().replace("-", " ")


class SortOrder(str, Enum):
    asc = "asc"
    desc = "desc"


class Dish(BaseModel):
    id: str
    name: str
    ingredients: list[str] = Field(default_factory=list)
    diet: Diet
    prep_time: int = Field(default=0, ge=0, description="Minutes")
    cook_time: int = Field(default=0, ge=0, description="Minutes")
    flavor_profile: str = ""
    course: str = ""
    state: str = ""
    region: str = ""


DISH_COLUMNS: list[str] = list(Dish.model_fields)


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    page: int
    limit: int
    total_pages: int = Field(alias="totalPages")


class DishPage(BaseModel):
    data: list[Dish]
    pagination: Pagination


class DishFilters(BaseModel):
    diet: Diet | None = None
    flavor_profile: str | None = None
    course: str | None = None
    state: str | None = None
    region: str | None = None
    max_prep_time: int | None = Field(default=None, ge=0)
    max_cook_time: int | None = Field(default=None, ge=0)


class IngredientsRequest(BaseModel):
    # Checked by the route so every malformed value gets the same 400
    ingredients: Any = None


class SearchResults(BaseModel):
    results: list[Dish]
