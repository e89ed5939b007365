"""
Query engine over the flat dish collection.

Every operation loads the full collection from the record store and scans it;
at a few hundred records there is no index to maintain. A secondary index
(by region or flavor) can be introduced behind this class without changing
its interface.
"""
from __future__ import annotations

import logging
import math
import re
import unicodedata
from typing import Any, Iterable

import pandas as pd

from ..config import Settings
from ..errors import InvalidSortKeyError, StoreReadError
from .data_store import RecordStore, empty_dish_frame
from .models import DISH_COLUMNS, Dish, DishFilters, DishPage, Pagination, SortOrder

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ["name", "region", "state", "flavor_profile"]
EQUALITY_FILTERS = ["flavor_profile", "course", "state", "region"]


def _collation_key(value: Any) -> str:
    """Accent- and case-insensitive key, so "Éclair" sorts beside "eclair"."""
    if isinstance(value, list):
        value = ", ".join(str(v) for v in value)
    decomposed = unicodedata.normalize("NFKD", str(value))
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def _sort_key(column: pd.Series) -> pd.Series:
    if pd.api.types.is_numeric_dtype(column):
        return column
    return column.map(_collation_key)


def _row_to_dish(row: dict[str, Any]) -> Dish:
    return Dish(
        id=str(row["id"]),
        name=row["name"],
        ingredients=list(row["ingredients"]),
        diet=row["diet"],
        prep_time=int(row["prep_time"]),
        cook_time=int(row["cook_time"]),
        flavor_profile=row["flavor_profile"],
        course=row["course"],
        state=row["state"],
        region=row["region"],
    )


def _to_dishes(df: pd.DataFrame) -> list[Dish]:
    return [_row_to_dish(row) for row in df.to_dict(orient="records")]


def _has_every(dish_ingredients: list[str], wanted: list[str]) -> bool:
    lowered = [i.lower() for i in dish_ingredients]
    return all(any(w in i for i in lowered) for w in wanted)


class QueryEngine:
    def __init__(self, store: RecordStore, settings: Settings) -> None:
        self._store = store
        self._settings = settings

    def _frame(self) -> pd.DataFrame:
        try:
            return self._store.load_dishes()
        except StoreReadError:
            logger.warning("Dish collection unreadable, serving an empty catalog", exc_info=True)
            return empty_dish_frame()

    # ── Listing ──────────────────────────────────────────────────────────

    def list_dishes(
        self,
        page: int = 1,
        limit: int = 10,
        sort_by: str | None = None,
        sort_order: SortOrder = SortOrder.asc,
    ) -> DishPage:
        """
        Return one page of the (optionally sorted) collection.

        A ``limit`` at or above ``full_listing_limit`` returns every dish and
        ignores ``page`` for slicing. Pages past the end are empty.
        """
        if sort_by and sort_by not in DISH_COLUMNS:
            raise InvalidSortKeyError(sort_by)

        df = self._frame()
        if sort_by and not df.empty:
            df = df.sort_values(
                sort_by,
                key=_sort_key,
                ascending=SortOrder(sort_order) is SortOrder.asc,
                kind="stable",
            )

        total = len(df)
        if limit >= self._settings.full_listing_limit:
            window = df
        else:
            start = min(max((page - 1) * limit, 0), total)
            end = min(start + limit, total)
            window = df.iloc[start:end]

        return DishPage(
            data=_to_dishes(window),
            pagination=Pagination(
                total=total,
                page=page,
                limit=limit,
                total_pages=math.ceil(total / limit),
            ),
        )

    def get_dish(self, dish_id: str) -> Dish | None:
        df = self._frame()
        if df.empty:
            return None
        match = df.loc[df["id"] == dish_id]
        if match.empty:
            return None
        return _to_dishes(match.head(1))[0]

    # ── Search ───────────────────────────────────────────────────────────

    def search_by_name(self, query: str) -> list[Dish]:
        """
        Case-insensitive match of ``query`` against name, region, state and
        flavor profile.

        The query is treated as a regular expression unless ``literal_search``
        is set. A query that does not compile is matched literally.
        """
        df = self._frame()
        if df.empty:
            return []

        as_pattern = not self._settings.literal_search
        if as_pattern:
            try:
                re.compile(query)
            except re.error:
                logger.warning("Search query %r is not a valid pattern, matching literally", query)
                as_pattern = False

        mask = pd.Series(False, index=df.index)
        for col in SEARCH_FIELDS:
            mask |= df[col].str.contains(query, case=False, regex=as_pattern, na=False)
        return _to_dishes(df.loc[mask])

    def find_by_ingredients(self, ingredients: Iterable[str]) -> list[Dish]:
        wanted = [i.lower() for i in ingredients]
        if not wanted:
            return []
        df = self._frame()
        if df.empty:
            return []
        mask = df["ingredients"].apply(lambda items: _has_every(items, wanted)).astype(bool)
        return _to_dishes(df.loc[mask])

    # ── Filtering ────────────────────────────────────────────────────────

    def filter_dishes(self, filters: DishFilters) -> list[Dish]:
        df = self._frame()
        if df.empty:
            return []

        mask = pd.Series(True, index=df.index)
        if filters.diet is not None:
            mask &= df["diet"] == filters.diet.value
        for col in EQUALITY_FILTERS:
            value = getattr(filters, col)
            if value:
                mask &= df[col] == value
        if filters.max_prep_time is not None:
            mask &= df["prep_time"] <= filters.max_prep_time
        if filters.max_cook_time is not None:
            mask &= df["cook_time"] <= filters.max_cook_time

        return _to_dishes(df.loc[mask])
