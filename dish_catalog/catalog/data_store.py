from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd
from pydantic import ValidationError

from ..auth.models import User
from ..config import Settings
from ..errors import StoreReadError
from .models import DISH_COLUMNS, Diet, normalize_diet

logger = logging.getLogger(__name__)

_TEXT_COLUMNS = ["id", "name", "diet", "flavor_profile", "course", "state", "region"]
_TIME_COLUMNS = ["prep_time", "cook_time"]
_DIET_VALUES = {d.value for d in Diet}

# One week; larger values are treated as data errors and capped
MAX_MINUTES = 7 * 24 * 60


def empty_dish_frame() -> pd.DataFrame:
    return pd.DataFrame(columns=DISH_COLUMNS)


def coerce_minutes(column: pd.Series) -> pd.Series:
    """Non-numeric, non-finite or negative values become 0; huge values are capped."""
    values = pd.to_numeric(column, errors="coerce").astype(float)
    values = values.replace([np.inf, -np.inf], np.nan)
    return values.fillna(0).clip(lower=0, upper=MAX_MINUTES).astype(int)


def _split_ingredients(value: Any) -> list[str]:
    if isinstance(value, list):
        items = value
    elif isinstance(value, str):
        items = value.split(",")
    else:
        return []
    return [str(i).strip() for i in items if str(i).strip()]


class RecordStore:
    """
    Flat JSON collections of dishes and users.

    Each call re-reads the backing file; there is no cache and no index.
    Missing files are created as empty collections on first access.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    # ── File helpers ─────────────────────────────────────────────────────

    @staticmethod
    def _ensure_file(path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        if not path.exists():
            path.write_text("[]", encoding="utf-8")

    def _read_records(self, path: Path) -> list[dict[str, Any]]:
        self._ensure_file(path)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise StoreReadError(f"Cannot read {path}: {exc}") from exc
        if not isinstance(raw, list) or not all(isinstance(r, dict) for r in raw):
            raise StoreReadError(f"{path} must hold a JSON array of objects")
        return raw

    def _write_records(self, path: Path, records: list[dict[str, Any]]) -> None:
        self._ensure_file(path)
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(json.dumps(records, indent=2), encoding="utf-8")
        tmp.replace(path)

    # ── Dishes ───────────────────────────────────────────────────────────

    def load_dishes(self) -> pd.DataFrame:
        """Return the dish collection as a DataFrame in file order."""
        records = self._read_records(self._settings.dishes_path)
        if not records:
            return empty_dish_frame()

        df = pd.DataFrame.from_records(records, columns=DISH_COLUMNS)

        for col in _TEXT_COLUMNS:
            df[col] = df[col].fillna("").astype(str).str.strip()
        df["diet"] = df["diet"].map(normalize_diet)
        df["ingredients"] = df["ingredients"].apply(_split_ingredients)

        for col in _TIME_COLUMNS:
            df[col] = coerce_minutes(df[col])

        unknown_diet = ~df["diet"].isin(_DIET_VALUES)
        if unknown_diet.any():
            logger.warning(
                "Skipping %d dish records with an unknown diet value",
                int(unknown_diet.sum()),
            )
            df = df.loc[~unknown_diet].reset_index(drop=True)

        return df

    # ── Users ────────────────────────────────────────────────────────────

    def load_users(self) -> list[User]:
        records = self._read_records(self._settings.users_path)
        try:
            return [User.model_validate(r) for r in records]
        except ValidationError as exc:
            raise StoreReadError(f"Malformed user record in {self._settings.users_path}") from exc

    def find_user_by_email(self, email: str) -> User | None:
        for user in self.load_users():
            if user.email == email:
                return user
        return None

    def find_user_by_id(self, user_id: str) -> User | None:
        for user in self.load_users():
            if user.id == user_id:
                return user
        return None

    def append_user(self, user: User) -> None:
        path = self._settings.users_path
        records = self._read_records(path)
        records.append(user.model_dump(mode="json"))
        self._write_records(path, records)
