from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List
from uuid import uuid4

import pandas as pd

from ..catalog.data_store import coerce_minutes
from .config import DEFAULT_INGESTION_CONFIG, IngestionConfig

logger = logging.getLogger(__name__)

CANONICAL_COLUMNS: List[str] = [
    "id",
    "name",
    "ingredients",
    "diet",
    "prep_time",
    "cook_time",
    "flavor_profile",
    "course",
    "state",
    "region",
]

_TEXT_COLUMNS = ["name", "diet", "flavor_profile", "course", "state", "region"]


def _parse_ingredients(raw: str) -> list[str]:
    return [i.strip() for i in str(raw).split(",") if i.strip()]


def run_ingestion(config: IngestionConfig = DEFAULT_INGESTION_CONFIG) -> Path:
    """
    Convert the dish CSV into the JSON collection served by the catalog.

    Steps:
    - Read the CSV, skipping rows whose column count does not match the header.
    - Split the comma-separated ingredients field into a list.
    - Coerce preparation and cook times to non-negative integers.
    - Assign every dish a fresh unique id and write ``dishes.json``.
    """
    if not config.source_csv.is_file():
        raise FileNotFoundError(f"Dish CSV not found at {config.source_csv}")

    config.output_dir.mkdir(parents=True, exist_ok=True)

    df = pd.read_csv(
        config.source_csv,
        dtype=str,
        keep_default_na=False,
        skipinitialspace=True,
        on_bad_lines="skip",
    ).fillna("")
    df.columns = [c.strip() for c in df.columns]

    canonical = pd.DataFrame(index=df.index)
    canonical["id"] = [str(uuid4()) for _ in range(len(df))]
    for col in _TEXT_COLUMNS:
        canonical[col] = df[col].str.strip() if col in df.columns else ""
    canonical["ingredients"] = (
        df["ingredients"].apply(_parse_ingredients)
        if "ingredients" in df.columns
        else [[] for _ in range(len(df))]
    )
    for col in ("prep_time", "cook_time"):
        canonical[col] = coerce_minutes(df[col]) if col in df.columns else 0

    canonical = canonical[CANONICAL_COLUMNS]

    output_path = config.output_path
    canonical.to_json(output_path, orient="records", indent=2, force_ascii=False)
    logger.info("Converted %d dishes into %s", len(canonical), output_path)
    return output_path


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    source = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_INGESTION_CONFIG.source_csv
    path = run_ingestion(IngestionConfig(source_csv=source))
    print(f"Ingestion complete. Dish collection saved to: {path}")
