"""
Configuration for the one-shot dish dataset conversion.
"""

from dataclasses import dataclass
from pathlib import Path

_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


@dataclass(frozen=True)
class IngestionConfig:
    """
    Where the source CSV lives and where the converted dish collection goes.
    """

    source_csv: Path = _DATA_DIR / "indian_food.csv"
    output_dir: Path = _DATA_DIR
    output_filename: str = "dishes.json"

    @property
    def output_path(self) -> Path:
        return self.output_dir / self.output_filename


DEFAULT_INGESTION_CONFIG = IngestionConfig()
