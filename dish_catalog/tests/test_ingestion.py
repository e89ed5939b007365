import json
from pathlib import Path

import pytest

from dish_catalog.catalog.data_store import MAX_MINUTES, RecordStore
from dish_catalog.config import Settings
from dish_catalog.data_ingestion.config import IngestionConfig
from dish_catalog.data_ingestion.ingest import CANONICAL_COLUMNS, run_ingestion

CSV = """name,ingredients,diet,prep_time,cook_time,flavor_profile,course,state,region
Balu shahi,"Maida flour, yogurt, oil, sugar",vegetarian,45,25,sweet,dessert,West Bengal,East
Chapati,"Atta,  salt, ",vegetarian,-1,abc,-1,main course,-1,-1
Broken,row,with,too,many,fields,for,the,header,extra,more
Biryani,"Chicken thighs, basmati rice, ghee",non vegetarian,30,120,spicy,main course,Telangana,South
"""


def test_run_ingestion_writes_dish_collection(tmp_path: Path):
    """
    End-to-end conversion from the CSV source to the JSON collection.

    Uses a temporary output directory so we don't pollute the real data directory.
    """
    source = tmp_path / "indian_food.csv"
    source.write_text(CSV, encoding="utf-8")
    cfg = IngestionConfig(source_csv=source, output_dir=tmp_path / "data")

    output_path = run_ingestion(config=cfg)

    assert output_path.is_file(), "Dish collection should be created"
    dishes = json.loads(output_path.read_text(encoding="utf-8"))
    assert [d["name"] for d in dishes] == ["Balu shahi", "Chapati", "Biryani"]
    assert list(dishes[0]) == CANONICAL_COLUMNS
    assert dishes[0]["ingredients"] == ["Maida flour", "yogurt", "oil", "sugar"]
    assert dishes[1]["ingredients"] == ["Atta", "salt"]
    assert dishes[1]["prep_time"] == 0
    assert dishes[1]["cook_time"] == 0
    assert len({d["id"] for d in dishes}) == 3


def test_ingested_collection_loads_in_store(tmp_path: Path):
    source = tmp_path / "indian_food.csv"
    source.write_text(CSV, encoding="utf-8")
    settings = Settings(data_dir=tmp_path / "data")
    run_ingestion(IngestionConfig(source_csv=source, output_dir=settings.data_dir))

    df = RecordStore(settings).load_dishes()
    assert len(df) == 3
    assert df["cook_time"].tolist() == [25, 0, 120]


def test_run_ingestion_missing_source(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        run_ingestion(IngestionConfig(source_csv=tmp_path / "missing.csv", output_dir=tmp_path))


def test_run_ingestion_caps_non_finite_times(tmp_path: Path):
    source = tmp_path / "indian_food.csv"
    source.write_text(
        "name,ingredients,diet,prep_time,cook_time,flavor_profile,course,state,region\n"
        'Kheer,"Rice, milk",vegetarian,Infinity,1e30,sweet,dessert,Punjab,North\n',
        encoding="utf-8",
    )
    output_path = run_ingestion(IngestionConfig(source_csv=source, output_dir=tmp_path / "data"))

    dish = json.loads(output_path.read_text(encoding="utf-8"))[0]
    assert dish["prep_time"] == 0
    assert dish["cook_time"] == MAX_MINUTES
