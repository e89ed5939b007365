from __future__ import annotations

import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from dish_catalog.app import create_app
from dish_catalog.catalog.data_store import RecordStore
from dish_catalog.catalog.engine import QueryEngine
from dish_catalog.config import Settings

SAMPLE_DISHES: list[dict] = [
    {
        "id": "d1", "name": "Balu shahi",
        "ingredients": ["Maida flour", "yogurt", "oil", "sugar"],
        "diet": "vegetarian", "prep_time": 45, "cook_time": 25,
        "flavor_profile": "sweet", "course": "dessert", "state": "West Bengal", "region": "East",
    },
    {
        "id": "d2", "name": "Boondi",
        "ingredients": ["Gram flour", "ghee", "sugar"],
        "diet": "vegetarian", "prep_time": 80, "cook_time": 30,
        "flavor_profile": "sweet", "course": "dessert", "state": "Rajasthan", "region": "West",
    },
    {
        "id": "d3", "name": "Gajar ka halwa",
        "ingredients": ["Carrots", "milk", "sugar", "ghee", "cashews", "raisins"],
        "diet": "vegetarian", "prep_time": 15, "cook_time": 60,
        "flavor_profile": "sweet", "course": "dessert", "state": "Punjab", "region": "North",
    },
    {
        "id": "d4", "name": "Chicken Tikka masala",
        "ingredients": ["Chicken", "rice flour", "garam masala powder", "whole egg"],
        "diet": "non vegetarian", "prep_time": 10, "cook_time": 45,
        "flavor_profile": "spicy", "course": "main course", "state": "Punjab", "region": "North",
    },
    {
        "id": "d5", "name": "Biryani",
        "ingredients": ["Chicken thighs", "basmati rice", "star anise", "Ghee"],
        "diet": "non vegetarian", "prep_time": 30, "cook_time": 120,
        "flavor_profile": "spicy", "course": "main course", "state": "Telangana", "region": "South",
    },
    {
        "id": "d6", "name": "Pongal",
        "ingredients": ["Rice", "moong dal", "ghee", "black pepper"],
        "diet": "vegetarian", "prep_time": 10, "cook_time": 30,
        "flavor_profile": "spicy", "course": "main course", "state": "Tamil Nadu", "region": "South",
    },
    {
        "id": "d7", "name": "Poha",
        "ingredients": ["Flattened rice", "onion", "peanuts"],
        "diet": "vegetarian", "prep_time": 10, "cook_time": 15,
        "flavor_profile": "spicy", "course": "snack", "state": "Maharashtra", "region": "West",
    },
    {
        "id": "d8", "name": "Dhokla",
        "ingredients": ["Gram flour", "curd", "mustard seeds"],
        "diet": "vegetarian", "prep_time": 15, "cook_time": 30,
        "flavor_profile": "spicy", "course": "snack", "state": "Gujarat", "region": "West",
    },
]


def make_dishes(count: int) -> list[dict]:
    return [
        {
            "id": f"dish-{i}",
            "name": f"Dish {i:03d}",
            "ingredients": ["rice", "salt"],
            "diet": "vegetarian" if i % 2 else "non vegetarian",
            "prep_time": i % 40,
            "cook_time": i % 90,
            "flavor_profile": "spicy",
            "course": "main course",
            "state": "Kerala",
            "region": "South",
        }
        for i in range(count)
    ]


def write_dishes(settings: Settings, records: list[dict]) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.dishes_path.write_text(json.dumps(records), encoding="utf-8")


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(data_dir=tmp_path / "data", jwt_secret="test-secret", bcrypt_rounds=4)


@pytest.fixture
def store(settings: Settings) -> RecordStore:
    return RecordStore(settings)


@pytest.fixture
def engine(settings: Settings, store: RecordStore) -> QueryEngine:
    write_dishes(settings, SAMPLE_DISHES)
    return QueryEngine(store, settings)


@pytest.fixture
def client(settings: Settings) -> TestClient:
    write_dishes(settings, SAMPLE_DISHES)
    return TestClient(create_app(settings))


@pytest.fixture
def auth_headers(client: TestClient) -> dict[str, str]:
    resp = client.post("/api/auth/register", json={
        "username": "tester", "email": "tester@example.com", "password": "pw-123456",
    })
    return {"Authorization": f"Bearer {resp.json()['token']}"}
