"""End-to-end tests of the HTTP surface with fake remote clients."""

from __future__ import annotations

from dataclasses import replace
from typing import Callable
from urllib.parse import urlsplit

import httpx
import pytest
from conftest import (
    PNG_BYTES,
    FakeBackgroundClient,
    FakePhotoAnalyzer,
    FakeSuggestionClient,
    suggestion_response,
)
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text

from outfitter.api.container import build_container
from outfitter.api.main import create_app
from outfitter.config.settings import Settings
from outfitter.db.session import Database
from outfitter.imgproc.normalize import to_data_uri
from outfitter.storage.backend import LocalStorage

USER = {"X-User-Id": "u1"}


@pytest.fixture
def app_factory(
    storage: LocalStorage,
    suggestion_client: FakeSuggestionClient,
    photo_analyzer: FakePhotoAnalyzer,
    background_client: FakeBackgroundClient,
    http_client: httpx.AsyncClient,
) -> Callable[[Settings], FastAPI]:
    def _create(settings: Settings) -> FastAPI:
        container = build_container(
            settings,
            database=Database(settings.database_url),
            storage=storage,
            suggestion_client=suggestion_client,  # type: ignore[arg-type]
            photo_analyzer=photo_analyzer,  # type: ignore[arg-type]
            background_client=background_client,  # type: ignore[arg-type]
            http_client=http_client,
        )
        return create_app(settings, container)

    return _create


@pytest.fixture
def client(settings: Settings, app_factory: Callable[[Settings], FastAPI]) -> TestClient:
    with TestClient(app_factory(settings)) as test_client:
        yield test_client


def _profile_count(settings: Settings) -> int:
    engine = create_engine(settings.database_url.replace("+aiosqlite", ""))
    try:
        with engine.connect() as conn:
            return conn.scalar(text("SELECT COUNT(*) FROM profiles"))
    finally:
        engine.dispose()


def _add_item(client: TestClient, type_: str, color: str) -> dict:
    response = client.post(
        "/items",
        headers=USER,
        json={
            "items": [
                {
                    "photo_url": f"https://cdn.example.com/{type_}.png",
                    "storage_path": f"wardrobe-items/u1/{type_}.png",
                    "type": type_,
                    "color": color,
                    "texture": "cotton",
                    "fit": "regular",
                    "season": "all",
                },
            ],
        },
    )
    assert response.status_code == 201
    return response.json()[0]


def test_requests_without_identity_are_rejected(client: TestClient) -> None:
    response = client.post("/outfits", json={"name": "x", "category": "Casual", "item_ids": ["a"]})

    assert response.status_code == 401
    assert response.json() == {"error": "User not authenticated."}
    assert client.get("/planner").json() == []


def test_gateway_token_comes_from_app_settings(
    settings: Settings,
    app_factory: Callable[[Settings], FastAPI],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("IDENTITY_GATEWAY_TOKEN", "from-env")

    with TestClient(app_factory(replace(settings, gateway_token="internal"))) as gated:
        assert gated.get("/items", headers=USER).status_code == 401
        assert gated.get("/items", headers={**USER, "X-Internal-Token": "from-env"}).status_code == 401
        ok = gated.get("/items", headers={**USER, "X-Internal-Token": "internal"})
        assert ok.status_code == 200

    with TestClient(app_factory(settings)) as open_client:
        assert open_client.get("/items", headers=USER).status_code == 200


def test_outfit_lifecycle_and_item_cascade(client: TestClient) -> None:
    shirt = _add_item(client, "shirt", "blue")
    jeans = _add_item(client, "jeans", "black")

    created = client.post(
        "/outfits",
        headers=USER,
        json={"name": "Weekend", "category": "Casual", "item_ids": [shirt["id"], jeans["id"]]},
    )
    assert created.status_code == 201
    outfit_id = created.json()["id"]

    planned = client.put("/planner/2024-07-01", headers=USER, json={"outfit_ids": [outfit_id]})
    assert planned.json()["outfit_ids"] == [outfit_id]

    deleted = client.post("/items/delete", headers=USER, json={"item_ids": [shirt["id"]]})
    assert deleted.json() == {"success": True, "deleted": 1}
    assert client.get(f"/outfits/{outfit_id}", headers=USER).json()["item_ids"] == [jeans["id"]]

    assert client.delete(f"/outfits/{outfit_id}", headers=USER).json() == {"success": True}
    assert client.get("/planner", headers=USER).json() == []
    assert client.get(f"/outfits/{outfit_id}", headers=USER).status_code == 404


def test_invalid_outfit_and_foreign_access(client: TestClient) -> None:
    shirt = _add_item(client, "shirt", "blue")

    invalid = client.post("/outfits", headers=USER, json={"name": "", "category": "Casual", "item_ids": [shirt["id"]]})
    assert invalid.status_code == 422
    assert "required" in invalid.json()["error"]

    created = client.post(
        "/outfits",
        headers=USER,
        json={"name": "Mine", "category": "Casual", "item_ids": [shirt["id"]]},
    ).json()
    stranger = {"X-User-Id": "u2"}
    assert client.get(f"/outfits/{created['id']}", headers=stranger).status_code == 403
    assert client.get(f"/items/{shirt['id']}", headers=stranger).status_code == 404


def test_generate_uses_profile_weight_and_returns_reconciled_ids(
    client: TestClient, suggestion_client: FakeSuggestionClient
) -> None:
    shirt = _add_item(client, "shirt", "blue")
    jeans = _add_item(client, "jeans", "black")
    client.put("/profile", headers=USER, json={"gender_preference": "female", "unused_item_preference": "low"})
    suggestion_client.response = suggestion_response(
        [("shirt", "blue"), ("jeans", "black")],
        [("jeans", "black")],
        [("hat", "red")],
    )

    response = client.post("/outfits/generate", headers=USER, json={"style_preferences": "casual"})

    assert response.status_code == 200
    outfits = response.json()["outfits"]
    assert [outfit["item_ids"] for outfit in outfits] == [[shirt["id"], jeans["id"]], [jeans["id"]], []]
    assert suggestion_client.requests[0].unused_item_priority == 0.3
    assert client.get("/outfits", headers=USER).json() == []


def test_generate_without_profile_uses_default_weight_and_writes_nothing(
    client: TestClient, settings: Settings, suggestion_client: FakeSuggestionClient
) -> None:
    _add_item(client, "shirt", "blue")
    _add_item(client, "jeans", "black")
    suggestion_client.response = suggestion_response([("shirt", "blue")], [("jeans", "black")], [])

    response = client.post("/outfits/generate", headers=USER, json={"style_preferences": "casual"})

    assert response.status_code == 200
    assert suggestion_client.requests[0].unused_item_priority == 0.6
    assert _profile_count(settings) == 0


def test_generate_failure_maps_to_bad_gateway(client: TestClient, suggestion_client: FakeSuggestionClient) -> None:
    _add_item(client, "shirt", "blue")
    _add_item(client, "jeans", "black")
    suggestion_client.response = None

    response = client.post("/outfits/generate", headers=USER, json={"style_preferences": "casual"})

    assert response.status_code == 502
    assert response.json() == {"error": "Failed to generate outfit. Please try again."}


def test_generate_with_one_item_is_rejected(client: TestClient, suggestion_client: FakeSuggestionClient) -> None:
    _add_item(client, "shirt", "blue")

    response = client.post("/outfits/generate", headers=USER, json={"style_preferences": "casual"})

    assert response.status_code == 422
    assert suggestion_client.requests == []


def test_processed_image_is_served_through_signed_url(client: TestClient) -> None:
    response = client.post(
        "/images/remove-background",
        headers=USER,
        json={"photo_data_uri": to_data_uri(b"raw", "image/jpeg")},
    )
    assert response.status_code == 200
    url = urlsplit(response.json()["photo_url"])

    media = client.get(f"{url.path}?{url.query}")
    assert media.status_code == 200
    assert media.content == PNG_BYTES
    assert media.headers["content-type"] == "image/png"

    tampered = client.get(f"{url.path}?{url.query.replace('signature=', 'signature=0')}")
    assert tampered.status_code == 403


def test_profile_round_trip(client: TestClient) -> None:
    assert client.get("/profile", headers=USER).json()["unit_preference"] == "metric"

    updated = client.put(
        "/profile",
        headers=USER,
        json={"gender_preference": "male", "unit_preference": "imperial", "feet": 6, "inches": 0},
    )
    assert updated.status_code == 200
    assert updated.json()["height"] == 72

    notifications = client.put("/profile/notifications", headers=USER, json={"notifications": {"email": False}})
    assert notifications.json()["notifications"] == {"email": False, "app_alerts": True}

    assert client.delete("/profile", headers=USER).json()["success"] is True
