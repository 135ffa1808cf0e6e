import random

import pytest
from fastapi.testclient import TestClient

from smart_menu.app import app
from smart_menu.dependencies import get_orchestrator, get_store
from smart_menu.preferences.store import InMemoryPreferenceStore
from smart_menu.recommendations.retrieval import DishOrchestrator

from conftest import WEDNESDAY_EVENING, InMemoryGateway, make_dish

client = TestClient(app)

CATALOG = [
    make_dish("201", "Chicken Skewers", "Chicken"),
    make_dish("202", "Garlic Prawns", "Seafood", ingredients=("Shrimp", "Garlic", "Butter")),
    make_dish("203", "Lentil Soup", "Vegetarian", ingredients=("Lentils", "Carrot", "Onion")),
]


@pytest.fixture
def store():
    return InMemoryPreferenceStore(clock=lambda: WEDNESDAY_EVENING)


@pytest.fixture
def catalog():
    return list(CATALOG)


@pytest.fixture(autouse=True)
def overrides(store, catalog):
    def orchestrator():
        return DishOrchestrator(
            InMemoryGateway(catalog),
            store=store,
            rng=random.Random(4),
            clock=lambda: WEDNESDAY_EVENING,
        )

    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_orchestrator] = orchestrator
    yield
    app.dependency_overrides.clear()


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_metadata():
    body = client.get("/metadata").json()
    assert body["occasions"] == ["breakfast", "lunch", "dinner"]
    assert "Italian" in body["cuisines"]
    assert "Breakfast" in body["categories"]["breakfast"]
    assert "gluten-free" in body["dietary_restrictions"]


class TestSmartDish:
    def test_post_returns_envelope_and_records_history(self):
        resp = client.post("/smart-dish", json={"occasion": "dinner"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "success"
        assert body["occasion"] == "dinner"
        assert len(body["dishes"]) == 1
        assert body["dishes"][0]["dish"]["id"] in {"201", "202", "203"}
        assert body["metadata"]["total_dishes_found"] == 3

        history = client.get("/history").json()
        assert [h["id"] for h in history] == [body["dishes"][0]["dish"]["id"]]

    def test_post_without_history(self):
        client.post("/smart-dish", json={"occasion": "dinner", "record_history": False})
        assert client.get("/history").json() == []

    def test_clear_history_allows_repeats_again(self, store):
        first = client.post("/smart-dish", json={"occasion": "dinner"}).json()["dishes"][0]["dish"]["id"]
        assert store.shown_within(first, 3)

        resp = client.delete("/history")
        assert resp.status_code == 200
        assert resp.json() == {"status": "cleared"}
        assert client.get("/history").json() == []
        assert not store.shown_within(first, 3)

    def test_post_with_inline_preferences(self):
        prefs = {"dietary_restrictions": ["vegetarian"], "blacklist": [{"id": "202"}]}
        body = client.post("/smart-dish", json={"occasion": "dinner", "preferences": prefs}).json()
        assert body["dishes"][0]["dish"]["id"] == "203"

    def test_get_with_query(self):
        resp = client.get("/smart-dish", params={"type": "dinner", "count": 2})
        assert resp.status_code == 200
        body = resp.json()
        assert len(body["dishes"]) == 2
        assert body["metadata"]["selection_method"] == "diverse"

    @pytest.mark.parametrize("payload", [
        {"count": 11},
        {"count": 0},
        {"occasion": "brunch"},
        {"preferences": {"preferred_complexity": "extreme"}},
        {"preferences": {"max_cooking_time": -1}},
    ])
    def test_invalid_request_rejected(self, payload):
        assert client.post("/smart-dish", json=payload).status_code == 422

    def test_invalid_query_rejected(self):
        assert client.get("/smart-dish", params={"type": "brunch"}).status_code == 422

    def test_empty_catalog_still_returns_a_dish(self, catalog):
        catalog.clear()
        body = client.post("/smart-dish", json={"occasion": "lunch"}).json()
        assert body["status"] == "fallback"
        assert body["dishes"][0]["dish"]["id"].startswith("fallback-lunch-")


class TestPreferences:
    def test_put_and_get(self):
        resp = client.put("/preferences", json={
            "disliked_ingredients": ["Olives"],
            "dietary_restrictions": ["pescatarian"],
            "preferred_cuisines": ["Thai"],
        })
        assert resp.status_code == 200
        body = client.get("/preferences").json()
        assert body["disliked_ingredients"] == ["olives"]
        assert body["dietary_restrictions"] == ["pescatarian"]

    def test_put_rejects_unknown_restriction(self):
        assert client.put("/preferences", json={"dietary_restrictions": ["carnivore"]}).status_code == 422

    def test_stored_preferences_drive_get_endpoint(self):
        client.put("/preferences", json={"dietary_restrictions": ["vegetarian"]})
        body = client.get("/smart-dish", params={"type": "dinner"}).json()
        assert body["dishes"][0]["dish"]["id"] in {"202", "203"}

    def test_favorites(self):
        resp = client.post("/favorites", json={"id": "201", "name": "Chicken Skewers", "category": "Chicken"})
        assert resp.json() == {"status": "added", "total": 1}
        assert client.post("/favorites", json={"id": "201"}).json()["status"] == "exists"
        assert client.delete("/favorites/201").status_code == 200
        assert client.delete("/favorites/201").status_code == 404

    def test_blacklist_excludes_dish(self):
        client.post("/blacklist", json={"id": "201"})
        client.post("/blacklist", json={"id": "202"})
        body = client.post("/smart-dish", json={"occasion": "dinner"}).json()
        assert body["dishes"][0]["dish"]["id"] == "203"
        assert client.delete("/blacklist/201").json() == {"status": "removed", "total": 1}
        assert client.delete("/blacklist/999").status_code == 404


def test_analytics_tracks_requests(catalog):
    assert client.get("/analytics").json()["total_requests"] == 0
    client.post("/smart-dish", json={"occasion": "dinner"})
    catalog.clear()
    client.post("/smart-dish", json={"occasion": "breakfast"})

    body = client.get("/analytics").json()
    assert body["total_requests"] == 2
    assert body["status_breakdown"] == {"success": 1, "fallback": 1}
    assert body["fallback_rate"] == 50.0
    assert {o["name"] for o in body["top_occasions"]} == {"dinner", "breakfast"}
