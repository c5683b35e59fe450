"""Tests for /build endpoints."""

from fastapi.testclient import TestClient


def test_requirements_two_handed(client: TestClient) -> None:
    response = client.post(
        "/build/requirements",
        json={"weapons": [{"name": "Zweihander", "two_handed": True}]},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["minimum"]["strength"] == 16
    assert data["minimum"]["dexterity"] == 10
    assert data["is_valid"] is None
    assert data["suggested_stats"] is None


def test_requirements_with_stats(client: TestClient) -> None:
    data = client.post(
        "/build/requirements",
        json={
            "weapons": [{"name": "Claymore"}],
            "stats": {"strength": 12, "dexterity": 12},
        },
    ).json()
    assert data["is_valid"] is False
    assert data["checks"]["strength"]["required"] == 16
    assert data["checks"]["strength"]["error"]
    assert data["checks"]["dexterity"]["is_valid"] is True
    assert data["suggested_stats"]["strength"] == 16


def test_unknown_item_is_422(client: TestClient) -> None:
    response = client.post("/build/requirements", json={"sorceries": ["Dark Orb"]})
    assert response.status_code == 422
    assert "Dark Orb" in response.json()["detail"]


def test_out_of_range_stats_is_422(client: TestClient) -> None:
    response = client.post("/build/requirements", json={"stats": {"faith": 100}})
    assert response.status_code == 422
    detail = response.json()["detail"]
    assert "faith" in detail["errors"]


def test_starting_classes(client: TestClient) -> None:
    response = client.post("/build/starting-classes", json={})
    assert response.status_code == 200
    results = response.json()["results"]
    assert len(results) == 10
    assert results[0]["id"] == "pyromancer"
    assert results[0]["soul_level_needed"] == 1


def test_starting_classes_rejects_unmet_requirements(client: TestClient) -> None:
    response = client.post(
        "/build/starting-classes",
        json={"weapons": [{"name": "Zweihander"}], "stats": {"strength": 10}},
    )
    assert response.status_code == 422
    assert "strength" in response.json()["detail"]["errors"]
