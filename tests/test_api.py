"""Tests for the Flask REST API."""

from __future__ import annotations

import pytest

from api.app import create_app


@pytest.fixture
def client(tmp_path):
    app = create_app(tmp_path / "data")
    app.testing = True
    return app.test_client()


def _post(client, url, payload):
    response = client.post(url, json=payload)
    return response, response.get_json()


def test_create_and_list_expenses(client) -> None:
    response, body = _post(
        client, "/expenses", {"business": "Bakery", "amount": "20", "date": "2024-02-01"}
    )
    assert response.status_code == 201
    assert body["business"] == "Bakery"
    assert body["amount"] == "20.00"
    _post(client, "/expenses", {"business": "Cafe", "amount": 5, "date": "2024-03-01"})

    listing = client.get("/expenses").get_json()
    assert [item["date"] for item in listing["items"]] == ["2024-03-01", "2024-02-01"]
    assert listing["total"] == "25.00"

    filtered = client.get("/expenses?business=Bakery&start=2024-01-01").get_json()
    assert len(filtered["items"]) == 1
    assert filtered["total"] == "20.00"

    names = [item["name"] for item in client.get("/businesses").get_json()["items"]]
    assert names == ["Bakery", "Cafe"]


def test_update_and_delete_credit(client) -> None:
    _, created = _post(client, "/credits", {"business": "Farm", "amount": 100, "date": "2024-05-05"})

    response = client.put(f"/credits/{created['id']}", json={"amount": 150, "note": "harvest"})
    assert response.status_code == 200
    assert response.get_json()["amount"] == "150.00"
    assert client.get(f"/credits/{created['id']}").get_json()["note"] == "harvest"

    assert client.delete(f"/credits/{created['id']}").status_code == 204
    assert client.get(f"/credits/{created['id']}").status_code == 404


def test_validation_errors_map_to_400(client) -> None:
    response, body = _post(client, "/credits", {"business": "Farm", "amount": "x", "date": "2024-05-05"})
    assert response.status_code == 400
    assert body["error"] == "Validation error"

    response = client.post("/credits", data="plain", content_type="text/plain")
    assert response.status_code == 400

    assert client.get("/credits?start=yesterday").status_code == 400


def test_summary_and_ranking(client) -> None:
    _post(client, "/credits", {"business": "A", "amount": 500, "date": "2025-01-10"})
    _post(client, "/expenses", {"business": "A", "amount": 200, "date": "2025-01-15"})
    _post(client, "/credits", {"business": "B", "amount": 100, "date": "2025-02-01"})

    summary = client.get("/summary").get_json()
    assert summary["businesses"]["A"]["profit_margin_percent"] == "60.00"
    assert summary["overall"]["profit"] == "400.00"
    assert [bucket["month"] for bucket in summary["overall"]["chart"]] == ["Jan 2025", "Feb 2025"]
    assert summary["skipped"] == []

    ranking = client.get("/ranking").get_json()["items"]
    assert [(item["rank"], item["business"]) for item in ranking] == [(1, "B"), (2, "A")]


def test_business_endpoints(client) -> None:
    response, body = _post(client, "/businesses", {"name": "Studio"})
    assert response.status_code == 201
    response, again = _post(client, "/businesses", {"name": "Studio"})
    assert response.status_code == 200
    assert again["id"] == body["id"]

    assert client.get("/businesses/Studio/report").status_code == 404

    _post(client, "/credits", {"business": "Studio", "amount": 30, "date": "2024-07-07"})
    report = client.get("/businesses/Studio/report").get_json()
    assert report["summary"]["total_credit"] == "30.00"
    assert len(report["credits"]) == 1
    assert report["expenses"] == []
