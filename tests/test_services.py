from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from pydantic import TypeAdapter

from config import Settings
from main import create_app


def parse_ts(value):
    return TypeAdapter(datetime).validate_python(value)


def test_create_service_coerces_price_and_applies_defaults(client):
    response = client.post("/services", json={
        "title": "T",
        "description": "D",
        "category": "plumbing",
        "price": "75.5",
        "providerId": "p1",
    })
    assert response.status_code == 201
    service = response.json()
    assert service["price"] == 75.5
    assert service["availability"] == "available"
    assert service["rating"] == 0
    assert service["reviewCount"] == 0
    assert service["images"] == []
    assert service["location"] == ""
    assert service["providerName"] == ""


@pytest.mark.parametrize("missing", ["title", "description", "category", "price", "providerId"])
def test_create_service_requires_fields(client, missing):
    body = {"title": "T", "description": "D", "category": "plumbing", "price": 10, "providerId": "p1"}
    del body[missing]
    response = client.post("/services", json=body)
    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields"}


@pytest.mark.parametrize("field, value", [
    ("price", "cheap"),
    ("price", -5),
    ("rating", 7),
    ("reviewCount", "many"),
])
def test_create_service_rejects_bad_numbers(client, field, value):
    body = {"title": "T", "description": "D", "category": "plumbing", "price": 10, "providerId": "p1"}
    body[field] = value
    response = client.post("/services", json=body)
    assert response.status_code == 400
    assert "error" in response.json()


def test_get_service_by_id(client, make_service):
    service = make_service(images=["https://img/1.jpg", "https://img/2.jpg"])
    fetched = client.get("/services", params={"id": service["id"]}).json()
    assert fetched["id"] == service["id"]
    assert fetched["images"] == ["https://img/1.jpg", "https://img/2.jpg"]
    assert client.get("/services", params={"id": "missing"}).status_code == 404


def test_listing_satisfies_every_filter(client, make_service):
    make_service(category="plumbing", price=50, rating=4.5, location="Austin, TX")
    make_service(category="plumbing", price=120, rating=3.0, location="Dallas, TX")
    make_service(category="plumbing", price=90, rating=4.9, location="AUSTIN, TX", providerId="p2")
    make_service(category="electrical", price=90, rating=5, location="Austin, TX")

    params = {"category": "plumbing", "minPrice": 50, "maxPrice": 90, "rating": 4.5, "location": "austin"}
    services = client.get("/services", params=params).json()

    assert len(services) == 2
    for service in services:
        assert service["category"] == "plumbing"
        assert 50 <= service["price"] <= 90
        assert service["rating"] >= 4.5
        assert "austin" in service["location"].lower()

    by_provider = client.get("/services", params={"providerId": "p2"}).json()
    assert [s["providerId"] for s in by_provider] == ["p2"]


def test_listing_is_newest_first_and_capped(client, make_service):
    for i in range(55):
        make_service(title=f"Job {i}")

    services = client.get("/services").json()
    assert len(services) == 50
    created = [parse_ts(s["createdAt"]) for s in services]
    assert created == sorted(created, reverse=True)
    assert services[0]["title"] == "Job 54"


def test_invalid_filter_value_is_rejected(client):
    response = client.get("/services", params={"minPrice": "abc"})
    assert response.status_code == 400


def test_update_and_delete_service(client, make_service):
    service = make_service()
    updated = client.put("/services", params={"id": service["id"]}, json={"price": 95, "availability": "busy"})
    assert updated.status_code == 200
    assert updated.json()["price"] == 95
    assert updated.json()["availability"] == "busy"
    assert updated.json()["title"] == service["title"]

    assert client.put("/services", json={"price": 1}).status_code == 400
    assert client.put("/services", params={"id": "missing"}, json={"price": 1}).status_code == 404

    deleted = client.delete("/services", params={"id": service["id"]})
    assert deleted.json() == {"message": "Service deleted successfully"}
    assert client.get("/services").json() == []


def test_demo_mode_serves_sample_catalog():
    app = create_app(Settings(database_url="", demo_mode=True))
    with TestClient(app) as client:
        services = client.get("/services").json()
        assert len(services) == 6
        assert {s["category"] for s in services} == {
            "plumbing", "electrical", "hvac", "cleaning", "painting", "flooring"
        }

        cheap = client.get("/services", params={"maxPrice": 80}).json()
        assert cheap and all(s["price"] <= 80 for s in cheap)

        assert client.get("/services", params={"id": "1"}).json()["title"] == "Professional Plumbing Services"


def test_demo_mode_is_never_inferred():
    app = create_app(Settings(database_url="", demo_mode=False))
    with TestClient(app) as client:
        response = client.get("/services")
        assert response.status_code == 500
        assert response.json() == {"error": "Database not configured"}


@pytest.mark.parametrize("params", [
    {"minPrice": "nan"},
    {"maxPrice": "inf"},
    {"rating": "-inf"},
])
def test_non_finite_filters_are_rejected(client, make_service, params):
    make_service(price=80)
    response = client.get("/services", params=params)
    assert response.status_code == 400
    assert set(response.json()) == {"error"}


@pytest.mark.parametrize("params", [{"minPrice": "nan"}, {"maxPrice": "inf"}])
def test_non_finite_filters_are_rejected_in_demo_mode(params):
    app = create_app(Settings(database_url="", demo_mode=True))
    with TestClient(app) as client:
        response = client.get("/services", params=params)
        assert response.status_code == 400
