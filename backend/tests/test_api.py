from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from energyalloc.api.deps import get_allocation_store
from energyalloc.main import _evict_idle_buckets, _request_buckets, app, run
from energyalloc.services.store import InMemoryAllocationStore


SITES = [
    {"consumptionSiteId": "S1", "name": "Alpha", "c2": 80, "c1": 20},
    {"consumptionSiteId": "S2", "name": "Beta", "c2": 20, "c1": 80},
]


@pytest.fixture
def store() -> InMemoryAllocationStore:
    return InMemoryAllocationStore()


@pytest.fixture
def client(store: InMemoryAllocationStore):
    app.dependency_overrides[get_allocation_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client: TestClient) -> None:
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json()["ok"] is True


def test_normalize_and_allocate(client: TestClient) -> None:
    records = [
        {"shareholderCompanyId": "A", "shareholdingPercentage": 30},
        {"shareholderCompanyName": "Beta Mills", "shareholdingPercentage": {"N": "20"}},
    ]
    response = client.post("/api/v1/shareholdings/normalize", json={"records": records})
    assert response.status_code == 200
    body = response.json()
    assert [row["shareholder_key"] for row in body] == ["A", "Beta Mills"]
    assert Decimal(body[0]["normalized_percentage"]) == Decimal("60")

    response = client.post(
        "/api/v1/shareholdings/allocate",
        json={"total_units": 100, "company_id": "Beta Mills", "records": records},
    )
    assert response.status_code == 200
    assert Decimal(response.json()["allocated_units"]) == Decimal("40.00")

    response = client.post(
        "/api/v1/shareholdings/allocate",
        json={"total_units": 100, "company_id": "nobody", "records": records},
    )
    assert Decimal(response.json()["allocated_units"]) == 0


def test_auto_split_does_not_persist(client: TestClient, store: InMemoryAllocationStore) -> None:
    response = client.post("/api/v1/allocation-percentages/auto-split", json={"sites": SITES})
    assert response.status_code == 200
    body = response.json()
    assert body["strategy"] == "legacy"
    assert body["percentages"] == [50, 50]
    assert [entry["consumption_site_id"] for entry in body["entries"]] == ["S1", "S2"]
    assert body["validation"]["valid"] is True
    assert store.load("allocationPercentages") is None


def test_auto_split_with_named_strategy(client: TestClient) -> None:
    sites = [{"consumptionSiteId": str(index), "c2": 10} for index in range(3)]
    legacy = client.post("/api/v1/allocation-percentages/auto-split", json={"sites": sites}).json()
    exact = client.post(
        "/api/v1/allocation-percentages/auto-split",
        json={"sites": sites, "strategy": "largest_remainder"},
    ).json()
    assert legacy["percentages"] == [33, 33, 33]
    assert legacy["validation"]["valid"] is False
    assert exact["percentages"] == [34, 33, 33]
    assert exact["validation"]["valid"] is True


def test_auto_split_without_sites_is_rejected(client: TestClient) -> None:
    response = client.post("/api/v1/allocation-percentages/auto-split", json={"sites": []})
    assert response.status_code == 400


def test_save_load_and_annotate(client: TestClient) -> None:
    assert client.get("/api/v1/allocation-percentages").json() == []

    entries = [
        {"site_name": "Alpha", "consumption_site_id": "S1", "percentage": 70},
        {"site_name": "Beta", "consumption_site_id": "S2", "percentage": 30},
    ]
    response = client.put("/api/v1/allocation-percentages", json={"entries": entries})
    assert response.status_code == 200
    assert response.json()["validation"]["valid"] is True

    saved = client.get("/api/v1/allocation-percentages").json()
    assert [(row["consumption_site_id"], Decimal(row["percentage"])) for row in saved] == [
        ("S1", Decimal("70")),
        ("S2", Decimal("30")),
    ]

    response = client.post(
        "/api/v1/allocation-percentages/annotate",
        json={"rows": [{"consumptionSiteId": "S2", "c1": 5}, {"consumptionSiteId": "S3", "c1": 1}]},
    )
    rows = response.json()["rows"]
    assert Decimal(str(rows[0]["allocated_pct"])) == Decimal("30")
    assert Decimal(str(rows[1]["allocated_pct"])) == 0

    response = client.post("/api/v1/allocation-percentages/initial", json={"sites": SITES + [{"consumptionSiteId": "S3"}]})
    assert [Decimal(value) for value in response.json()["percentages"]] == [70, 30, 0]


def test_save_rejects_total_off_hundred(client: TestClient, store: InMemoryAllocationStore) -> None:
    entries = [
        {"site_name": "Alpha", "consumption_site_id": "S1", "percentage": 33},
        {"site_name": "Beta", "consumption_site_id": "S2", "percentage": 33},
        {"site_name": "Gamma", "consumption_site_id": "S3", "percentage": 33},
    ]
    response = client.put("/api/v1/allocation-percentages", json={"entries": entries})
    assert response.status_code == 422
    assert response.json()["detail"] == ["Total allocation must equal 100%; got 99%."]
    assert store.load("allocationPercentages") is None


def test_initial_percentages_fall_back_to_equal_split(client: TestClient) -> None:
    sites = [{"consumptionSiteId": "S1"}, {"consumptionSiteId": "S2"}, {"consumptionSiteId": "S3"}]
    response = client.post("/api/v1/allocation-percentages/initial", json={"sites": sites})
    assert [Decimal(value) for value in response.json()["percentages"]] == [34, 33, 33]


def test_validate_endpoint(client: TestClient) -> None:
    response = client.post("/api/v1/allocation-percentages/validate", json={"percentages": [33, 33, 34]})
    assert response.json()["valid"] is True
    response = client.post("/api/v1/allocation-percentages/validate", json={"percentages": [33, 33, 33]})
    assert response.json()["valid"] is False


def test_unit_allocation_endpoint(client: TestClient) -> None:
    response = client.post(
        "/api/v1/unit-allocations/calculate",
        json={
            "production_units": [{"productionSiteId": "P1", "type": "SOLAR", "c2": 100}],
            "consumption_units": [{"consumptionSiteId": "C1", "c1": 60}],
        },
    )
    assert response.status_code == 200
    body = response.json()
    assert body["allocations"][0]["allocation_type"] == "Allocation"
    assert Decimal(body["allocations"][0]["allocated"]["c1"]) == 60
    assert Decimal(body["lapse_allocations"][0]["allocated"]["c2"]) == 40


def test_compliance_endpoints(client: TestClient) -> None:
    response = client.post(
        "/api/v1/compliance/form-va",
        json={"financial_year": "2024-2025", "production_rows": [{"sk": "042024", "c1": 1000}]},
    )
    assert response.status_code == 200
    assert Decimal(response.json()["aggregate_generation"]) == Decimal("950")

    response = client.post("/api/v1/compliance/form-vb", json={"financial_year": "24-25"})
    assert response.status_code == 400


def test_allocate_large_totals_and_rejects_absurd_ones(client: TestClient) -> None:
    records = [
        {"shareholderCompanyId": "A", "shareholdingPercentage": 60},
        {"shareholderCompanyId": "B", "shareholdingPercentage": 40},
    ]
    response = client.post(
        "/api/v1/shareholdings/allocate",
        json={"total_units": "1e27", "company_id": "A", "records": records},
    )
    assert response.status_code == 200
    assert Decimal(response.json()["allocated_units"]) == Decimal("6e26")

    response = client.post(
        "/api/v1/shareholdings/allocate",
        json={"total_units": "1e31", "company_id": "A", "records": records},
    )
    assert response.status_code == 422


def test_annotate_groups_rows_by_month(client: TestClient) -> None:
    entries = [
        {"site_name": "Alpha", "consumption_site_id": "S1", "percentage": 60},
        {"site_name": "Beta", "consumption_site_id": "S2", "percentage": 40},
    ]
    assert client.put("/api/v1/allocation-percentages", json={"entries": entries}).status_code == 200

    rows = [
        {"consumptionSiteId": "S1", "sk": "052024", "c1": 1},
        {"consumptionSiteId": "S2", "sk": "042024", "c1": 2},
        {"consumptionSiteId": "S1", "sk": "042024", "c1": 3},
    ]
    body = client.post("/api/v1/allocation-percentages/annotate", json={"rows": rows}).json()
    assert [month["month"] for month in body["months"]] == ["042024", "052024"]
    april = body["months"][0]["rows"]
    assert [row["c1"] for row in april] == [2, 3]
    assert [Decimal(str(row["allocated_pct"])) for row in april] == [Decimal("40"), Decimal("60")]


def test_idle_rate_limit_buckets_are_evicted() -> None:
    _request_buckets["10.0.0.1:/stale"].append(0.0)
    _request_buckets["10.0.0.2:/fresh"].append(1000.0)
    _evict_idle_buckets(1010.0)
    assert "10.0.0.1:/stale" not in _request_buckets
    assert "10.0.0.2:/fresh" in _request_buckets
    _request_buckets.clear()


def test_run_serves_app_on_configured_address(monkeypatch: pytest.MonkeyPatch) -> None:
    import uvicorn

    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda target, **kwargs: calls.append((target, kwargs)))
    run()
    assert calls == [(app, {"host": "127.0.0.1", "port": 8000})]
