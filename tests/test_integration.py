import pytest
from fastapi.testclient import TestClient

from src.smartroute.api.routes import osrm as osrm_routes
from src.smartroute.api.routes import routes as route_endpoints
from src.smartroute.config import settings
from src.smartroute.errors import (
    GraphInconsistencyError,
    NoRouteFoundError,
    ProviderError,
    RequestSupersededError,
)
from src.smartroute.main import create_app
from src.smartroute.persistence.database import RouteStore


@pytest.fixture
def api_client(monkeypatch: pytest.MonkeyPatch) -> TestClient:
    # Keep every provider and the database offline.
    monkeypatch.setattr(settings, "tomtom_api_key", None)
    monkeypatch.setattr(settings, "mapbox_token", None)
    monkeypatch.setattr(settings, "osrm_relay_url", None)
    monkeypatch.setattr(route_endpoints, "RouteStore", lambda: RouteStore(client_factory=lambda: None))
    return TestClient(create_app())


def _raise(exc: Exception):
    async def _fake(payload):
        raise exc

    return _fake


def test_health(api_client: TestClient) -> None:
    response = api_client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_provider_health_reflects_configuration(api_client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "tomtom_api_key", "real-key")
    monkeypatch.setattr(settings, "mapbox_token", "placeholder-token")

    body = api_client.get("/api/health/providers").json()

    assert body == {"cache": True, "tomtom": True, "mapbox": False, "osrm": False, "synthetic": True}


def test_list_locations(api_client: TestClient) -> None:
    response = api_client.get("/api/routes/locations")

    assert response.status_code == 200
    ids = {location["id"] for location in response.json()}
    assert len(ids) == 14
    assert {"connaught_place", "india_gate", "iffco_chowk"} <= ids


def test_generate_graph_routes(api_client: TestClient) -> None:
    response = api_client.post(
        "/api/routes/generate",
        json={
            "start": {"name": "Connaught Place"},
            "end": {"name": "India Gate"},
            "departure_time": "2024-01-15T18:00:00",
            "seed": 7,
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["search"]["start_location"] == "Connaught Place"
    routes = body["routes"]
    assert 1 <= len(routes) <= 3
    assert routes[0]["is_optimal"] is True
    assert sum(route["is_optimal"] for route in routes) == 1
    assert all(route["source"] == "graph" for route in routes)
    assert routes[0]["path_coordinates"][0] == {"lat": 28.6315, "lng": 77.2167}


def test_generate_off_graph_routes_use_synthetic_geometry(api_client: TestClient) -> None:
    response = api_client.post(
        "/api/routes/generate",
        json={
            "start": {"name": "Vasant Kunj", "lat": 28.52, "lng": 77.158},
            "end": {"name": "Mayur Vihar", "lat": 28.604, "lng": 77.295},
            "seed": 3,
        },
        headers={"X-Client-Session": "browser-tab-1"},
    )

    assert response.status_code == 200
    route = response.json()["routes"][0]
    assert route["source"] == "synthetic"
    assert route["route_name"] == "Primary Route"
    assert route["path_coordinates"][0] == {"lat": 28.52, "lng": 77.158}
    assert route["path_coordinates"][-1] == {"lat": 28.604, "lng": 77.295}
    junction = route["junctions"][0]
    assert junction["time_with_ai"] <= junction["time_without_ai"]


def test_explicit_coordinates_are_not_replaced_by_a_same_named_node(api_client: TestClient) -> None:
    response = api_client.post(
        "/api/routes/generate",
        json={
            "start": {"name": "Connaught Place", "lat": 19.076, "lng": 72.8777},
            "end": {"name": "India Gate"},
            "seed": 1,
        },
    )

    assert response.status_code == 200
    route = response.json()["routes"][0]
    assert route["source"] == "synthetic"
    assert route["path_coordinates"][0] == {"lat": 19.076, "lng": 72.8777}
    assert route["path_coordinates"][-1] == {"lat": 28.6129, "lng": 77.2295}


def test_generate_rejects_half_coordinates(api_client: TestClient) -> None:
    response = api_client.post(
        "/api/routes/generate",
        json={"start": {"name": "Somewhere", "lat": 28.5}, "end": {"name": "India Gate"}},
    )

    assert response.status_code == 422


@pytest.mark.parametrize(
    "exc, status_code",
    [
        (NoRouteFoundError("No route found between 'a' and 'b'."), 404),
        (ValueError("bad waypoints"), 400),
        (GraphInconsistencyError("No road declared between 'a' and 'b'."), 500),
        (RuntimeError("boom"), 500),
        (RequestSupersededError("superseded"), 409),
    ],
)
def test_generate_error_mapping(
    api_client: TestClient, monkeypatch: pytest.MonkeyPatch, exc: BaseException, status_code: int
) -> None:
    monkeypatch.setattr(route_endpoints, "_generate", _raise(exc))

    response = api_client.post(
        "/api/routes/generate",
        json={"start": {"name": "Connaught Place"}, "end": {"name": "India Gate"}},
    )

    assert response.status_code == status_code


def test_select_route_without_database(api_client: TestClient) -> None:
    response = api_client.post("/api/routes/searches/search-1/select", json={"route_id": "route-1"})

    assert response.status_code == 200
    assert response.json() == {"search_id": "search-1", "route_id": "route-1", "persisted": False}


def test_osrm_relay_validates_coordinates(api_client: TestClient) -> None:
    response = api_client.get("/api/osrm/route", params={"coordinates": "77.2167,28.6315"})

    assert response.status_code == 400


def test_osrm_relay_returns_upstream_payload(api_client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_relay(client, coordinates):
        return {"code": "Ok", "routes": [], "echo": coordinates}

    monkeypatch.setattr(osrm_routes, "relay_route", fake_relay)

    response = api_client.get("/api/osrm/route", params={"coordinates": "77.2167,28.6315;77.2295,28.6129"})

    assert response.status_code == 200
    assert response.json()["echo"] == "77.2167,28.6315;77.2295,28.6129"


def test_osrm_relay_maps_upstream_failure_to_502(api_client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    async def failing_relay(client, coordinates):
        raise ProviderError("All OSRM endpoints failed")

    monkeypatch.setattr(osrm_routes, "relay_route", failing_relay)

    response = api_client.get("/api/osrm/route", params={"coordinates": "77.2167,28.6315;77.2295,28.6129"})

    assert response.status_code == 502
