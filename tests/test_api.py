"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from api.main_api import PrinterAPI
from config_loader import load_config
from discovery import PrinterDiscovery
from storage import FavoritesStore
from fakes import FakeFingerprinter, FakeProber, FakeResolver, fast_discovery_config


@pytest.fixture
def client(tmp_path):
    config = load_config(None)
    favorites = FavoritesStore(tmp_path)
    discovery = PrinterDiscovery(
        fast_discovery_config(),
        favorites=favorites,
        resolver=FakeResolver("192.168.1.42"),
        prober=FakeProber({("192.168.1.100", 80), ("10.1.1.9", 631)}),
        fingerprinter=FakeFingerprinter({"http://192.168.1.100": "HP"}),
    )
    api = PrinterAPI(discovery, favorites, config)
    return TestClient(api.app)


def test_discover_and_list(client) -> None:
    response = client.post("/api/printers/discover")
    assert response.status_code == 200
    devices = response.json()
    assert [d["id"] for d in devices] == ["printer-192.168.1.100"]
    assert devices[0]["manufacturer"] == "HP"
    assert devices[0]["status"] == "online"
    assert devices[0]["favorite"] is False

    listed = client.get("/api/printers").json()
    assert listed == devices


def test_scan_url_for_discovered_device(client) -> None:
    client.post("/api/printers/discover")

    response = client.get("/api/printers/printer-192.168.1.100/scan-url")

    assert response.status_code == 200
    body = response.json()
    assert body["scan_url"] == "http://192.168.1.100/hp/device/ScanMenu.html"
    assert body["qr_data"] == body["scan_url"]
    assert body["candidates"][0] == body["scan_url"]


def test_unknown_device_is_404(client) -> None:
    assert client.get("/api/printers/printer-10.9.9.9/scan-url").status_code == 404
    assert client.get("/api/printers/printer-10.9.9.9/status").status_code == 404


def test_device_status(client) -> None:
    client.post("/api/printers/discover")

    response = client.get("/api/printers/printer-192.168.1.100/status")

    assert response.json() == {"device_id": "printer-192.168.1.100", "status": "online"}


def test_manual_add(client) -> None:
    response = client.post("/api/printers/manual", json={"address": "10.1.1.9"})

    assert response.status_code == 200
    assert response.json()["id"] == "printer-10.1.1.9:631"
    assert response.json()["discovery_method"] == "manual"


def test_manual_add_errors(client) -> None:
    assert client.post("/api/printers/manual", json={"address": "nope"}).status_code == 422
    assert client.post("/api/printers/manual", json={"address": "10.1.1.10"}).status_code == 404


def test_favorites_round_trip(client) -> None:
    client.post("/api/printers/discover")

    assert client.put("/api/favorites/printer-192.168.1.100").json() == {
        "favorites": ["printer-192.168.1.100"]
    }
    assert client.get("/api/printers").json()[0]["favorite"] is True
    assert [d["id"] for d in client.get("/api/favorites/printers").json()] == ["printer-192.168.1.100"]

    assert client.delete("/api/favorites/printer-192.168.1.100").json() == {"favorites": []}
    assert client.get("/api/favorites").json() == {"favorites": []}


def test_cancel_when_idle(client) -> None:
    assert client.post("/api/printers/discover/cancel").json() == {"cancelled": False}


def test_health_and_discovery_status(client) -> None:
    client.post("/api/printers/discover")

    health = client.get("/api/system/health").json()
    assert health["status"] == "healthy"
    assert health["discovery"] == {"active": False, "device_count": 1}

    status = client.get("/api/system/discovery/status").json()
    assert status["active"] is False
    assert [r["method"] for r in status["last_results"]] == ["range_scan", "default_ips"]
