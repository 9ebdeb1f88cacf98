"""
Integration tests for the Antimatter Simulation API
Tests end-to-end flows using FastAPI TestClient
"""

import pytest
from fastapi.testclient import TestClient

import antimatter_core.api
from antimatter_core.api import app, GameHost
from antimatter_core.bignumber import BigNumber
from antimatter_core.config import AntimatterConfig


@pytest.fixture
def host():
    """Fresh game host swapped in for the global one"""
    test_host = GameHost(config=AntimatterConfig())
    original_host = antimatter_core.api.game_host
    antimatter_core.api.game_host = test_host
    yield test_host
    antimatter_core.api.game_host = original_host


@pytest.fixture
def client(host):
    return TestClient(app)


class TestHealthEndpoints:
    """Test health and state endpoints"""

    def test_health(self, client):
        """Test health endpoint"""
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "healthy"

    def test_state(self, client):
        """Test the initial state"""
        r = client.get("/state")
        assert r.status_code == 200
        data = r.json()
        assert data["antimatter"] == "10"
        assert len(data["dimensions"]) == 8
        assert data["dimensions"][0]["unlocked"] is True
        assert data["dimensions"][2]["unlocked"] is False


class TestDimensionFlow:
    """End-to-end dimension purchases and ticks"""

    def test_buy_and_tick(self, client):
        """Test buying a unit and producing with it"""
        r = client.post("/dimensions/1/buy")
        assert r.status_code == 200
        assert r.json()["count"] == 1
        assert r.json()["antimatter"] == "9"

        r = client.post("/tick", json={"delta_seconds": 1.0})
        assert r.status_code == 200
        assert r.json()["advanced"] is True
        assert r.json()["antimatter"] == "10"

    def test_buy_count(self, client):
        r = client.post("/dimensions/1/buy", json={"count": 4})
        assert r.status_code == 200
        assert r.json()["spent"] == "4"

    def test_buy_max_and_until_ten(self, client, host):
        r = client.post("/dimensions/1/buy-max")
        assert r.status_code == 200
        assert r.json()["count"] == 10

        r = client.post("/dimensions/1/buy-until-ten")
        assert r.status_code == 409

        host.simulation.antimatter = BigNumber(1e5)
        host.simulation.buy_dimension(1, 1)
        r = client.post("/dimensions/1/buy-until-ten")
        assert r.status_code == 200
        assert r.json()["count"] == 9

    def test_rejected_purchases(self, client):
        """Test locked and unknown tiers"""
        assert client.post("/dimensions/3/buy").status_code == 409
        assert client.post("/dimensions/2/buy").status_code == 409
        assert client.post("/dimensions/9/buy").status_code == 404
        assert client.post("/dimensions/1/buy", json={"count": 0}).status_code == 422

    def test_invalid_tick(self, client):
        assert client.post("/tick", json={"delta_seconds": 0}).status_code == 422

    def test_tickspeed(self, client, host):
        assert client.post("/tickspeed/buy").status_code == 409
        host.simulation.antimatter = BigNumber(500)
        r = client.post("/tickspeed/buy")
        assert r.status_code == 200
        assert host.simulation.tickspeed.level == 1
        assert client.post("/tickspeed/buy-max").status_code == 409


class TestPrestigeFlow:
    """End-to-end prestige tests"""

    def test_prestige(self, client, host):
        assert client.post("/prestige").status_code == 409

        host.simulation.antimatter = BigNumber(1e10)
        r = client.post("/prestige")
        assert r.status_code == 200
        data = r.json()
        assert data["points_gained"] == 1
        assert data["milestones_unlocked"] == ["autobuyers_1_2"]

    def test_upgrades(self, client, host):
        assert client.post("/prestige/upgrades/unknown").status_code == 404
        assert client.post("/prestige/upgrades/dim1_mult").status_code == 409

        host.simulation.prestige.points = 1
        r = client.post("/prestige/upgrades/dim1_mult")
        assert r.status_code == 200
        assert r.json()["level"] == 1
        assert r.json()["points"] == 0


class TestOfflineFlow:
    """End-to-end offline bank tests"""

    def test_boost_lifecycle(self, client):
        assert client.post("/offline/boost", json={"multiplier": 2.0}).status_code == 409

        r = client.post("/offline/accumulate", json={"seconds": 3600})
        assert r.status_code == 200
        assert r.json()["stored_seconds"] == pytest.approx(1800)

        r = client.post("/offline/boost", json={"multiplier": 2.0})
        assert r.status_code == 200
        assert r.json()["remaining_seconds"] == pytest.approx(900)

        assert client.delete("/offline/boost").status_code == 200
        assert client.delete("/offline/boost").status_code == 409

    def test_offline_upgrades(self, client, host):
        assert client.post("/offline/upgrades/max-time").status_code == 409
        assert client.post("/offline/upgrades/speed").status_code == 404

        host.simulation.offline.stored_seconds = 43200
        r = client.post("/offline/upgrades/efficiency")
        assert r.status_code == 200
        assert r.json()["efficiency_ratio"] == pytest.approx(0.55)


class TestShopAndAutoBuyerFlow:
    """End-to-end shop and auto-buyer tests"""

    def test_shop(self, client):
        assert client.post("/shop/unknown").status_code == 404
        r = client.post("/shop/boost_dim_1_to_4")
        assert r.status_code == 200
        assert r.json()["level"] == 1
        assert r.json()["premium_currency"] == 900

    def test_autobuyers(self, client, host):
        assert client.put("/autobuyers/1", json={"enabled": True}).status_code == 409
        assert client.put("/autobuyers/12", json={"enabled": True}).status_code == 404

        host.simulation.autobuyers.unlock(1)
        r = client.put("/autobuyers/1", json={"enabled": True, "mode": "bulk"})
        assert r.status_code == 200
        assert r.json() == {"tier": 1, "unlocked": True, "enabled": True, "mode": "bulk"}

        assert client.post("/autobuyers/speed").status_code == 409


class TestSaveFlow:
    """End-to-end export and import"""

    def test_export_import(self, client, host):
        client.post("/dimensions/1/buy", json={"count": 3})
        exported = client.get("/save/export").json()["data"]

        client.post("/dimensions/1/buy", json={"count": 2})
        assert host.simulation.dimensions[1].bought == 5

        r = client.post("/save/import", json={"data": exported})
        assert r.status_code == 200
        assert host.simulation.dimensions[1].bought == 3
        assert client.get("/state").json()["antimatter"] == "7"

    def test_malformed_import(self, client, host):
        client.post("/dimensions/1/buy", json={"count": 3})

        r = client.post("/save/import", json={"data": "garbage!!"})

        assert r.status_code == 400
        assert host.simulation.dimensions[1].bought == 3
