from unittest import mock

import pytest

pytestmark = pytest.mark.integration


class TestHealthCheck:
    def test_health_check_returns_200(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "timestamp" in data
        assert set(data["services"]) == {"database", "cache", "broker"}

    def test_health_check_reports_database_status(self, client):
        data = client.get("/health").json()
        assert data["services"]["database"]["status"] == "up"
        assert "response_time_ms" in data["services"]["database"]

    def test_health_check_reports_cache_status(self, client):
        data = client.get("/health").json()
        assert data["services"]["cache"]["status"] == "up"
        assert "response_time_ms" in data["services"]["cache"]

    def test_broker_outage_keeps_shop_healthy(self, client):
        with mock.patch.dict(
            "modules.core.views.HEALTH_CHECKS",
            {"broker": mock.Mock(side_effect=ConnectionError("no broker"))},
        ):
            response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["services"]["broker"] == {"status": "down"}

    def test_database_outage_is_503(self, client):
        with mock.patch.dict(
            "modules.core.views.HEALTH_CHECKS",
            {"database": mock.Mock(side_effect=ConnectionError("db gone"))},
        ):
            response = client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"
