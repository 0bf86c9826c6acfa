"""
Tests for configuration defaults and the service health endpoints.
"""
from config import Config, config


class TestConfig:

    def test_trip_defaults(self):
        assert config.STOP_PROXIMITY_METERS == 30.0
        assert config.AUTO_CLEAR_STOPS is True
        assert config.AVERAGE_BUS_SPEED_KMH > 0

    def test_cors_origins_split(self, monkeypatch):
        monkeypatch.setattr(Config, "CORS_ORIGINS", "http://a.test, http://b.test,")
        assert Config.get_cors_origins() == ["http://a.test", "http://b.test"]

    def test_cors_origins_default(self, monkeypatch):
        monkeypatch.setattr(Config, "CORS_ORIGINS", "")
        assert Config.get_cors_origins() == ["*"]

    def test_database_password_is_masked(self, monkeypatch):
        monkeypatch.setattr(Config, "DATABASE_URL", "postgresql://bus:secret@db:5432/campus")
        assert Config.get_config_dict()["DATABASE_URL"] == "postgresql://***@db:5432/campus"


class TestRootEndpoints:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert "Campus Bus Tracker" in response.json()["message"]

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] in ("ok", "degraded")
        assert body["config"]["STOP_PROXIMITY_METERS"] == 30.0
