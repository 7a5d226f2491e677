"""Tests for Settings and application wiring."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from segmentguard.api.router import api_router
from segmentguard.config import Settings, get_settings
from segmentguard.main import create_app, lifespan
from segmentguard.validation import PipelineDefinitionError, Segment, build_middleware
from segmentguard.validation.rules import string


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("PORT", "DEBUG", "COOKIE_SECRET", "API_PREFIX", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)
        assert settings.PORT == 3000
        assert settings.DEBUG is False
        assert settings.COOKIE_SECRET == ""
        assert settings.API_PREFIX == "/api/v1"

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("COOKIE_SECRET", "s3cret")
        settings = Settings(_env_file=None)
        assert settings.PORT == 8080
        assert settings.COOKIE_SECRET == "s3cret"

    def test_cached(self):
        assert get_settings() is get_settings()


class TestCreateApp:
    def test_routes_under_prefix(self):
        app = create_app(Settings(_env_file=None, API_PREFIX="/api/v1", LOG_LEVEL="warning"))
        with TestClient(app) as client:
            assert client.get("/api/v1/health").status_code == 200
            assert client.get("/api/v1/notes/short").status_code == 400

    def test_no_secret_disables_signed_cookies(self):
        app = create_app(Settings(_env_file=None, API_PREFIX="", COOKIE_SECRET="", LOG_LEVEL="warning"))
        assert app.state.cookie_signer is None
        with TestClient(app) as client:
            response = client.get("/profile", headers={"cookie": "name=Alice; jwt=s:abc.def"})
        validation = response.json()["validation"]
        assert validation["cookies"]["keys"] == ["jwt"]
        assert validation["signedCookies"]["keys"] == ["jwt"]

    def test_startup_aborts_without_responder(self):
        app = FastAPI(lifespan=lifespan)
        app.state.settings = Settings(_env_file=None)

        @app.get("/q", dependencies=[build_middleware({Segment.QUERY: {"q": string()}})])
        async def q():
            return {}

        with pytest.raises(PipelineDefinitionError):
            with TestClient(app):
                pass

    def test_startup_aborts_for_included_routers_without_responder(self):
        app = FastAPI(lifespan=lifespan)
        app.state.settings = Settings(_env_file=None)
        app.include_router(api_router)

        with pytest.raises(PipelineDefinitionError, match="/signup"):
            with TestClient(app):
                pass

    def test_unhandled_errors_render_500(self, app):
        @app.get("/explode")
        async def explode():
            raise RuntimeError("kaboom")

        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/explode")
        assert response.status_code == 500
        assert response.json()["error"] == "internal_server_error"
