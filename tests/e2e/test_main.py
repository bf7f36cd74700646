"""End-to-end tests for main application."""

from src.main import APP_VERSION, app


class TestMainApplication:
    """Test FastAPI application initialization."""

    def test_app_initialization(self):
        assert app.title == "Messenger Webhook Bot"
        assert app.version == APP_VERSION

    def test_root_endpoint(self, test_client):
        response = test_client.get("/")

        assert response.status_code == 200
        assert response.json() == {"message": "Messenger Webhook Bot API", "version": APP_VERSION}

    def test_router_registration(self):
        paths = {route.path for route in app.routes}

        assert {"/health", "/webhook", "/authorize"} <= paths

    def test_lifespan_initializes_observability(self, mock_settings, mock_logfire):
        from fastapi.testclient import TestClient

        with TestClient(app) as client:
            assert client.get("/health").status_code == 200

        mock_logfire.configure.assert_called_once()
        startup = [call.args[0] for call in mock_logfire.info.call_args_list]
        assert "Application startup complete" in startup
        assert "Application shutdown complete" in startup
