"""Tests for settings loading, logging setup and app wiring."""
import logging
import logging.handlers

import pytest
from fastapi.testclient import TestClient

from object_gateway.config import DEFAULT_LOG_FILE, DEFAULT_PORT, Settings, load_settings
from object_gateway.errors import ConfigurationError
from object_gateway.logging_config import configure_logging
from object_gateway.main import create_app
from object_gateway.store import HttpObjectStore

REQUIRED = {"BASE_API_URL": "https://api.example.test/", "AUTH_SECRET_KEY": "secret"}


def test_load_settings_defaults():
    settings = load_settings(REQUIRED)
    assert settings.base_api_url == "https://api.example.test"
    assert settings.auth_secret_key == "secret"
    assert settings.port == DEFAULT_PORT
    assert settings.request_timeout == 8
    assert settings.shutdown_grace == 8
    assert settings.log_file == DEFAULT_LOG_FILE


def test_load_settings_overrides():
    env = {
        **REQUIRED,
        "PORT": "9090",
        "HOST": "127.0.0.1",
        "REQUEST_TIMEOUT_SECONDS": "3",
        "LOG_LEVEL": "debug",
        "LOG_FILE": "",
    }
    settings = load_settings(env)
    assert settings.port == 9090
    assert settings.host == "127.0.0.1"
    assert settings.request_timeout == 3
    assert settings.log_level == "DEBUG"
    assert settings.log_file is None


@pytest.mark.parametrize("missing", ["BASE_API_URL", "AUTH_SECRET_KEY"])
def test_missing_required_variable(missing):
    env = {k: v for k, v in REQUIRED.items() if k != missing}
    with pytest.raises(ConfigurationError, match=missing):
        load_settings(env)


def test_blank_required_variable_counts_as_missing():
    with pytest.raises(ConfigurationError, match="AUTH_SECRET_KEY"):
        load_settings({**REQUIRED, "AUTH_SECRET_KEY": "  "})


def test_non_integer_port():
    with pytest.raises(ConfigurationError, match="PORT"):
        load_settings({**REQUIRED, "PORT": "eighty"})


def test_configure_logging_adds_rotating_file_once(tmp_path):
    log_file = tmp_path / "logs" / "app.log"
    settings = Settings(base_api_url="http://x", auth_secret_key="s", log_file=str(log_file))
    root = logging.getLogger()
    before = list(root.handlers)
    try:
        configure_logging(settings)
        configure_logging(settings)
        added = [h for h in root.handlers if h not in before]
        rotating = [h for h in added if isinstance(h, logging.handlers.RotatingFileHandler)]
        assert len(rotating) == 1
        assert len(added) == 2
        logging.getLogger("object_gateway.test").warning("written to file")
        rotating[0].flush()
        assert "written to file" in log_file.read_text()
    finally:
        for handler in root.handlers[:]:
            if handler not in before:
                root.removeHandler(handler)
                handler.close()


def test_create_app_defaults_to_http_store():
    settings = Settings(base_api_url="http://upstream.test", auth_secret_key="s", log_file=None)
    app = create_app(settings)
    assert isinstance(app.state.store, HttpObjectStore)
    assert app.state.store.base_url == "http://upstream.test"
    app.state.store.close()


def test_lifespan_closes_store(app, store):
    with TestClient(app) as client:
        assert client.get("/health").status_code == 200
    assert store.closed
