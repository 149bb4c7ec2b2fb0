"""
Tests for environment selection, navigation and the package-level client factory.
"""
from unittest.mock import Mock, patch

import pytest

from vehicleprep import create_client
from vehicleprep.api.navigation import Navigator, redirect_to_login
from vehicleprep.api.notifications import LoggingNotifier, RecordingNotifier, get_notifier, set_notifier
from vehicleprep.api.storage import MemoryStorage, TokenStore
from vehicleprep.config import LocalConfig, ProductionConfig, SandboxConfig, get_config
from vehicleprep.logging_config import redact_secrets


class TestGetConfig:

    @pytest.mark.parametrize("env,expected", [
        ("local", LocalConfig),
        ("dev", LocalConfig),
        ("staging", SandboxConfig),
        ("sandbox", SandboxConfig),
        ("prod", ProductionConfig),
        ("PRODUCTION", ProductionConfig),
        ("something-else", LocalConfig),
    ])
    def test_environment_selection(self, monkeypatch, env, expected):
        monkeypatch.setenv("ENVIRONMENT", env)
        assert get_config() is expected

    def test_defaults(self):
        assert ProductionConfig.API_TIMEOUT_SECONDS == 10
        assert ProductionConfig.LOGIN_PATH == "/login"
        assert ProductionConfig.API_BASE_URL


class TestRedirectToLogin:

    def test_redirects(self):
        navigator = Navigator("/admin/schedules")
        assert redirect_to_login(navigator) is True
        assert navigator.pathname == "/login"

    def test_already_on_login(self):
        navigator = Navigator("/login?next=/admin")
        assert redirect_to_login(navigator) is False
        assert navigator.history == ["/login?next=/admin"]

    def test_never_raises(self):
        navigator = Mock(pathname="/admin")
        navigator.navigate.side_effect = RuntimeError("router gone")
        assert redirect_to_login(navigator) is False


class TestNotifierSwap:

    def test_set_notifier_returns_previous(self, notifier):
        replacement = LoggingNotifier()
        previous = set_notifier(replacement)
        try:
            assert previous is notifier
            assert get_notifier() is replacement
        finally:
            set_notifier(previous)
        assert isinstance(get_notifier(), RecordingNotifier)


class TestCreateClient:

    def test_builds_client_from_config(self):
        token_store = TokenStore(MemoryStorage())
        with patch("vehicleprep.configure_logging") as mock_logging:
            client = create_client(ProductionConfig, token_store=token_store, base_url="http://api.test/api/")

        mock_logging.assert_called_once_with(log_level=ProductionConfig.LOG_LEVEL, log_file=ProductionConfig.LOG_FILE)
        assert client.base_url == "http://api.test/api"
        assert client.environment == "production"
        assert client.token_store is token_store
        client.close()


class TestRedactSecrets:

    def test_masks_credentials(self):
        event = redact_secrets(None, "info", {
            "event": "Login failed",
            "email": "prep@agency.test",
            "password": "secret",
            "refresh-token": "rtk1",
            "Authorization": "Bearer abc",
            "token": None,
        })

        assert event["email"] == "prep@agency.test"
        assert event["password"] == "[redacted]"
        assert event["refresh-token"] == "[redacted]"
        assert event["Authorization"] == "[redacted]"
        assert event["token"] is None
