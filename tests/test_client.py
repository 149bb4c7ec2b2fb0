"""
Tests for the authenticated client: bearer injection, 401 handling with a
shared refresh, replay of queued requests and the session-expired redirect.
"""
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock, patch

import pytest
import requests

from tests.conftest import BASE_URL, build_response, ok
from vehicleprep.api.client import ApiClient, CLIENT_NAME
from vehicleprep.api.exceptions import MissingRefreshTokenError
from vehicleprep.api.navigation import Navigator
from vehicleprep.api.storage import MemoryStorage, TokenStore
from vehicleprep.config import ProductionConfig


def sent_headers(client, call_index):
    return client.session.request.call_args_list[call_index].kwargs["headers"]


class TestRequestInterceptor:

    def test_attaches_bearer_token(self, client, token_store):
        token_store.set_access_token("abc")
        client.session.request.return_value = ok({"id": 1})

        client.get("/agencies")

        args = client.session.request.call_args
        assert args.args == ("GET", f"{BASE_URL}/agencies")
        assert args.kwargs["headers"]["Authorization"] == "Bearer abc"
        assert args.kwargs["timeout"] == 10

    def test_no_token_passes_through(self, client, storage):
        storage.set_item("auth-token", "null")
        client.session.request.return_value = ok()

        client.get("/health")

        assert "Authorization" not in sent_headers(client, 0)

    def test_explicit_authorization_is_kept(self, client, token_store):
        token_store.set_access_token("abc")
        client.session.request.return_value = ok()

        client.get("/x", headers={"Authorization": "Bearer other"})

        assert sent_headers(client, 0)["Authorization"] == "Bearer other"

    def test_multipart_drops_json_content_type(self, client):
        client.session.request.return_value = ok()

        client.put("/preparations/p1/step", data={"step": "exterior"}, files={"photo": b"jpeg"})

        assert sent_headers(client, 0)["Content-Type"] is None

    def test_local_environment_headers_and_cache_buster(self, token_store):
        local_client = ApiClient(base_url=BASE_URL, token_store=token_store, environment="local")
        assert local_client.session.headers["X-Client"] == CLIENT_NAME
        assert local_client.session.headers["X-Requested-With"] == "XMLHttpRequest"
        assert local_client.session.headers["Content-Type"] == "application/json"

        local_client.session = Mock(spec=requests.Session)
        local_client.session.request.return_value = ok()
        local_client.get("/agencies", params={"page": 2})

        params = local_client.session.request.call_args.kwargs["params"]
        assert params["page"] == 2
        assert isinstance(params["_t"], int)

    def test_absolute_url_is_not_prefixed(self, client):
        client.session.request.return_value = ok()
        client.get("https://other.test/ping")
        assert client.session.request.call_args.args[1] == "https://other.test/ping"


class TestErrorResponses:

    def test_non_401_error_raises_http_error(self, client):
        client.session.request.return_value = build_response(404, {"success": False, "message": "Not found"})

        with patch("vehicleprep.api.refresh.requests.post") as mock_post:
            with pytest.raises(requests.HTTPError) as exc_info:
                client.get("/agencies/missing")

        assert exc_info.value.response.status_code == 404
        mock_post.assert_not_called()

    def test_timeout_never_enters_refresh(self, client):
        client.session.request.side_effect = requests.Timeout("timed out")

        with patch("vehicleprep.api.refresh.requests.post") as mock_post:
            with pytest.raises(requests.Timeout):
                client.get("/agencies")

        mock_post.assert_not_called()

    def test_401_without_refresh_opt_in_is_returned_as_error(self, client, token_store):
        token_store.save_credentials("abc", "rtk1")
        client.session.request.return_value = build_response(401, {"message": "Invalid credentials"})

        with patch("vehicleprep.api.refresh.requests.post") as mock_post:
            with pytest.raises(requests.HTTPError):
                client.post("/auth/login", {"email": "a@b.c"}, refresh_on_401=False)

        mock_post.assert_not_called()
        assert token_store.get_access_token() == "abc"


class TestTokenRefresh:

    def test_example_scenario_replays_with_new_token(self, client, storage):
        storage.set_item("auth-token", "abc")
        storage.set_item("token", "abc")
        storage.set_item("refresh-token", "rtk1")
        client.session.request.side_effect = [
            build_response(401, {"success": False, "message": "Token expired"}),
            ok({"agencies": []}),
        ]

        with patch("vehicleprep.api.refresh.requests.post") as mock_post:
            mock_post.return_value = build_response(200, {"success": True, "data": {"token": "xyz"}})
            response = client.get("/admin/agencies")

        assert response.status_code == 200
        assert mock_post.call_args.kwargs["json"] == {"refreshToken": "rtk1"}
        assert mock_post.call_args.args[0] == f"{BASE_URL}/auth/refresh"
        assert sent_headers(client, 0)["Authorization"] == "Bearer abc"
        assert sent_headers(client, 1)["Authorization"] == "Bearer xyz"
        assert storage.get_item("auth-token") == "xyz"
        assert storage.get_item("token") == "xyz"

    def test_replay_is_not_refreshed_again(self, client, token_store):
        token_store.save_credentials("abc", "rtk1")
        client.session.request.return_value = build_response(401, {"message": "Still unauthorized"})

        with patch("vehicleprep.api.refresh.requests.post") as mock_post:
            mock_post.return_value = build_response(200, {"data": {"token": "xyz"}})
            with pytest.raises(requests.HTTPError) as exc_info:
                client.get("/auth/me")

        assert exc_info.value.response.status_code == 401
        assert mock_post.call_count == 1
        assert client.session.request.call_count == 2

    def test_failed_refresh_clears_storage_and_redirects(self, client, storage, session_storage, navigator):
        storage.set_item("auth-token", "abc")
        storage.set_item("token", "abc")
        storage.set_item("refresh-token", "rtk1")
        storage.set_item("refresh_token", "rtk1")
        storage.set_item("authToken", "abc")
        storage.set_item("user_data", "{}")
        client.session.request.return_value = build_response(401, {"message": "Token expired"})

        with patch("vehicleprep.api.refresh.requests.post") as mock_post:
            mock_post.return_value = build_response(401, {"message": "Refresh token revoked"})
            with pytest.raises(requests.HTTPError):
                client.get("/auth/me")

        assert storage.keys() == []
        assert session_storage.keys() == []
        assert navigator.pathname == "/login"

    def test_missing_refresh_token_ends_session(self, client, token_store, navigator):
        token_store.set_access_token("abc")
        client.session.request.return_value = build_response(401, {"message": "Token expired"})

        with patch("vehicleprep.api.refresh.requests.post") as mock_post:
            with pytest.raises(MissingRefreshTokenError):
                client.get("/auth/me")

        mock_post.assert_not_called()
        assert token_store.get_access_token() is None
        assert navigator.pathname == "/login"

    def test_no_redirect_when_already_on_login(self, client, token_store, navigator):
        navigator.navigate("/login")
        client.session.request.return_value = build_response(401)

        with pytest.raises(MissingRefreshTokenError):
            client.get("/auth/me")

        assert navigator.history == ["/dashboard", "/login"]

    def test_custom_session_expired_callback(self, token_store):
        on_expired = Mock()
        api_client = ApiClient(base_url=BASE_URL, token_store=token_store,
                               on_session_expired=on_expired, environment="production")
        api_client.session = Mock(spec=requests.Session)
        api_client.session.request.return_value = build_response(401)

        with pytest.raises(MissingRefreshTokenError):
            api_client.get("/auth/me")

        on_expired.assert_called_once_with()


class TestConcurrentRefresh:
    """N requests failing with 401 in the same wave share one refresh."""

    N = 4

    @pytest.fixture
    def wave_client(self, client, token_store):
        token_store.save_credentials("abc", "rtk1")
        barrier = threading.Barrier(self.N, timeout=5)

        def fake_request(method, url, **kwargs):
            if kwargs["headers"].get("Authorization") == "Bearer abc":
                # Every request sees the expired token before anyone refreshes
                barrier.wait()
                return build_response(401, {"message": "Token expired"}, url=url)
            return build_response(200, {"success": True, "data": {"url": url}}, url=url)

        client.session.request.side_effect = fake_request
        return client

    def _run_wave(self, client):
        with ThreadPoolExecutor(max_workers=self.N) as pool:
            futures = [pool.submit(client.get, f"/items/{i}") for i in range(self.N)]
            return [f.result(timeout=10) for f in futures]

    def test_single_refresh_for_the_whole_wave(self, wave_client, token_store):
        coordinator = wave_client.coordinator

        def refresh_once_everyone_waits(*args, **kwargs):
            deadline = time.monotonic() + 5
            while coordinator.pending_count() < self.N - 1 and time.monotonic() < deadline:
                time.sleep(0.005)
            return build_response(200, {"success": True, "data": {"token": "xyz"}})

        with patch("vehicleprep.api.refresh.requests.post", side_effect=refresh_once_everyone_waits) as mock_post:
            responses = self._run_wave(wave_client)

        assert mock_post.call_count == 1
        assert [r.status_code for r in responses] == [200] * self.N

        calls = wave_client.session.request.call_args_list
        assert len(calls) == 2 * self.N
        replayed = [c for c in calls if c.kwargs["headers"].get("Authorization") == "Bearer xyz"]
        assert sorted(c.args[1] for c in replayed) == sorted(f"{BASE_URL}/items/{i}" for i in range(self.N))
        assert token_store.get_access_token() == "xyz"
        assert coordinator.is_refreshing is False

    def test_whole_wave_fails_when_refresh_fails(self, wave_client, storage, navigator):
        coordinator = wave_client.coordinator

        def refresh_rejected(*args, **kwargs):
            deadline = time.monotonic() + 5
            while coordinator.pending_count() < self.N - 1 and time.monotonic() < deadline:
                time.sleep(0.005)
            return build_response(401, {"message": "Refresh token expired"})

        with patch("vehicleprep.api.refresh.requests.post", side_effect=refresh_rejected) as mock_post:
            with ThreadPoolExecutor(max_workers=self.N) as pool:
                futures = [pool.submit(wave_client.get, f"/items/{i}") for i in range(self.N)]
                errors = [f.exception(timeout=10) for f in futures]

        assert mock_post.call_count == 1
        assert all(isinstance(e, requests.HTTPError) for e in errors)
        assert wave_client.session.request.call_count == self.N
        assert storage.keys() == []
        assert navigator.history.count("/login") == 1


class TestApiClientFactory:

    def test_defaults_come_from_config(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        api_client = ApiClient(token_store=TokenStore(MemoryStorage()))

        assert api_client.environment == "production"
        assert api_client.timeout == 10
        assert "X-Client" not in api_client.session.headers

    def test_explicit_config_class_drives_every_setting(self, monkeypatch, token_store):
        monkeypatch.setenv("ENVIRONMENT", "local")

        class SigninConfig(ProductionConfig):
            LOGIN_PATH = "/signin"
            API_TIMEOUT_SECONDS = 3
            API_DEBUG = False

        navigator = Navigator("/admin/schedules")
        api_client = ApiClient(token_store=token_store, navigator=navigator, config_class=SigninConfig)
        api_client.session = Mock(spec=requests.Session)
        api_client.session.request.return_value = build_response(401, {"message": "Token expired"})

        with pytest.raises(MissingRefreshTokenError):
            api_client.get("/auth/me")

        assert navigator.pathname == "/signin"
        assert api_client.timeout == 3
        assert api_client.environment == "production"
        assert api_client.session.request.call_args.kwargs["timeout"] == 3
