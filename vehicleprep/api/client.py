import functools
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

import requests

from vehicleprep.api.navigation import Navigator, redirect_to_login
from vehicleprep.api.refresh import RefreshCoordinator
from vehicleprep.api.storage import JsonFileStorage, MemoryStorage, SqlStorage, TokenStore
from vehicleprep.config import get_config
from vehicleprep.logging_config import get_logger

logger = get_logger(__name__)

CLIENT_NAME = "vehicle-prep-frontend"


@dataclass
class RequestSpec:
    """Everything needed to (re)issue one request."""
    method: str
    url: str
    params: Optional[Dict[str, Any]] = None
    json: Any = None
    data: Any = None
    files: Any = None
    headers: Dict[str, Optional[str]] = field(default_factory=dict)
    # Set once the request has been replayed after a refresh
    retried: bool = False
    # Auth endpoints answer 401 for bad credentials, not for an expired token
    refresh_on_401: bool = True


class ApiClient:
    """Back-office API connection layer with bearer auth and transparent token refresh."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token_store: Optional[TokenStore] = None,
        timeout: Optional[float] = None,
        navigator: Optional[Navigator] = None,
        on_session_expired: Optional[Callable[[], object]] = None,
        debug: Optional[bool] = None,
        environment: Optional[str] = None,
        config_class=None,
    ):
        cfg = config_class or get_config()
        self.base_url = (base_url or cfg.API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else cfg.API_TIMEOUT_SECONDS
        self.token_store = token_store if token_store is not None else TokenStore(legacy_keys=cfg.LEGACY_TOKEN_KEYS)
        self.navigator = navigator or Navigator()
        self.debug = cfg.API_DEBUG if debug is None else debug
        self.environment = environment or cfg.ENV

        if on_session_expired is None:
            on_session_expired = functools.partial(redirect_to_login, self.navigator, cfg.LOGIN_PATH)

        # Reusable HTTP session
        self.session = requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        if self.environment == "local":
            self.session.headers.update({
                "X-Requested-With": "XMLHttpRequest",
                "X-Client": CLIENT_NAME,
            })

        self.coordinator = RefreshCoordinator(
            self.token_store,
            self.base_url,
            timeout=self.timeout,
            on_session_expired=on_session_expired,
        )

    def _url(self, endpoint: str) -> str:
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def _attach_token(self, headers: Dict[str, Optional[str]]) -> Dict[str, Optional[str]]:
        '''Adds the Authorization header when a usable access token is stored'''
        if "Authorization" in headers:
            return headers
        token = self.token_store.get_access_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _send(self, spec: RequestSpec) -> requests.Response:
        headers = dict(spec.headers)
        if not spec.retried:
            headers = self._attach_token(headers)
        if spec.files:
            # Let requests write the multipart boundary
            headers["Content-Type"] = None

        params = dict(spec.params or {})
        if self.environment == "local":
            params["_t"] = int(time.time() * 1000)

        if self.debug:
            logger.debug("API request", method=spec.method, url=spec.url, retried=spec.retried)

        response = self.session.request(
            spec.method,
            spec.url,
            params=params or None,
            json=spec.json,
            data=spec.data,
            files=spec.files,
            headers=headers,
            timeout=self.timeout,
        )

        if self.debug:
            logger.debug("API response", method=spec.method, url=spec.url, status=response.status_code)
        return response

    def _dispatch(self, spec: RequestSpec) -> requests.Response:
        response = self._send(spec)

        if response.status_code == 401 and spec.refresh_on_401 and not spec.retried:
            # Token expired or revoked: refresh once (shared with concurrent requests) and replay
            token = self.coordinator.obtain_token()
            spec.retried = True
            spec.headers["Authorization"] = f"Bearer {token}"
            logger.info("Replaying request with refreshed token", method=spec.method, url=spec.url)
            return self._dispatch(spec)

        if response.status_code >= 400:
            self._log_error(spec, response)
            raise requests.HTTPError(
                f"{response.status_code} from API: {spec.method} {spec.url}",
                response=response,
            )
        return response

    def _log_error(self, spec: RequestSpec, response: requests.Response) -> None:
        status = response.status_code
        fields = {"status": status, "method": spec.method, "url": spec.url, "retried": spec.retried}
        if status == 401:
            logger.warning("Authentication rejected", **fields)
        elif status == 403:
            logger.warning("Access denied", **fields)
        elif status >= 500:
            logger.error("Server error", body=response.text[:500], **fields)
        else:
            logger.info("Request failed", **fields)

    def request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        data: Any = None,
        files: Any = None,
        headers: Optional[Dict[str, str]] = None,
        refresh_on_401: bool = True,
    ) -> requests.Response:
        """
        Issue a request against the API.

        Raises:
            requests.HTTPError: any 4xx/5xx that could not be recovered
            requests.ConnectionError, requests.Timeout: nothing came back
            RefreshError / requests.RequestException: the session could not be refreshed
        """
        spec = RequestSpec(
            method=method.upper(),
            url=self._url(endpoint),
            params=params,
            json=json,
            data=data,
            files=files,
            headers=dict(headers or {}),
            refresh_on_401=refresh_on_401,
        )
        return self._dispatch(spec)

    def get(self, endpoint: str, params: Optional[Dict] = None, **kwargs):
        return self.request("GET", endpoint, params=params, **kwargs)

    def post(self, endpoint: str, json: Any = None, **kwargs):
        return self.request("POST", endpoint, json=json, **kwargs)

    def put(self, endpoint: str, json: Any = None, **kwargs):
        return self.request("PUT", endpoint, json=json, **kwargs)

    def patch(self, endpoint: str, json: Any = None, **kwargs):
        return self.request("PATCH", endpoint, json=json, **kwargs)

    def delete(self, endpoint: str, **kwargs):
        return self.request("DELETE", endpoint, **kwargs)

    def close(self) -> None:
        self.session.close()


def token_store_from_config(cfg) -> TokenStore:
    """Persistent credentials in the configured database, else in the token file."""
    if cfg.TOKEN_DATABASE_URL:
        storage = SqlStorage(cfg.TOKEN_DATABASE_URL)
    else:
        storage = JsonFileStorage(cfg.TOKEN_FILE)
    return TokenStore(storage, session_storage=MemoryStorage(), legacy_keys=cfg.LEGACY_TOKEN_KEYS)


_client = None


def get_api_client() -> ApiClient:
    '''
    Returns a singleton instance of the ApiClient class, storing credentials
    in the configured database or token file.
    '''
    global _client
    if _client is None:
        cfg = get_config()
        _client = ApiClient(token_store=token_store_from_config(cfg), config_class=cfg)
    return _client
