import json
from unittest.mock import Mock

import pytest
import requests

from vehicleprep.api.client import ApiClient
from vehicleprep.api.navigation import Navigator
from vehicleprep.api.notifications import RecordingNotifier, set_notifier
from vehicleprep.api.storage import MemoryStorage, TokenStore

BASE_URL = "http://api.test/api"


def build_response(status=200, body=None, content=None, url=BASE_URL):
    """A real requests.Response, as the transport would hand it back."""
    response = requests.Response()
    response.status_code = status
    response.url = url
    response.encoding = "utf-8"
    response.headers["Content-Type"] = "application/json"
    if content is not None:
        response._content = content
    elif body is not None:
        response._content = json.dumps(body).encode("utf-8")
    else:
        response._content = b""
    return response


def ok(data=None, message="OK"):
    return build_response(200, {"success": True, "data": data, "message": message})


@pytest.fixture(autouse=True)
def notifier():
    """Collect toasts instead of logging them."""
    recorder = RecordingNotifier()
    previous = set_notifier(recorder)
    yield recorder
    set_notifier(previous)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def session_storage():
    return MemoryStorage({"draft": "1"})


@pytest.fixture
def token_store(storage, session_storage):
    return TokenStore(storage, session_storage=session_storage)


@pytest.fixture
def navigator():
    return Navigator("/dashboard")


@pytest.fixture
def client(token_store, navigator):
    """ApiClient whose HTTP session is a Mock; set ``client.session.request`` behaviour per test."""
    api_client = ApiClient(
        base_url=BASE_URL,
        token_store=token_store,
        navigator=navigator,
        environment="production",
        debug=False,
    )
    api_client.session = Mock(spec=requests.Session)
    return api_client
