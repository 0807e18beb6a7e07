import pytest
import requests

import list_utils


def make_response(url, status=200, text="", reason=None, content_type="text/plain; charset=utf-8"):
    response = requests.Response()
    response.status_code = status
    response._content = text.encode("utf-8")
    response.headers["Content-Type"] = content_type
    response.encoding = requests.utils.get_encoding_from_headers(response.headers)
    response.url = url
    response.reason = reason or ("OK" if status < 400 else "Not Found")
    return response


@pytest.fixture
def fake_get(monkeypatch):
    """Route requests.get in list_utils to a url -> body/status/exception table."""
    routes = {}
    calls = []

    def get(url, timeout=None):
        calls.append(url)
        route = routes[url]
        if isinstance(route, Exception):
            raise route
        if isinstance(route, tuple):
            status, text = route
            return make_response(url, status, text)
        return make_response(url, 200, route)

    monkeypatch.setattr(list_utils.requests, "get", get)
    get.routes = routes
    get.calls = calls
    return get


@pytest.fixture
def plain_text_get(monkeypatch):
    """requests.get that serves every URL as text/plain with no charset."""
    bodies = {}

    def get(url, timeout=None):
        return make_response(url, 200, bodies[url], content_type="text/plain")

    monkeypatch.setattr(list_utils.requests, "get", get)
    get.bodies = bodies
    return get
