import os
import tempfile
from concurrent.futures import Future

os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="admin-console-logs-"))

import pytest  # noqa: E402

from admin_api.client import AdminApiClient  # noqa: E402
from admin_api.session import AdminSession  # noqa: E402

BASE_URL = "http://api.test/api/admin"


class FakeResponse:
    def __init__(self, body, status_code=200):
        self._body = body
        self.status_code = status_code

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


class FakeHttp:
    """
    Stands in for ``requests.Session``. ``routes`` maps ``(METHOD, path)`` to a
    body, a ``(body, status)`` tuple, an exception to raise, or a list of those
    served in order (the last one repeats).
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    def request(self, method, url, params=None, json=None, data=None, files=None, headers=None, timeout=None):
        path = url[len(BASE_URL):] if url.startswith(BASE_URL) else url
        self.calls.append({
            "method": method, "path": path, "params": params, "json": json,
            "data": data, "files": files, "headers": headers, "timeout": timeout,
        })
        entry = self.routes.get((method, path), {"success": True})
        if isinstance(entry, list):
            entry = entry.pop(0) if len(entry) > 1 else entry[0]
        if isinstance(entry, Exception):
            raise entry
        if isinstance(entry, tuple):
            return FakeResponse(*entry)
        return FakeResponse(entry)

    def paths(self, method=None):
        return [c["path"] for c in self.calls if method is None or c["method"] == method]


class DeferredExecutor:
    """Holds submitted work until its future is waited on, so tests decide when a refresh lands."""

    def __init__(self):
        self.pending = []

    def submit(self, fn, *args, **kwargs):
        executor = self

        class _Deferred(Future):
            def result(self, timeout=None):
                if not self.done():
                    executor.pending.remove(self)
                    try:
                        self.set_result(fn(*args, **kwargs))
                    except Exception as e:
                        self.set_exception(e)
                return super().result(timeout)

        future = _Deferred()
        self.pending.append(future)
        return future


@pytest.fixture
def http():
    return FakeHttp()


@pytest.fixture
def admin_session():
    return AdminSession(token="test-token", admin={"_id": "a1", "email": "admin@example.com"})


@pytest.fixture
def client(http, admin_session):
    return AdminApiClient(admin_session, BASE_URL, timeout=5, http=http)


@pytest.fixture
def deferred():
    return DeferredExecutor()


@pytest.fixture
def app(http):
    from app import create_app
    from config import TestingConfig

    class Config(TestingConfig):
        ADMIN_API_CLIENT_FACTORY = staticmethod(lambda session: AdminApiClient(session, BASE_URL, http=http))

    return create_app(Config)


@pytest.fixture
def web(app):
    return app.test_client()


@pytest.fixture
def logged_in(web, http):
    http.routes[("POST", "/auth/login")] = {
        "success": True,
        "token": "console-token",
        "admin": {"_id": "a1", "email": "admin@example.com", "name": "Admin"},
    }
    response = web.post("/admin/auth/login", json={"email": "admin@example.com", "password": "secret1"})
    assert response.status_code == 200
    return web
