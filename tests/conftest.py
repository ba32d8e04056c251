import asyncio
import inspect
import json

import httpx
import pytest

from declient_sdk import HttpClient, HttpClientConfig


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem):
    """Run async test functions without requiring external plugins."""
    test_function = pyfuncitem.obj
    if inspect.iscoroutinefunction(test_function):
        loop = asyncio.new_event_loop()
        try:
            asyncio.set_event_loop(loop)
            # Filter funcargs to only include parameters the function expects
            sig = inspect.signature(test_function)
            filtered_args = {k: v for k, v in pyfuncitem.funcargs.items() if k in sig.parameters}
            loop.run_until_complete(test_function(**filtered_args))
        finally:
            loop.close()
            asyncio.set_event_loop(None)
        return True
    return None


def pytest_configure(config):
    """Register markers for pytest."""
    config.addinivalue_line("markers", "asyncio: mark async tests")
    config.addinivalue_line("markers", "integration: mark test as integration test")


class RecordingTransport(httpx.MockTransport):
    """Mock transport that keeps every request it served."""

    def __init__(self, handler):
        self.requests = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def services():
    return {
        "users": "http://users.test",
        "orders": "http://orders.test",
        "admin": "http://admin.test",
        "catalog": "http://catalog.test",
    }


@pytest.fixture
def make_client(services):
    """Build an ``HttpClient`` whose calls are answered by ``handler``."""
    created = []

    def factory(handler, **config):
        transport = RecordingTransport(handler)
        client = HttpClient(HttpClientConfig(services=services, **config), transport=transport)
        created.append(client)
        return client, transport

    yield factory
    for client in created:
        client.close()


@pytest.fixture
def json_response():
    """Build a JSON ``httpx.Response``."""

    def build(payload, status_code=200, headers=None) -> httpx.Response:
        return httpx.Response(
            status_code,
            content=json.dumps(payload).encode("utf-8"),
            headers={"Content-Type": "application/json", **(headers or {})},
        )

    return build
