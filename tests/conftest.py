"""Pytest configuration and fixtures for segbird tests."""

import httpx
import pytest
from fastapi import FastAPI

from segbird.dispatcher import init

SECRET = "test-secret-0123456789abcdef0123456789abcdef"


@pytest.fixture
def secret():
    return SECRET


@pytest.fixture
def services():
    """Sample service registry."""
    return {
        "orders": "http://orders.internal:3000",
        "billing": "http://billing.internal:4000/",
    }


@pytest.fixture
def app():
    return FastAPI()


@pytest.fixture
def subscriber(app):
    """Dispatcher bound to a fresh FastAPI app, with no outbound services."""
    return init(server=app, jwt_secret=SECRET)


@pytest.fixture
def recorded_requests():
    return []


@pytest.fixture
def make_publisher(services, recorded_requests):
    """Build a publishing Dispatcher whose HTTP calls go to *handler*."""

    def _make(handler, **settings):
        def transport_handler(request: httpx.Request) -> httpx.Response:
            recorded_requests.append(request)
            return handler(request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(transport_handler))
        settings.setdefault("services", services)
        settings.setdefault("jwt_secret", SECRET)
        return init(http_client=client, **settings)

    return _make
