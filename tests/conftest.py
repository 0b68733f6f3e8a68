"""Shared test helpers."""

import os
from contextlib import asynccontextmanager, contextmanager

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from tracker.config import TrackerConfig
from tracker.models import CarrierLookup, Courier, TrackingEvent
from tracker.tracking.carrier_api import CarrierAPI


@asynccontextmanager
async def fake_upstream(*routes):
    """Run an in-process HTTP server standing in for a carrier or storefront API."""
    app = web.Application()
    app.add_routes(list(routes))
    server = TestServer(app)
    await server.start_server()
    try:
        yield server
    finally:
        await server.close()


@pytest.fixture
def upstream():
    return fake_upstream


TRACKER_ENV_VARS = (
    "YUNEXPRESS_API_KEY", "YUNEXPRESS_CUSTOMER_CODE", "YUNEXPRESS_API_URL",
    "GLS_API_URL", "GLS_AUTH_API_URL", "GLS_API_KEY",
    "SHOPIFY_DOMAIN", "SHOPIFY_ACCESS_TOKEN", "SHOPIFY_API_VERSION",
    "HOST", "PORT", "LOG_LEVEL", "LOG_FILE",
)


@contextmanager
def tracker_env():
    """Clear tracker variables, and drop anything load_dotenv sets inside the block."""
    saved = {name: os.environ.pop(name) for name in TRACKER_ENV_VARS if name in os.environ}
    try:
        yield
    finally:
        for name in TRACKER_ENV_VARS:
            os.environ.pop(name, None)
        os.environ.update(saved)


@pytest.fixture
def env_guard():
    return tracker_env


@pytest.fixture
def isolated_env():
    with tracker_env():
        yield


@pytest.fixture
def config():
    """Create test configuration."""
    return TrackerConfig(
        yunexpress_api_key="yt-key",
        yunexpress_customer_code="C0001",
        shopify_domain="shop.example.com",
        shopify_access_token="shpat_test",
    )


def yt_event(timestamp: str, status: str, location: str = "") -> TrackingEvent:
    return TrackingEvent(
        timestamp=timestamp,
        status=status,
        location=location,
        courier=Courier.YUNEXPRESS,
    )


def gls_event(timestamp: str, status: str, location: str = ", Poland") -> TrackingEvent:
    return TrackingEvent(
        timestamp=timestamp,
        status=status,
        location=location,
        courier=Courier.GLS,
    )


class StubCarrier(CarrierAPI):
    """Carrier returning canned events and recording the numbers it was asked for."""

    def __init__(self, courier: Courier, events=None, reason=None, error=None):
        self.courier = courier
        self.events = list(events or [])
        self.reason = reason
        self.error = error
        self.calls: list[str] = []

    async def lookup(self, tracking_number: str) -> CarrierLookup:
        self.calls.append(tracking_number)
        if self.error:
            raise self.error
        if self.reason:
            return CarrierLookup.degraded(self.courier, tracking_number, self.reason)
        return CarrierLookup.ok(self.courier, tracking_number, self.events)


@pytest.fixture
def stub_carrier():
    return StubCarrier


@pytest.fixture
def make_yt_event():
    return yt_event


@pytest.fixture
def make_gls_event():
    return gls_event
