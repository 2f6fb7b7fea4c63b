import httpx
import pytest

from stockwatch.services.database import create_session_factory
from stockwatch.services.finnhub_service import MarketDataClient
from stockwatch.services.request_throttle import RequestThrottle
from stockwatch.services.watchlist_service import WatchlistStore

FAKE_BASE_URL = "https://finnhub.test/api/v1"


def fake_finnhub(routes, calls=None):
    """
    Build an httpx.MockTransport answering provider paths from `routes`.
    A route value may be a payload (served as JSON) or a ready httpx.Response.
    """
    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path.split("/api/v1", 1)[-1]
        if calls is not None:
            calls.append(request)
        if path not in routes:
            return httpx.Response(404, json={"error": "unknown path"})
        answer = routes[path]
        if isinstance(answer, httpx.Response):
            return answer
        return httpx.Response(200, json=answer)

    return httpx.MockTransport(handler)


def make_market_client(routes, calls=None, delay=0.0, transport=None) -> MarketDataClient:
    http_client = httpx.AsyncClient(
        transport=transport or fake_finnhub(routes, calls), base_url=FAKE_BASE_URL
    )
    return MarketDataClient("test-key", throttle=RequestThrottle(delay), http_client=http_client)


@pytest.fixture
def store():
    return WatchlistStore(create_session_factory("sqlite://"))


@pytest.fixture
def quote_routes():
    return {
        "/quote": {"c": 189.5, "d": 1.25, "dp": 0.66, "h": 190.1, "l": 187.2, "o": 188.0, "pc": 188.25},
        "/stock/profile2": {
            "name": "Apple Inc",
            "exchange": "NASDAQ NMS - GLOBAL MARKET",
            "country": "US",
            "currency": "USD",
            "finnhubIndustry": "Technology",
            "ticker": "AAPL",
        },
    }


@pytest.fixture
def market_client():
    """Factory fixture: market_client(routes, calls=None, delay=0.0, transport=None)."""
    return make_market_client
