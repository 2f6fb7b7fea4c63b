import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from stockwatch.models.stock import NewsArticle, SearchResult, StockQuote
from stockwatch.services.request_throttle import DEFAULT_DELAY_SECONDS, RequestThrottle
from stockwatch.utils.errors import UpstreamError
from stockwatch.utils.logger import logger

FINNHUB_BASE_URL = "https://finnhub.io/api/v1"
SEARCH_RESULT_LIMIT = 8
NEWS_RESULT_LIMIT = 9


def epoch_to_iso(seconds: float) -> str:
    """Epoch seconds -> '2023-11-14T22:13:20.000Z' (UTC, millisecond precision)."""
    moment = datetime.fromtimestamp(seconds, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class MarketDataClient:
    """
    Finnhub client. Every request goes through one RequestThrottle so the whole
    process stays under the provider's rate limit.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = FINNHUB_BASE_URL,
        throttle: Optional[RequestThrottle] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self.api_key = api_key
        self.throttle = throttle or RequestThrottle(DEFAULT_DELAY_SECONDS)
        self._client = http_client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def aclose(self) -> None:
        await self.throttle.wait_idle()
        await self._client.aclose()

    async def _request(self, path: str, params: Dict[str, Any]) -> Any:
        query = {**params, "token": self.api_key}

        async def call() -> Any:
            try:
                response = await self._client.get(path, params=query)
                response.raise_for_status()
                return response.json()
            except httpx.HTTPStatusError as e:
                raise UpstreamError(
                    f"Finnhub returned HTTP {e.response.status_code} for {path}",
                    {"path": path, "status": e.response.status_code},
                ) from e
            except httpx.RequestError as e:
                raise UpstreamError(f"Network error calling Finnhub {path}: {e}", {"path": path}) from e
            except ValueError as e:
                raise UpstreamError(f"Finnhub returned a non-JSON payload for {path}", {"path": path}) from e

        return await self.throttle.submit(call)

    async def search_stocks(self, query: str, exchange: Optional[str] = None) -> List[SearchResult]:
        params = {"q": query}
        if exchange:
            params["exchange"] = exchange
        try:
            payload = await self._request("/search", params)
            matches = payload["result"][:SEARCH_RESULT_LIMIT]
            results = []
            for match in matches:
                try:
                    results.append(SearchResult.model_validate(match))
                except ValidationError as e:
                    logger.warning(f"Skipping unusable search match for '{query}': {e}")
        except UpstreamError as e:
            logger.error(f"❌ Error searching stocks for '{query}': {e}")
            raise
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"❌ Malformed search payload for '{query}': {e}", exc_info=True)
            raise UpstreamError("Malformed search response from Finnhub", {"query": query}) from e

        logger.info(f"✅ Search '{query}' returned {len(results)} matches")
        return results

    async def get_news(self, category: str = "general") -> List[NewsArticle]:
        try:
            payload = await self._request("/news", {"category": category})
            articles = []
            for item in payload[:NEWS_RESULT_LIMIT]:
                article = dict(item)
                article["datetime"] = epoch_to_iso(item["datetime"])
                articles.append(NewsArticle.model_validate(article))
        except UpstreamError as e:
            logger.error(f"❌ Error fetching '{category}' news: {e}")
            raise
        except (KeyError, TypeError, ValueError, OverflowError, OSError) as e:
            logger.error(f"❌ Malformed news payload for '{category}': {e}", exc_info=True)
            raise UpstreamError("Malformed news response from Finnhub", {"category": category}) from e

        logger.info(f"✅ Fetched {len(articles)} '{category}' news articles")
        return articles

    async def get_stock_quote(self, symbol: str) -> StockQuote:
        try:
            # Both calls are queued behind the throttle, so they still run one at a time.
            quote, profile = await asyncio.gather(
                self._request("/quote", {"symbol": symbol}),
                self._request("/stock/profile2", {"symbol": symbol}),
            )
            stock_quote = StockQuote(
                symbol=symbol,
                name=profile.get("name") or symbol,
                price=quote.get("c"),
                change=quote.get("d"),
                percent_change=quote.get("dp"),
                high=quote.get("h"),
                low=quote.get("l"),
                open=quote.get("o"),
                previous_close=quote.get("pc"),
                exchange=profile.get("exchange"),
                country=profile.get("country"),
                currency=profile.get("currency"),
                industry=profile.get("finnhubIndustry"),
            )
        except UpstreamError as e:
            logger.error(f"❌ Error getting stock quote for {symbol}: {e}")
            raise
        except (AttributeError, TypeError, ValueError) as e:
            logger.error(f"❌ Malformed quote payload for {symbol}: {e}", exc_info=True)
            raise UpstreamError("Malformed quote response from Finnhub", {"symbol": symbol}) from e

        logger.info(f"✅ Quote for {symbol}: {stock_quote.price}")
        return stock_quote
