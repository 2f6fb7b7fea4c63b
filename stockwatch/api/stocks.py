import asyncio
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from stockwatch.models.stock import (
    NewsArticle,
    SaveStockRequest,
    SearchResult,
    StockQuote,
    WatchedStockOut,
)
from stockwatch.services.database import create_session_factory
from stockwatch.services.finnhub_service import FINNHUB_BASE_URL, MarketDataClient
from stockwatch.services.request_throttle import DEFAULT_DELAY_SECONDS, RequestThrottle
from stockwatch.services.watchlist_service import WatchlistStore
from stockwatch.utils.config import config, get_database_url, get_finnhub_api_key
from stockwatch.utils.errors import ConfigurationError
from stockwatch.utils.logger import logger

router = APIRouter(prefix="/stocks")

# --- Shared service instances (created on first use) ---
_market_data_client: Optional[MarketDataClient] = None
_watchlist_store: Optional[WatchlistStore] = None


async def get_market_data_client() -> MarketDataClient:
    """FastAPI dependency returning the process-wide Finnhub client."""
    global _market_data_client
    if _market_data_client is None:
        api_key = get_finnhub_api_key()
        if not api_key:
            logger.error("❌ FINNHUB_API_KEY not set in environment")
            raise ConfigurationError("FINNHUB_API_KEY not set in environment")
        finnhub_cfg = config.get("finnhub", {})
        _market_data_client = MarketDataClient(
            api_key,
            base_url=finnhub_cfg.get("base_url", FINNHUB_BASE_URL),
            throttle=RequestThrottle(finnhub_cfg.get("throttle_delay_seconds", DEFAULT_DELAY_SECONDS)),
            timeout=finnhub_cfg.get("timeout_seconds", 30),
        )
    return _market_data_client


def get_watchlist_store() -> WatchlistStore:
    """FastAPI dependency returning the watchlist store."""
    global _watchlist_store
    if _watchlist_store is None:
        db_cfg = config.get("database", {})
        _watchlist_store = WatchlistStore(
            create_session_factory(get_database_url(), echo=db_cfg.get("echo", False))
        )
    return _watchlist_store


async def close_market_data_client() -> None:
    global _market_data_client
    if _market_data_client is not None:
        await _market_data_client.aclose()
        _market_data_client = None


# --- API Endpoints ---

@router.get("/search", response_model=List[SearchResult])
async def search_stocks_api(
    q: str = Query(..., min_length=1, description="Symbol or company name"),
    exchange: Optional[str] = Query(None, description="Exchange filter, e.g. US"),
    client: MarketDataClient = Depends(get_market_data_client),
):
    logger.info(f"📡 Received stock search request: {q} (exchange={exchange})")
    return await client.search_stocks(q, exchange)


@router.get("/news", response_model=List[NewsArticle])
async def get_news_api(
    category: str = "general",
    client: MarketDataClient = Depends(get_market_data_client),
):
    logger.info(f"📡 Received market news request: {category}")
    return await client.get_news(category)


@router.get("/quote/{symbol}", response_model=StockQuote)
async def get_stock_quote_api(
    symbol: str,
    client: MarketDataClient = Depends(get_market_data_client),
):
    logger.info(f"📡 Received quote request: {symbol}")
    return await client.get_stock_quote(symbol)


@router.post("/save", response_model=WatchedStockOut)
async def save_stock_api(
    request: SaveStockRequest,
    client: MarketDataClient = Depends(get_market_data_client),
    store: WatchlistStore = Depends(get_watchlist_store),
):
    logger.info(f"📡 Received request to save stock: {request.symbol}")
    quote = await client.get_stock_quote(request.symbol)
    stock = await asyncio.to_thread(store.upsert, request.symbol, quote.name, quote.price, quote.change)
    return WatchedStockOut.model_validate(stock)


@router.get("", response_model=List[WatchedStockOut])
async def get_saved_stocks_api(store: WatchlistStore = Depends(get_watchlist_store)):
    logger.info("📡 Received request for saved stocks")
    saved = await asyncio.to_thread(store.list_all)
    return [WatchedStockOut.model_validate(stock) for stock in saved]


@router.delete("/{stock_id}", response_model=WatchedStockOut)
async def delete_stock_api(stock_id: int, store: WatchlistStore = Depends(get_watchlist_store)):
    logger.info(f"📡 Received request to delete stock: {stock_id}")
    stock = await asyncio.to_thread(store.delete, stock_id)
    return WatchedStockOut.model_validate(stock)
