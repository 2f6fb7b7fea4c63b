from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SearchResult(BaseModel):
    """One symbol lookup match as returned by the provider."""
    model_config = ConfigDict(populate_by_name=True)

    description: Optional[str] = None  # Company name (e.g., APPLE INC)
    display_symbol: Optional[str] = Field(None, alias="displaySymbol")
    symbol: str
    type: Optional[str] = None  # Security type (e.g., Common Stock)
    exchange: Optional[str] = None


class StockQuote(BaseModel):
    """Quote and company profile merged into one flat record."""
    model_config = ConfigDict(populate_by_name=True)

    symbol: str
    name: str
    price: Optional[float] = None  # Current price
    change: Optional[float] = None
    percent_change: Optional[float] = Field(None, alias="percentChange")
    high: Optional[float] = None  # High price of the day
    low: Optional[float] = None  # Low price of the day
    open: Optional[float] = None  # Open price of the day
    previous_close: Optional[float] = Field(None, alias="previousClose")
    exchange: Optional[str] = None
    country: Optional[str] = None
    currency: Optional[str] = None
    industry: Optional[str] = None


class NewsArticle(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[int] = None
    category: Optional[str] = None
    published_at: str = Field(alias="datetime")  # ISO-8601 UTC, millisecond precision
    headline: str = ""
    image: Optional[str] = None
    related: Optional[str] = None
    source: Optional[str] = None
    summary: Optional[str] = None
    url: Optional[str] = None


class SaveStockRequest(BaseModel):
    symbol: str = Field(..., min_length=1, description="Ticker symbol, e.g., AAPL")


class WatchedStockOut(BaseModel):
    """Persisted watchlist record."""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    symbol: str
    name: Optional[str] = None
    price: Optional[float] = None  # Last known price
    change: Optional[float] = None  # Last known change
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        # SQLite drops the offset; stored values are always UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
