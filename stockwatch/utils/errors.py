"""Error taxonomy shared by services and mapped to HTTP responses in main."""
from typing import Any, Dict, Optional


class StockWatchError(Exception):
    """Base exception for all stock watch errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details if details is not None else {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class NotFoundError(StockWatchError):
    """Raised when a watchlist record does not exist."""
    pass


class UpstreamError(StockWatchError):
    """Raised when the market data provider call fails or returns garbage."""
    pass


class ConfigurationError(StockWatchError):
    """Raised when a required setting (e.g. the API key) is missing."""
    pass
