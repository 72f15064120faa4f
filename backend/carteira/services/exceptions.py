# backend/carteira/services/exceptions.py
"""
Service layer exceptions.

These exceptions represent domain-specific errors and contain NO HTTP knowledge.
The application layer (main.py) maps them to HTTP responses.

Exception Hierarchy:
    ServiceError (base)
    ├── DataSourceError
    └── MarketDataError
        ├── ProviderUnavailableError
        ├── TickerNotFoundError
        ├── RateLimitError
        └── PriceNotAvailableError

Inside the valuation engine every MarketDataError is contained at the
single-asset boundary: the asset is dropped and the computation continues.
"""


class ServiceError(Exception):
    """
    Base exception for all service layer errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class DataSourceError(ServiceError):
    """
    Raised when the transaction or fixed income store cannot be read.

    Attributes:
        source: Name of the failing store
    """

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Could not read from {source}: {reason}")


# =============================================================================
# MARKET DATA ERRORS
# =============================================================================


class MarketDataError(ServiceError):
    """
    Base exception for market data provider errors.

    Attributes:
        provider: Name of the provider that raised the error
    """

    def __init__(self, message: str, provider: str | None = None) -> None:
        self.provider = provider
        super().__init__(message)


class ProviderUnavailableError(MarketDataError):
    """
    Raised when a provider cannot be reached (network, timeout, 5xx).

    Retryable.
    """

    def __init__(self, provider: str, reason: str) -> None:
        self.reason = reason
        message = f"Market data provider '{provider}' unavailable: {reason}"
        super().__init__(message, provider=provider)


class TickerNotFoundError(MarketDataError):
    """
    Raised when the provider does not know the ticker.

    Not retryable.
    """

    def __init__(self, ticker: str, market: str, provider: str) -> None:
        self.ticker = ticker
        self.market = market
        message = f"Ticker '{ticker}' not found on {market} by provider '{provider}'"
        super().__init__(message, provider=provider)


class RateLimitError(MarketDataError):
    """
    Raised when the provider rate limit is exceeded.

    Retryable after backoff.
    """

    def __init__(self, provider: str, retry_after: int | None = None) -> None:
        self.retry_after = retry_after
        message = f"Rate limit exceeded for provider '{provider}'"
        if retry_after:
            message += f". Retry after {retry_after} seconds"
        super().__init__(message, provider=provider)


class PriceNotAvailableError(MarketDataError):
    """Raised when no registered provider could quote a ticker."""

    def __init__(self, ticker: str, reason: str | None = None) -> None:
        self.ticker = ticker
        message = f"No price available for '{ticker}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)
