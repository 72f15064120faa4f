# backend/carteira/services/market_data/base.py
"""
Abstract interface for market data providers.

This module defines the contract that all market data providers must follow.
Using an abstract base class allows for:
- Easy addition of new providers (Brapi, CoinGecko, etc.)
- A provider registry keyed by asset type
- Mock implementations for testing
- Consistent retry behavior across all providers

Design Principles:
- Interface Segregation: Only the two price lookups the valuation engine needs
- Dependency Inversion: Services depend on abstractions, not concrete implementations
- Open/Closed: New providers can be added without modifying existing code
- DRY: Common retry logic implemented once in base class
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import TypeVar, Callable, Any

from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

from carteira.models import AssetType, Market
from carteira.services.exceptions import (
    ProviderUnavailableError,
    RateLimitError,
)

logger = logging.getLogger(__name__)

# Type variable for generic return type in retry method
T = TypeVar('T')


# =============================================================================
# DATA CLASSES - PRICE DATA
# =============================================================================

@dataclass(frozen=True)
class PriceData:
    """
    A single price observation returned by a provider.

    Attributes:
        ticker: Symbol as known to the ledger (e.g., "PETR4", "BTC")
        price: Closing price in the asset's trading currency
        price_date: Trading date the price belongs to. For historical lookups
            this may be a few days before the requested date (weekends, holidays).
        provider: Name of the provider that produced the price
    """

    ticker: str
    price: Decimal
    price_date: date
    provider: str

    def __post_init__(self) -> None:
        """Validate price data."""
        if not self.ticker:
            raise ValueError("ticker is required")
        if self.price < 0:
            raise ValueError(f"price cannot be negative, got {self.price}")


# =============================================================================
# ABSTRACT BASE CLASS
# =============================================================================

class MarketDataProvider(ABC):
    """
    Abstract base class for market data providers.

    Providers declare the asset types they can quote via
    `supported_asset_types`; MarketDataService uses it to build the
    per-asset-type registry.

    Retry Behavior:
        The base class provides a `_execute_with_retry` method that implements
        exponential backoff retry logic. Subclasses can override the retry
        configuration by setting class attributes:

        - MAX_RETRY_ATTEMPTS: Total attempts (default: 3)
        - RETRY_MIN_WAIT: Minimum wait in seconds (default: 1)
        - RETRY_MAX_WAIT: Maximum wait in seconds (default: 10)
        - RETRY_MULTIPLIER: Exponential multiplier (default: 1)

    Retryable Exceptions:
        - ProviderUnavailableError: Network issues, timeouts, server errors
        - RateLimitError: API rate limit exceeded

    Non-Retryable Exceptions:
        - TickerNotFoundError: Permanent failure (ticker doesn't exist)
    """

    # =========================================================================
    # RETRY CONFIGURATION (can be overridden by subclasses)
    # =========================================================================

    MAX_RETRY_ATTEMPTS: int = 3
    RETRY_MIN_WAIT: int = 1
    RETRY_MAX_WAIT: int = 10
    RETRY_MULTIPLIER: int = 1

    # =========================================================================
    # ABSTRACT PROPERTIES AND METHODS
    # =========================================================================

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Unique identifier for this provider.

        Used for logging, error messages, and PriceData.provider.

        Returns:
            Provider name (e.g., "yahoo")
        """
        pass

    @property
    @abstractmethod
    def supported_asset_types(self) -> frozenset[AssetType]:
        """Asset types this provider can quote."""
        pass

    @abstractmethod
    def get_current_price(
            self,
            ticker: str,
            market: Market,
            asset_type: AssetType | None = None,
    ) -> Decimal:
        """
        Fetch the latest available price for an asset.

        Args:
            ticker: Ledger symbol (e.g., "PETR4", "AAPL", "BTC")
            market: Market the asset trades on
            asset_type: Asset type, used to build provider-specific symbols

        Returns:
            Latest closing price

        Raises:
            TickerNotFoundError: Ticker unknown to the provider
            ProviderUnavailableError: Network or API error (retryable)
            RateLimitError: Rate limit exceeded (retryable)
        """
        pass

    @abstractmethod
    def get_historical_price(
            self,
            ticker: str,
            market: Market,
            target_date: date,
            asset_type: AssetType | None = None,
    ) -> PriceData | None:
        """
        Fetch the closing price on or shortly before a date.

        Args:
            ticker: Ledger symbol
            market: Market the asset trades on
            target_date: Date to price at
            asset_type: Asset type, used to build provider-specific symbols

        Returns:
            PriceData, or None if the provider has no price for that date

        Raises:
            TickerNotFoundError: Ticker unknown to the provider
            ProviderUnavailableError: Network or API error (retryable)
            RateLimitError: Rate limit exceeded (retryable)
        """
        pass

    def supports(self, asset_type: AssetType) -> bool:
        return asset_type in self.supported_asset_types

    # =========================================================================
    # RETRY HELPER METHOD
    # =========================================================================

    def _execute_with_retry(
            self,
            func: Callable[..., T],
            *args: Any,
            **kwargs: Any,
    ) -> T:
        """
        Execute a function with retry logic for transient failures.

        Uses exponential backoff for retryable exceptions:
        - ProviderUnavailableError
        - RateLimitError

        Does NOT retry on:
        - TickerNotFoundError (permanent failure)
        - Other exceptions

        Args:
            func: Function to execute
            *args: Positional arguments for func
            **kwargs: Keyword arguments for func

        Returns:
            Return value of func

        Raises:
            The last exception if all retries fail
        """

        @retry(
            stop=stop_after_attempt(self.MAX_RETRY_ATTEMPTS),
            wait=wait_exponential(
                multiplier=self.RETRY_MULTIPLIER,
                min=self.RETRY_MIN_WAIT,
                max=self.RETRY_MAX_WAIT,
            ),
            retry=retry_if_exception_type((ProviderUnavailableError, RateLimitError)),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        def _inner() -> T:
            return func(*args, **kwargs)

        return _inner()
