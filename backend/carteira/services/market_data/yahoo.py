# backend/carteira/services/market_data/yahoo.py
"""
Yahoo Finance market data provider implementation.

This module implements the MarketDataProvider interface using the yfinance library.
Yahoo Finance is a free data source suitable for personal/educational use.

Key features:
- Symbol mapping (ledger ticker + market → Yahoo symbol)
- Comprehensive error handling
- Retry mechanism inherited from base class
- Point-in-time closing price with a short look-back window

Symbol rules:
- B3 (Market.BRAZIL): "PETR4" → "PETR4.SA"
- US: "AAPL" → "AAPL"
- Crypto: "BTC" → "BTC-BRL" (BRAZIL) or "BTC-USD" (US)

Limitations:
- Rate limits (not officially documented, but exist)
- Data may be delayed (15-20 minutes for some markets)
"""

import logging
import math
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any

import yfinance as yf

from carteira.models import AssetType, Market
from carteira.services.constants import PRICE_FALLBACK_DAYS
from carteira.services.exceptions import (
    ProviderUnavailableError,
    TickerNotFoundError,
    RateLimitError,
)
from carteira.services.market_data.base import MarketDataProvider, PriceData

logger = logging.getLogger(__name__)


class YahooFinanceProvider(MarketDataProvider):
    """
    Yahoo Finance implementation of MarketDataProvider.

    Configuration:
        timeout: API request timeout in seconds (default: 10)

    Retry Behavior (inherited from MarketDataProvider):
        - Retries on ProviderUnavailableError and RateLimitError
        - Does NOT retry on TickerNotFoundError (permanent failure)
        - Uses exponential backoff: 1s → 2s → 4s

    Example:
        provider = YahooFinanceProvider(timeout=15)

        price = provider.get_current_price("PETR4", Market.BRAZIL)
        point = provider.get_historical_price("AAPL", Market.US, date(2025, 3, 1))
    """

    # B3 symbols carry the ".SA" suffix; US symbols have none
    MARKET_SUFFIXES: dict[Market, str] = {
        Market.BRAZIL: ".SA",
        Market.US: "",
    }

    # Crypto pairs are quoted against the market's currency
    CRYPTO_QUOTE_CURRENCIES: dict[Market, str] = {
        Market.BRAZIL: "BRL",
        Market.US: "USD",
    }

    SUPPORTED_ASSET_TYPES: frozenset[AssetType] = frozenset({
        AssetType.STOCK,
        AssetType.ETF,
        AssetType.CRYPTO,
    })

    # Window for the latest close; covers weekends and short holidays
    CURRENT_PRICE_PERIOD: str = "5d"

    # =========================================================================
    # INITIALIZATION
    # =========================================================================

    def __init__(self, timeout: int = 10) -> None:
        """
        Initialize the Yahoo Finance provider.

        Args:
            timeout: Request timeout in seconds
        """
        self._timeout = timeout
        logger.info(f"YahooFinanceProvider initialized (timeout={timeout}s)")

    @property
    def name(self) -> str:
        return "yahoo"

    @property
    def supported_asset_types(self) -> frozenset[AssetType]:
        return self.SUPPORTED_ASSET_TYPES

    # =========================================================================
    # CURRENT PRICE
    # =========================================================================

    def get_current_price(
            self,
            ticker: str,
            market: Market,
            asset_type: AssetType | None = None,
    ) -> Decimal:
        """
        Fetch the latest closing price from Yahoo Finance.

        Raises:
            TickerNotFoundError: If Yahoo has no recent data for the symbol
            ProviderUnavailableError: If Yahoo Finance unavailable
        """
        return self._execute_with_retry(
            self._fetch_current_price,
            ticker,
            market,
            asset_type,
        )

    def _fetch_current_price(
            self,
            ticker: str,
            market: Market,
            asset_type: AssetType | None,
    ) -> Decimal:
        """Internal method to fetch the latest close (called by retry wrapper)."""
        ticker = ticker.strip().upper()
        yahoo_symbol = self._build_yahoo_symbol(ticker, market, asset_type)
        logger.debug(f"Fetching current price for {yahoo_symbol}")

        try:
            df = yf.Ticker(yahoo_symbol).history(
                period=self.CURRENT_PRICE_PERIOD,
                interval="1d",
                timeout=self._timeout,
            )
        except Exception as e:
            raise self._map_error(e, ticker, market, yahoo_symbol)

        closes = self._extract_closes(df)
        if not closes:
            raise TickerNotFoundError(
                ticker=ticker,
                market=market.value,
                provider=self.name,
            )

        _, price = closes[-1]
        return price

    # =========================================================================
    # HISTORICAL PRICE
    # =========================================================================

    def get_historical_price(
            self,
            ticker: str,
            market: Market,
            target_date: date,
            asset_type: AssetType | None = None,
    ) -> PriceData | None:
        """
        Fetch the close on target_date, falling back up to
        PRICE_FALLBACK_DAYS earlier when the market was closed.

        Returns:
            PriceData for the latest trading day in the window, or None
            if Yahoo returned no rows for it.
        """
        return self._execute_with_retry(
            self._fetch_historical_price,
            ticker,
            market,
            target_date,
            asset_type,
        )

    def _fetch_historical_price(
            self,
            ticker: str,
            market: Market,
            target_date: date,
            asset_type: AssetType | None,
    ) -> PriceData | None:
        """Internal method to fetch a point-in-time close."""
        ticker = ticker.strip().upper()
        yahoo_symbol = self._build_yahoo_symbol(ticker, market, asset_type)

        start_date = target_date - timedelta(days=PRICE_FALLBACK_DAYS)
        # Yahoo Finance end date is exclusive, so add 1 day
        yahoo_end = target_date + timedelta(days=1)

        logger.debug(
            f"Fetching historical price for {yahoo_symbol} on {target_date} "
            f"(window starts {start_date})"
        )

        try:
            df = yf.Ticker(yahoo_symbol).history(
                start=start_date.isoformat(),
                end=yahoo_end.isoformat(),
                interval="1d",
                auto_adjust=False,  # Raw closes, matching what was paid at the time
                timeout=self._timeout,
            )
        except Exception as e:
            raise self._map_error(e, ticker, market, yahoo_symbol)

        closes = [
            (price_date, price)
            for price_date, price in self._extract_closes(df)
            if price_date <= target_date
        ]
        if not closes:
            logger.warning(
                f"No price data for {yahoo_symbol} "
                f"between {start_date} and {target_date}"
            )
            return None

        price_date, price = closes[-1]
        return PriceData(
            ticker=ticker,
            price=price,
            price_date=price_date,
            provider=self.name,
        )

    # =========================================================================
    # HELPER METHODS
    # =========================================================================

    def _build_yahoo_symbol(
            self,
            ticker: str,
            market: Market,
            asset_type: AssetType | None = None,
    ) -> str:
        """
        Build Yahoo Finance symbol from ledger ticker and market.

        Returns:
            Yahoo Finance symbol (e.g., "PETR4.SA", "AAPL", "BTC-USD")
        """
        if asset_type == AssetType.CRYPTO:
            if "-" in ticker:
                return ticker
            currency = self.CRYPTO_QUOTE_CURRENCIES.get(market, "USD")
            return f"{ticker}-{currency}"

        suffix = self.MARKET_SUFFIXES.get(market, "")
        if suffix and ticker.endswith(suffix):
            return ticker
        return f"{ticker}{suffix}"

    def _extract_closes(self, df) -> list[tuple[date, Decimal]]:
        """
        Convert a yfinance history DataFrame to (date, close) pairs,
        oldest first, skipping rows without a usable close.
        """
        if df is None or df.empty:
            return []

        closes = []
        for idx, row in df.sort_index().iterrows():
            price_date = idx.date() if hasattr(idx, 'date') else idx
            close_price = self._to_decimal(row.get('Close'))
            if close_price is None:
                logger.warning(f"Skipping {price_date}: missing close price")
                continue
            closes.append((price_date, close_price))

        return closes

    def _map_error(
            self,
            error: Exception,
            ticker: str,
            market: Market,
            yahoo_symbol: str,
    ) -> Exception:
        """Translate a yfinance failure into the service exception hierarchy."""
        error_str = str(error).lower()

        if "not found" in error_str or "delisted" in error_str:
            return TickerNotFoundError(
                ticker=ticker,
                market=market.value,
                provider=self.name,
            )

        if "rate limit" in error_str or "too many requests" in error_str:
            return RateLimitError(provider=self.name)

        logger.error(f"Yahoo Finance error for {yahoo_symbol}: {error}")
        return ProviderUnavailableError(
            provider=self.name,
            reason=str(error),
        )

    @staticmethod
    def _to_decimal(value: Any) -> Decimal | None:
        """Convert a value to Decimal, returning None for NaN, infinity or None."""
        if value is None:
            return None
        try:
            if not math.isfinite(float(value)):
                return None
            return Decimal(str(value)).quantize(Decimal("0.00000001"))
        except (TypeError, ValueError, InvalidOperation):
            return None
