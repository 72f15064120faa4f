# backend/carteira/services/market_data/service.py
"""
Market data service: the provider registry used by the valuation engine.

Providers are kept in registration order. For any asset type the engine
asks for, `find_providers_for` returns the providers that declare support
for it in that order, so the first registered provider is the preferred
source.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from carteira.models import AssetType, Market
from carteira.services.exceptions import MarketDataError, PriceNotAvailableError
from carteira.services.market_data.base import MarketDataProvider

logger = logging.getLogger(__name__)


class MarketDataService:
    """
    Ordered registry of market data providers.

    Current quotes fall through the registry: if the preferred provider
    fails, the next one that supports the asset type is tried.
    """

    def __init__(self, providers: list[MarketDataProvider] | None = None) -> None:
        self._providers: list[MarketDataProvider] = list(providers or [])

    def register(self, provider: MarketDataProvider) -> None:
        self._providers.append(provider)
        logger.info(f"Registered market data provider '{provider.name}'")

    @property
    def providers(self) -> list[MarketDataProvider]:
        return list(self._providers)

    def find_providers_for(self, asset_type: AssetType) -> list[MarketDataProvider]:
        """Providers supporting asset_type, in registration order."""
        return [p for p in self._providers if p.supports(asset_type)]

    def get_price(
            self,
            ticker: str,
            asset_type: AssetType | None = None,
            market: Market | None = None,
    ) -> Decimal:
        """
        Get the current price of a ticker.

        Args:
            ticker: Ledger symbol
            asset_type: Restricts the lookup to providers supporting it.
                When None every registered provider is tried.
            market: Market the asset trades on (defaults to BRAZIL)

        Returns:
            Latest price from the first provider that answers

        Raises:
            PriceNotAvailableError: No provider could quote the ticker
        """
        market = market or Market.BRAZIL
        candidates = (
            self.find_providers_for(asset_type)
            if asset_type is not None
            else self.providers
        )

        if not candidates:
            raise PriceNotAvailableError(
                ticker,
                reason=f"no provider registered for {asset_type.value if asset_type else 'any asset type'}",
            )

        last_error: Exception | None = None
        for provider in candidates:
            try:
                return provider.get_current_price(ticker, market, asset_type)
            except MarketDataError as e:
                logger.debug(f"Provider '{provider.name}' could not quote {ticker}: {e}")
                last_error = e
            except Exception as e:
                logger.exception(f"Provider '{provider.name}' failed quoting {ticker}")
                last_error = e

        raise PriceNotAvailableError(ticker, reason=str(last_error))
