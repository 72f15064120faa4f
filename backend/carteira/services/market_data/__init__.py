# backend/carteira/services/market_data/__init__.py
"""
Market data services package.

This package contains:
- Abstract interface for market data providers (base.py)
- Yahoo Finance implementation (yahoo.py)
- Provider registry used by the valuation engine (service.py)

Usage:
    from carteira.services.market_data import (
        MarketDataProvider,
        MarketDataService,
        PriceData,
        YahooFinanceProvider,
    )

Architecture:
    MarketDataProvider (ABC)
    └── YahooFinanceProvider (concrete)

    MarketDataService
    └── Ordered provider registry, keyed by supported asset type
"""

from carteira.services.market_data.base import (
    MarketDataProvider,
    PriceData,
)
from carteira.services.market_data.service import MarketDataService
from carteira.services.market_data.yahoo import YahooFinanceProvider

__all__ = [
    # Abstract interface
    "MarketDataProvider",
    "PriceData",
    # Registry
    "MarketDataService",
    # Concrete implementations
    "YahooFinanceProvider",
]
