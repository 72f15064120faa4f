# backend/carteira/services/__init__.py
"""
Service layer for business logic.

This package contains the service layer which encapsulates business logic
separate from the API (router) layer. Services:
- Have NO knowledge of HTTP (no HTTPException, no status codes)
- Raise domain-specific exceptions
- Receive database sessions as parameters (not via Depends)
- Are easily testable via dependency injection

Usage:
    from carteira.services import PortfolioService
    from carteira.services import MarketDataService, YahooFinanceProvider
    from carteira.services import TransactionRepository, FixedIncomeService
    from carteira.services import ServiceError, MarketDataError

Architecture:
    services/
    ├── __init__.py          # This file - main exports
    ├── exceptions.py        # Domain exceptions
    ├── constants.py         # Rounding rules and display labels
    ├── protocols.py         # Collaborator interfaces (Protocol classes)
    ├── transactions.py      # Read-only ledger store
    ├── fixed_income.py      # Fixed income positions
    ├── market_data/         # Providers and provider registry
    └── portfolio/           # Valuation engine
"""

from carteira.services.exceptions import (
    ServiceError,
    DataSourceError,
    MarketDataError,
    ProviderUnavailableError,
    TickerNotFoundError,
    RateLimitError,
    PriceNotAvailableError,
)
from carteira.services.market_data import (
    MarketDataProvider,
    MarketDataService,
    PriceData,
    YahooFinanceProvider,
)
from carteira.services.portfolio import PortfolioService
from carteira.services.transactions import TransactionRepository
from carteira.services.fixed_income import FixedIncomeService

__all__ = [
    # Exceptions
    "ServiceError",
    "DataSourceError",
    "MarketDataError",
    "ProviderUnavailableError",
    "TickerNotFoundError",
    "RateLimitError",
    "PriceNotAvailableError",
    # Market data
    "MarketDataProvider",
    "MarketDataService",
    "PriceData",
    "YahooFinanceProvider",
    # Stores
    "TransactionRepository",
    "FixedIncomeService",
    # Engine
    "PortfolioService",
]
