# backend/carteira/dependencies.py
"""
Dependency injection module for FastAPI services.

Provides singleton service instances shared across all requests. Services
are lazily initialized on first use to avoid import-time side effects.

Usage in routers:
    from carteira.dependencies import get_portfolio_service

    @router.get("/dashboard")
    def dashboard(service: PortfolioService = Depends(get_portfolio_service)):
        ...
"""

import logging
from functools import lru_cache

from carteira.config import settings
from carteira.services.fixed_income import FixedIncomeService
from carteira.services.market_data import MarketDataService, YahooFinanceProvider
from carteira.services.portfolio import PortfolioService
from carteira.services.transactions import TransactionRepository

logger = logging.getLogger(__name__)


# =============================================================================
# SINGLETON SERVICE INSTANCES
# =============================================================================
# Order matters: define dependencies before dependents
# 1. get_market_data_service (no deps)
# 2. get_portfolio_service (depends on market data)


@lru_cache(maxsize=1)
def get_market_data_service() -> MarketDataService:
    """Provider registry; Yahoo Finance is the preferred (first) provider."""
    return MarketDataService([
        YahooFinanceProvider(timeout=settings.market_data_timeout),
    ])


@lru_cache(maxsize=1)
def get_portfolio_service() -> PortfolioService:
    logger.info("Creating PortfolioService")
    return PortfolioService(
        transaction_store=TransactionRepository(),
        market_data=get_market_data_service(),
        fixed_income=FixedIncomeService(),
        evolution_months=settings.evolution_months,
        max_workers=settings.historical_price_max_workers,
        lookup_timeout_seconds=settings.historical_price_timeout_seconds,
    )
