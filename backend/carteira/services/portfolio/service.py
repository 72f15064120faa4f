# backend/carteira/services/portfolio/service.py
"""
Portfolio Service - Main orchestrator for the dashboard and evolution.

This is the single entry point for portfolio valuation:
- get_dashboard(): Summary + allocation tree + display hierarchy
- get_evolution(): Value-over-time series for the chart

Design Principles:
- Dependency Injection: stores and market data injected via constructor
- Read Only: nothing is persisted; everything is recomputed per call
- Best-effort: an asset whose price cannot be resolved is left out,
  the rest of the portfolio is still returned
- No HTTP Knowledge: store failures surface as domain exceptions

Usage:
    from carteira.services.portfolio import PortfolioService

    service = PortfolioService(
        transaction_store=TransactionRepository(),
        market_data=MarketDataService([YahooFinanceProvider()]),
        fixed_income=FixedIncomeService(),
    )

    dashboard = service.get_dashboard(db)
    evolution = service.get_evolution(db)
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from carteira.services.constants import ZERO
from carteira.services.exceptions import MarketDataError
from carteira.services.portfolio.allocation import AllocationTreeBuilder
from carteira.services.portfolio.calculators import (
    PositionAggregator,
    PositionValuer,
    percentage,
)
from carteira.services.portfolio.evolution import EvolutionReconstructor
from carteira.services.portfolio.hierarchy import DisplayHierarchyBuilder
from carteira.services.portfolio.types import (
    AssetPosition,
    PortfolioDashboard,
    PortfolioEvolution,
    PortfolioSummary,
)

if TYPE_CHECKING:
    from carteira.models import Transaction
    from carteira.services.protocols import (
        FixedIncomeServiceProtocol,
        MarketDataServiceProtocol,
        TransactionStoreProtocol,
    )

logger = logging.getLogger(__name__)


class PortfolioService:
    """
    Computes the dashboard and evolution payloads.

    Attributes:
        _transactions: Ledger store
        _market_data: Current quotes and historical providers
        _fixed_income: Source of already-priced fixed income positions
        _evolution: Reconstructor for the time series
    """

    def __init__(
            self,
            transaction_store: TransactionStoreProtocol,
            market_data: MarketDataServiceProtocol,
            fixed_income: FixedIncomeServiceProtocol,
            evolution_months: int = 12,
            max_workers: int = 8,
            lookup_timeout_seconds: float = 30.0,
    ) -> None:
        self._transactions = transaction_store
        self._market_data = market_data
        self._fixed_income = fixed_income

        self._aggregator = PositionAggregator()
        self._valuer = PositionValuer()
        self._allocation = AllocationTreeBuilder()
        self._hierarchy = DisplayHierarchyBuilder()
        self._evolution = EvolutionReconstructor(
            market_data,
            months=evolution_months,
            max_workers=max_workers,
            timeout_seconds=lookup_timeout_seconds,
        )

    # =========================================================================
    # DASHBOARD
    # =========================================================================

    def get_dashboard(self, db: Session) -> PortfolioDashboard:
        """
        Value the portfolio at current prices.

        Profitability = (heritage - invested) / invested × 100, or 0 when
        nothing is invested.
        """
        transactions = self._transactions.find_all(db)
        positions = self._current_positions(transactions)
        positions.extend(self._fixed_income.get_all_positions(db))

        total_heritage = sum((p.current_value for p in positions), ZERO)
        total_invested = sum((p.invested_amount for p in positions), ZERO)

        if total_invested > ZERO:
            profitability = percentage(total_heritage - total_invested, total_invested)
        else:
            profitability = ZERO

        logger.info(
            f"Dashboard computed: {len(positions)} positions, "
            f"heritage={total_heritage}, invested={total_invested}"
        )

        return PortfolioDashboard(
            summary=PortfolioSummary(
                total_heritage=total_heritage,
                total_invested=total_invested,
                profitability=profitability,
            ),
            allocation=self._allocation.build(positions, total_heritage),
            hierarchy=self._hierarchy.build(positions, total_heritage),
        )

    def _current_positions(self, transactions: list[Transaction]) -> list[AssetPosition]:
        """Open ledger positions priced with current quotes, one lookup per asset."""
        positions: list[AssetPosition] = []

        for key, txns in self._aggregator.group_by_asset(transactions).items():
            aggregated = self._aggregator.aggregate(txns)
            if aggregated is None:
                continue

            try:
                price = self._market_data.get_price(key.ticker, key.asset_type, key.market)
            except MarketDataError as e:
                logger.warning(f"Skipping {key.ticker}: {e}")
                continue
            except Exception:
                logger.exception(f"Unexpected error pricing {key.ticker}, skipping it")
                continue

            positions.append(self._valuer.value(key, aggregated, price))

        return positions

    # =========================================================================
    # EVOLUTION
    # =========================================================================

    def get_evolution(self, db: Session, today: date | None = None) -> PortfolioEvolution:
        """
        Value the ledger at each checkpoint using historical prices.

        Args:
            db: Database session
            today: Last checkpoint (defaults to the current date)
        """
        transactions = self._transactions.find_all(db)
        return self._evolution.reconstruct(transactions, today or date.today())
