# backend/carteira/services/protocols.py
"""
Protocol interfaces for service dependency injection.

Using typing.Protocol enables structural subtyping:
- Existing classes satisfy protocols without modification
- Test fakes work without explicit inheritance
- Clear documentation of what the valuation engine consumes
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from carteira.models import AssetType, Market, Transaction
    from carteira.services.market_data.base import PriceData
    from carteira.services.portfolio.types import AssetPosition


class TransactionStoreProtocol(Protocol):
    """Read access to the transaction ledger."""

    def find_all(self, db: Session) -> list[Transaction]:
        ...


class FixedIncomeServiceProtocol(Protocol):
    """Source of already-priced fixed income positions."""

    def get_all_positions(self, db: Session) -> list[AssetPosition]:
        ...


class HistoricalPriceProviderProtocol(Protocol):
    """The part of a market data provider used for point-in-time pricing."""

    @property
    def name(self) -> str:
        ...

    def get_historical_price(
        self,
        ticker: str,
        market: Market,
        target_date: date,
        asset_type: AssetType | None = None,
    ) -> PriceData | None:
        ...


class MarketDataServiceProtocol(Protocol):
    """Interface required by PortfolioService and EvolutionReconstructor."""

    def get_price(
        self,
        ticker: str,
        asset_type: AssetType | None = None,
        market: Market | None = None,
    ) -> Decimal:
        ...

    def find_providers_for(
        self,
        asset_type: AssetType,
    ) -> list[HistoricalPriceProviderProtocol]:
        ...
