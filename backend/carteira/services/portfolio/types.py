# backend/carteira/services/portfolio/types.py
"""
Internal data types for the Portfolio Service.

These dataclasses are used internally by the portfolio calculators.
They are NOT Pydantic schemas - those are defined in carteira/schemas/portfolio.py
for API serialization.

Design Principles:
- Immutable (frozen=True): everything is recomputed per request
- Use Decimal for ALL financial values (never float)
- Use date (not datetime) for checkpoints
- Optional fields use None, not sentinel values

Type Hierarchy:
    AssetKey            - (ticker, asset type, market) identity of a position
    AggregatedPosition  - Netted quantity and cost for one AssetKey
    AssetPosition       - Fully priced position
    AllocationNode      - Percentage-of-parent tree node
    AssetTableRow       - One row of the "Meus Ativos" hierarchy
    AssetSubCategory    - Asset type group inside a category
    PortfolioSummary    - Heritage / invested / profitability
    PortfolioDashboard  - Summary + allocation + hierarchy
    EvolutionPoint      - Portfolio value at one checkpoint
    PortfolioEvolution  - Ordered checkpoints
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from carteira.models import AssetType, Market


# =============================================================================
# POSITIONS
# =============================================================================

@dataclass(frozen=True)
class AssetKey:
    """
    Identity of a position.

    Two transactions belong to the same position only when ticker,
    asset type and market all match.
    """

    ticker: str
    asset_type: AssetType
    market: Market


@dataclass(frozen=True)
class AggregatedPosition:
    """
    Running quantity and cost for one AssetKey.

    Attributes:
        quantity: Net units held (bought - sold)
        total_cost: Sum of quantity × price over BUY transactions only
        total_bought_quantity: Sum of BUY quantities

    Note:
        Average-cost basis: sales reduce the quantity but leave total_cost
        and total_bought_quantity untouched, so the average price is the
        mean over every purchase ever made.
    """

    quantity: Decimal
    total_cost: Decimal
    total_bought_quantity: Decimal

    @property
    def has_position(self) -> bool:
        """True if units are held and at least one purchase exists."""
        return self.quantity > Decimal("0") and self.total_bought_quantity > Decimal("0")


@dataclass(frozen=True)
class AssetPosition:
    """
    A position priced at a point in time.

    Attributes:
        ticker: Ledger symbol (None for fixed income)
        asset_type: Asset class
        market: Market the asset trades on
        quantity: Net units held
        average_price: total cost / total bought quantity (4 dp)
        current_price: Price used for valuation (current or historical)
        invested_amount: quantity × average_price
        current_value: quantity × current_price
        profit_loss: current_value - invested_amount
        profitability: profit_loss / invested_amount × 100 (0 if nothing invested)
        name: Display name; set for fixed income, None for ledger positions
    """

    ticker: str | None
    asset_type: AssetType
    market: Market
    quantity: Decimal
    average_price: Decimal
    current_price: Decimal
    invested_amount: Decimal
    current_value: Decimal
    profit_loss: Decimal
    profitability: Decimal
    name: str | None = None

    @property
    def label(self) -> str:
        """Key used for leaf buckets: the ticker, or the name when there is none."""
        return self.ticker or self.name or self.asset_type.value


# =============================================================================
# DASHBOARD
# =============================================================================

@dataclass(frozen=True)
class AllocationNode:
    """
    One bucket of the allocation tree.

    percentage is relative to the parent bucket (or to the whole portfolio
    at the top level). children is None on leaves.
    """

    percentage: Decimal
    children: dict[str, AllocationNode] | None = None


@dataclass(frozen=True)
class AssetTableRow:
    ticker: str | None
    name: str | None
    quantity: Decimal
    average_price: Decimal
    current_price: Decimal
    current_value: Decimal
    profitability: Decimal
    portfolio_percentage: Decimal


@dataclass(frozen=True)
class AssetSubCategory:
    """Asset type group ("Ações", "ETFs"...) with rows sorted by value."""

    name: str
    total_value: Decimal
    assets: tuple[AssetTableRow, ...]


@dataclass(frozen=True)
class PortfolioSummary:
    total_heritage: Decimal
    total_invested: Decimal
    profitability: Decimal


@dataclass(frozen=True)
class PortfolioDashboard:
    """
    Everything the dashboard page renders.

    Attributes:
        summary: Portfolio totals
        allocation: Top-level buckets ("crypto", "usa", "brazil")
        hierarchy: Category label ("Cripto", "EUA", "Brasil") to sub-categories
    """

    summary: PortfolioSummary
    allocation: dict[str, AllocationNode]
    hierarchy: dict[str, list[AssetSubCategory]]


# =============================================================================
# EVOLUTION
# =============================================================================

@dataclass(frozen=True)
class EvolutionPoint:
    """
    Portfolio value at one checkpoint.

    Attributes:
        period_date: Checkpoint date
        period: "MM/YY" label
        total_value: Sum of historically priced positions
        total_invested: Sum of invested amounts of those positions
    """

    period_date: date
    period: str
    total_value: Decimal
    total_invested: Decimal


@dataclass(frozen=True)
class PortfolioEvolution:
    points: tuple[EvolutionPoint, ...]
