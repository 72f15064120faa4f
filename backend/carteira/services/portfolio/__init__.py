# backend/carteira/services/portfolio/__init__.py
"""
Portfolio Service Package.

This package provides the portfolio valuation engine:
- Current dashboard (get_dashboard)
- Value-over-time series (get_evolution)

Architecture:
    portfolio/
    ├── __init__.py         # This file - package exports
    ├── types.py            # Internal data classes
    ├── calculators.py      # Position aggregator and valuer
    ├── classification.py   # crypto / usa / brazil rules
    ├── allocation.py       # Allocation tree builder
    ├── hierarchy.py        # Display hierarchy builder
    ├── evolution.py        # Historical reconstruction (thread pool)
    └── service.py          # PortfolioService (orchestrator)

Data Flow:
    Transactions → PositionAggregator → AggregatedPosition
    AggregatedPosition + price → PositionValuer → AssetPosition
    AssetPositions → AllocationTreeBuilder / DisplayHierarchyBuilder
    Transactions + historical prices → EvolutionReconstructor → PortfolioEvolution
"""

from carteira.services.portfolio.allocation import AllocationTreeBuilder
from carteira.services.portfolio.calculators import (
    PositionAggregator,
    PositionValuer,
    percentage,
    ratio,
)
from carteira.services.portfolio.classification import Category, classify
from carteira.services.portfolio.evolution import EvolutionReconstructor, checkpoint_dates
from carteira.services.portfolio.hierarchy import DisplayHierarchyBuilder
from carteira.services.portfolio.service import PortfolioService
from carteira.services.portfolio.types import (
    AggregatedPosition,
    AllocationNode,
    AssetKey,
    AssetPosition,
    AssetSubCategory,
    AssetTableRow,
    EvolutionPoint,
    PortfolioDashboard,
    PortfolioEvolution,
    PortfolioSummary,
)

__all__ = [
    # Main service
    "PortfolioService",
    # Calculators
    "PositionAggregator",
    "PositionValuer",
    "AllocationTreeBuilder",
    "DisplayHierarchyBuilder",
    "EvolutionReconstructor",
    "checkpoint_dates",
    "classify",
    "Category",
    "ratio",
    "percentage",
    # Types
    "AssetKey",
    "AggregatedPosition",
    "AssetPosition",
    "AllocationNode",
    "AssetTableRow",
    "AssetSubCategory",
    "PortfolioSummary",
    "PortfolioDashboard",
    "EvolutionPoint",
    "PortfolioEvolution",
]
