# backend/carteira/schemas/portfolio.py
"""
Pydantic schemas for the portfolio dashboard and evolution.

Decimal fields are serialized as JSON strings to keep full precision.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# DASHBOARD SCHEMAS
# =============================================================================

class PortfolioSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_heritage: Decimal = Field(..., description="Sum of current values")
    total_invested: Decimal = Field(..., description="Sum of invested amounts")
    profitability: Decimal = Field(
        ...,
        description="(heritage - invested) / invested, as a percentage"
    )


class AllocationNodeResponse(BaseModel):
    """Allocation bucket; percentage is relative to the parent bucket."""

    model_config = ConfigDict(from_attributes=True)

    percentage: Decimal
    children: dict[str, AllocationNodeResponse] | None = None


class AssetTableRowResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    ticker: str | None
    name: str | None
    quantity: Decimal
    average_price: Decimal
    current_price: Decimal
    current_value: Decimal
    profitability: Decimal
    portfolio_percentage: Decimal = Field(
        ...,
        description="Share of the whole portfolio, as a percentage"
    )


class AssetSubCategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str = Field(..., description="Asset type label (e.g., 'Ações')")
    total_value: Decimal
    assets: list[AssetTableRowResponse]


class PortfolioDashboardResponse(BaseModel):
    summary: PortfolioSummaryResponse
    allocation: dict[str, AllocationNodeResponse] = Field(
        ...,
        description="Top-level buckets: crypto, usa, brazil"
    )
    hierarchy: dict[str, list[AssetSubCategoryResponse]] = Field(
        ...,
        description="Category label (Cripto, EUA, Brasil) to sub-categories"
    )


# =============================================================================
# EVOLUTION SCHEMAS
# =============================================================================

class EvolutionPointResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    period: str = Field(..., description="Checkpoint label, MM/YY")
    total_value: Decimal
    total_invested: Decimal


class PortfolioEvolutionResponse(BaseModel):
    points: list[EvolutionPointResponse]


AllocationNodeResponse.model_rebuild()
