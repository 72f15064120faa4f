# backend/carteira/schemas/__init__.py
"""
Pydantic schemas for API responses.

- errors: Error response formats
- portfolio: Dashboard and evolution payloads

Usage:
    from carteira.schemas import PortfolioDashboardResponse, ErrorDetail
"""

from carteira.schemas.errors import ErrorDetail, ValidationErrorDetail
from carteira.schemas.portfolio import (
    AllocationNodeResponse,
    AssetSubCategoryResponse,
    AssetTableRowResponse,
    EvolutionPointResponse,
    PortfolioDashboardResponse,
    PortfolioEvolutionResponse,
    PortfolioSummaryResponse,
)

__all__ = [
    # Errors
    "ErrorDetail",
    "ValidationErrorDetail",
    # Dashboard
    "PortfolioSummaryResponse",
    "AllocationNodeResponse",
    "AssetTableRowResponse",
    "AssetSubCategoryResponse",
    "PortfolioDashboardResponse",
    # Evolution
    "EvolutionPointResponse",
    "PortfolioEvolutionResponse",
]
