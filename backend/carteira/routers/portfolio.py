# backend/carteira/routers/portfolio.py
"""
Portfolio endpoints.

- GET /portfolio/dashboard - Summary, allocation tree and asset hierarchy
- GET /portfolio/evolution - Monthly value-over-time series

Both are read-only and recomputed on every request.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from carteira.database import get_db
from carteira.dependencies import get_portfolio_service
from carteira.schemas.portfolio import (
    AllocationNodeResponse,
    AssetSubCategoryResponse,
    AssetTableRowResponse,
    EvolutionPointResponse,
    PortfolioDashboardResponse,
    PortfolioEvolutionResponse,
    PortfolioSummaryResponse,
)
from carteira.services.portfolio import PortfolioService

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/portfolio",
    tags=["Portfolio"],
)


# =============================================================================
# MAPPER FUNCTIONS (Internal Types -> Pydantic Schemas)
# =============================================================================

def _map_allocation_node(node) -> AllocationNodeResponse:
    """Map internal AllocationNode (recursively) to Pydantic schema."""
    children = None
    if node.children is not None:
        children = {key: _map_allocation_node(child) for key, child in node.children.items()}
    return AllocationNodeResponse(percentage=node.percentage, children=children)


def _map_sub_category(sub_category) -> AssetSubCategoryResponse:
    return AssetSubCategoryResponse(
        name=sub_category.name,
        total_value=sub_category.total_value,
        assets=[AssetTableRowResponse.model_validate(row) for row in sub_category.assets],
    )


def _map_dashboard(dashboard) -> PortfolioDashboardResponse:
    return PortfolioDashboardResponse(
        summary=PortfolioSummaryResponse.model_validate(dashboard.summary),
        allocation={
            key: _map_allocation_node(node)
            for key, node in dashboard.allocation.items()
        },
        hierarchy={
            category: [_map_sub_category(sub) for sub in sub_categories]
            for category, sub_categories in dashboard.hierarchy.items()
        },
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get(
    "/dashboard",
    response_model=PortfolioDashboardResponse,
    summary="Portfolio dashboard",
)
def get_dashboard(
        db: Session = Depends(get_db),
        service: PortfolioService = Depends(get_portfolio_service),
):
    """
    Value the portfolio at current prices.

    Assets whose quote cannot be fetched are left out of every figure
    instead of failing the request.
    """
    return _map_dashboard(service.get_dashboard(db))


@router.get(
    "/evolution",
    response_model=PortfolioEvolutionResponse,
    summary="Portfolio evolution",
)
def get_evolution(
        db: Session = Depends(get_db),
        service: PortfolioService = Depends(get_portfolio_service),
):
    """
    Portfolio value at the first day of each of the last months plus today.

    Fixed income is not included.
    """
    evolution = service.get_evolution(db)
    return PortfolioEvolutionResponse(
        points=[EvolutionPointResponse.model_validate(point) for point in evolution.points],
    )
