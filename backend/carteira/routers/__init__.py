# backend/carteira/routers/__init__.py
"""
API routers for Carteira.

- portfolio: Dashboard and evolution endpoints
"""

from carteira.routers.portfolio import router as portfolio_router

__all__ = [
    "portfolio_router",
]
