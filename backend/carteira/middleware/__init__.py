# backend/carteira/middleware/__init__.py
"""
Middleware components for Carteira.

Usage:
    from carteira.middleware import CorrelationIdMiddleware

    app.add_middleware(CorrelationIdMiddleware)
"""

from carteira.middleware.correlation import CorrelationIdMiddleware

__all__ = [
    "CorrelationIdMiddleware",
]
