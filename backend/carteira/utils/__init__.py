# backend/carteira/utils/__init__.py
"""
Utility modules for Carteira.

Cross-cutting utilities used throughout the application:
- logging: Logging configuration with correlation ID support
- context: Request context management for correlation IDs
- date_utils: Calendar-month helpers for the evolution checkpoints

Usage:
    from carteira.utils import setup_logging
    from carteira.utils import get_correlation_id, set_correlation_id
    from carteira.utils.date_utils import trailing_month_starts
"""

from carteira.utils.context import (
    get_correlation_id,
    set_correlation_id,
    clear_correlation_id,
)
from carteira.utils.logging import setup_logging

__all__ = [
    # Logging
    "setup_logging",
    # Context
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
]
