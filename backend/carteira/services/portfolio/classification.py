# backend/carteira/services/portfolio/classification.py
"""
Region classification of priced positions.

Rules are evaluated top to bottom and the first match wins, so a crypto
asset listed on a US exchange is still "crypto". The last rule always
matches.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from carteira.models import AssetType, Market
from carteira.services.portfolio.types import AssetPosition


@dataclass(frozen=True)
class Category:
    """
    A top-level bucket.

    Attributes:
        key: Allocation tree key ("crypto", "usa", "brazil")
        label: Display hierarchy label ("Cripto", "EUA", "Brasil")
    """

    key: str
    label: str


CRYPTO = Category(key="crypto", label="Cripto")
USA = Category(key="usa", label="EUA")
BRAZIL = Category(key="brazil", label="Brasil")


CLASSIFICATION_RULES: tuple[tuple[Callable[[AssetPosition], bool], Category], ...] = (
    (lambda position: position.asset_type == AssetType.CRYPTO, CRYPTO),
    (lambda position: position.market == Market.US, USA),
    (lambda position: True, BRAZIL),
)

# Emission order for categories
CATEGORIES: tuple[Category, ...] = tuple(category for _, category in CLASSIFICATION_RULES)


def classify(position: AssetPosition) -> Category:
    for matches, category in CLASSIFICATION_RULES:
        if matches(position):
            return category
    return BRAZIL
