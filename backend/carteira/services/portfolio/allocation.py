# backend/carteira/services/portfolio/allocation.py
"""
Allocation tree builder.

Tree shape:
    crypto → ticker
    usa    → asset type → ticker
    brazil → asset type → ticker

Every node's percentage is relative to its immediate parent, so siblings
add up to ~100 (per-node rounding is not redistributed). Asset type keys
are the lower-cased enum names ("stock", "etf", "fixed_income", "fii").
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from decimal import Decimal

from carteira.services.constants import ZERO
from carteira.services.portfolio.calculators import percentage
from carteira.services.portfolio.classification import CATEGORIES, CRYPTO, classify
from carteira.services.portfolio.types import AllocationNode, AssetPosition

logger = logging.getLogger(__name__)


def _total_value(positions: Iterable[AssetPosition]) -> Decimal:
    return sum((p.current_value for p in positions), ZERO)


class AllocationTreeBuilder:
    """Builds the percentage-of-parent allocation tree for the dashboard."""

    def build(
            self,
            positions: list[AssetPosition],
            total_value: Decimal,
    ) -> dict[str, AllocationNode]:
        """
        Args:
            positions: Priced positions
            total_value: Portfolio total the top level is relative to

        Returns:
            Top-level buckets keyed "crypto" / "usa" / "brazil"; empty when
            total_value ≤ 0. Buckets without positions are omitted.
        """
        if total_value <= ZERO:
            return {}

        by_category: dict[str, list[AssetPosition]] = {}
        for position in positions:
            by_category.setdefault(classify(position).key, []).append(position)

        tree: dict[str, AllocationNode] = {}
        for category in CATEGORIES:
            members = by_category.get(category.key)
            if not members:
                continue

            subtotal = _total_value(members)
            if category == CRYPTO:
                children = self._leaves(members, subtotal)
            else:
                children = self._by_asset_type(members, subtotal)

            tree[category.key] = AllocationNode(
                percentage=percentage(subtotal, total_value),
                children=children,
            )

        return tree

    def _by_asset_type(
            self,
            positions: list[AssetPosition],
            category_total: Decimal,
    ) -> dict[str, AllocationNode]:
        by_type: dict[str, list[AssetPosition]] = {}
        for position in positions:
            by_type.setdefault(position.asset_type.name.lower(), []).append(position)

        nodes: dict[str, AllocationNode] = {}
        for type_key, members in by_type.items():
            type_total = _total_value(members)
            nodes[type_key] = AllocationNode(
                percentage=percentage(type_total, category_total),
                children=self._leaves(members, type_total),
            )
        return nodes

    def _leaves(
            self,
            positions: list[AssetPosition],
            parent_total: Decimal,
    ) -> dict[str, AllocationNode]:
        # Same label twice in one bucket (e.g. a ticker bought on two
        # markets) is merged into a single leaf.
        values: dict[str, Decimal] = {}
        for position in positions:
            if position.label in values:
                logger.debug(f"Merging duplicate allocation leaf '{position.label}'")
            values[position.label] = values.get(position.label, ZERO) + position.current_value

        return {
            label: AllocationNode(percentage=percentage(value, parent_total))
            for label, value in values.items()
        }
