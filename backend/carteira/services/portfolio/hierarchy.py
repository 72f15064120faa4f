# backend/carteira/services/portfolio/hierarchy.py
"""
Display hierarchy ("Meus Ativos") builder.

Groups positions by category label, then by friendly asset type name.
Sub-categories are sorted by total value and rows by current value, both
descending; Python's stable sort keeps grouping order on ties.
"""

from __future__ import annotations

from decimal import Decimal

from carteira.models import AssetType
from carteira.services.constants import ASSET_TYPE_LABELS, ZERO
from carteira.services.portfolio.calculators import percentage
from carteira.services.portfolio.classification import CATEGORIES, classify
from carteira.services.portfolio.types import AssetPosition, AssetSubCategory, AssetTableRow


def friendly_asset_type_name(asset_type: AssetType) -> str:
    return ASSET_TYPE_LABELS.get(asset_type, asset_type.name)


class DisplayHierarchyBuilder:

    def build(
            self,
            positions: list[AssetPosition],
            total_heritage: Decimal,
    ) -> dict[str, list[AssetSubCategory]]:
        grouped: dict[str, dict[str, list[AssetPosition]]] = {}
        for position in positions:
            category = classify(position).label
            sub_category = friendly_asset_type_name(position.asset_type)
            grouped.setdefault(category, {}).setdefault(sub_category, []).append(position)

        hierarchy: dict[str, list[AssetSubCategory]] = {}
        for category in CATEGORIES:
            sub_categories = grouped.get(category.label)
            if not sub_categories:
                continue

            entries = [
                self._sub_category(name, members, total_heritage)
                for name, members in sub_categories.items()
            ]
            entries.sort(key=lambda entry: entry.total_value, reverse=True)
            hierarchy[category.label] = entries

        return hierarchy

    def _sub_category(
            self,
            name: str,
            positions: list[AssetPosition],
            total_heritage: Decimal,
    ) -> AssetSubCategory:
        rows = [self._row(position, total_heritage) for position in positions]
        rows.sort(key=lambda row: row.current_value, reverse=True)

        return AssetSubCategory(
            name=name,
            total_value=sum((p.current_value for p in positions), ZERO),
            assets=tuple(rows),
        )

    @staticmethod
    def _row(position: AssetPosition, total_heritage: Decimal) -> AssetTableRow:
        if total_heritage > ZERO:
            share = percentage(position.current_value, total_heritage)
        else:
            share = ZERO

        return AssetTableRow(
            ticker=position.ticker,
            name=position.name,
            quantity=position.quantity,
            average_price=position.average_price,
            current_price=position.current_price,
            current_value=position.current_value,
            profitability=position.profitability,
            portfolio_percentage=share,
        )
