# backend/carteira/services/portfolio/calculators.py
"""
Position calculators.

Each calculator follows the Single Responsibility Principle:
- PositionAggregator: Nets transactions into quantity / cost per AssetKey
- PositionValuer: Prices an aggregated position

Design Principles:
- Stateless (no instance state, pure functions)
- Receives all dependencies explicitly
- Returns immutable result objects
- Uses Decimal for ALL financial calculations, rounded through `ratio`

Usage:
    aggregator = PositionAggregator()
    for key, txns in aggregator.group_by_asset(transactions).items():
        aggregated = aggregator.aggregate(txns)
        if aggregated is not None:
            position = PositionValuer().value(key, aggregated, price)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from decimal import Decimal
from typing import TYPE_CHECKING

from carteira.models import TransactionType
from carteira.services.constants import HUNDRED, RATIO_QUANTUM, RATIO_ROUNDING, ZERO
from carteira.services.portfolio.types import AggregatedPosition, AssetKey, AssetPosition

if TYPE_CHECKING:
    from carteira.models import Transaction

logger = logging.getLogger(__name__)


# =============================================================================
# ARITHMETIC
# =============================================================================

def ratio(numerator: Decimal, denominator: Decimal) -> Decimal:
    """
    numerator / denominator rounded to 4 fractional digits, half-up.

    A zero denominator yields 0 instead of raising.
    """
    if denominator == ZERO:
        return ZERO
    return (numerator / denominator).quantize(RATIO_QUANTUM, rounding=RATIO_ROUNDING)


def percentage(numerator: Decimal, denominator: Decimal) -> Decimal:
    """ratio() scaled to a percentage: 0.1234 → 12.34."""
    return ratio(numerator, denominator) * HUNDRED


# =============================================================================
# POSITION AGGREGATOR
# =============================================================================

class PositionAggregator:
    """
    Nets BUY/SELL transactions into positions.

    Note:
        Transactions without a ticker are not tradable positions and are
        skipped by group_by_asset.
    """

    def group_by_asset(
            self,
            transactions: Iterable[Transaction],
    ) -> dict[AssetKey, list[Transaction]]:
        """Partition a ledger by (ticker, asset type, market)."""
        grouped: dict[AssetKey, list[Transaction]] = {}

        for txn in transactions:
            if not txn.ticker:
                continue
            key = AssetKey(
                ticker=txn.ticker,
                asset_type=txn.asset_type,
                market=txn.market,
            )
            grouped.setdefault(key, []).append(txn)

        return grouped

    def aggregate(self, transactions: Iterable[Transaction]) -> AggregatedPosition | None:
        """
        Net the transactions of one AssetKey.

        Quantity = Σ BUY qty - Σ SELL qty
        Total cost = Σ BUY qty × price (sales do not reduce it)

        Returns:
            AggregatedPosition, or None when nothing is held (quantity ≤ 0)
            or when no purchase exists to derive an average price from.
        """
        quantity = ZERO
        total_cost = ZERO
        total_bought_quantity = ZERO

        for txn in transactions:
            if txn.transaction_type == TransactionType.BUY:
                quantity += txn.quantity
                total_cost += txn.quantity * txn.price_per_unit
                total_bought_quantity += txn.quantity
            else:
                quantity -= txn.quantity

        aggregated = AggregatedPosition(
            quantity=quantity,
            total_cost=total_cost,
            total_bought_quantity=total_bought_quantity,
        )

        if not aggregated.has_position:
            if quantity > ZERO:
                logger.warning(
                    f"Positive quantity {quantity} without any purchase, "
                    "treating as no position"
                )
            return None

        return aggregated


# =============================================================================
# POSITION VALUER
# =============================================================================

class PositionValuer:
    """
    Combines an aggregated position with a price.

    Formulas:
        average_price   = total_cost / total_bought_quantity (4 dp)
        invested_amount = quantity × average_price
        current_value   = quantity × price
        profit_loss     = current_value - invested_amount
        profitability   = profit_loss / invested_amount × 100 (0 if invested ≤ 0)
    """

    def value(
            self,
            key: AssetKey,
            aggregated: AggregatedPosition,
            price: Decimal,
    ) -> AssetPosition:
        average_price = ratio(aggregated.total_cost, aggregated.total_bought_quantity)
        invested_amount = aggregated.quantity * average_price
        current_value = aggregated.quantity * price
        profit_loss = current_value - invested_amount

        if invested_amount > ZERO:
            profitability = percentage(profit_loss, invested_amount)
        else:
            profitability = ZERO

        return AssetPosition(
            ticker=key.ticker,
            asset_type=key.asset_type,
            market=key.market,
            quantity=aggregated.quantity,
            average_price=average_price,
            current_price=price,
            invested_amount=invested_amount,
            current_value=current_value,
            profit_loss=profit_loss,
            profitability=profitability,
        )
