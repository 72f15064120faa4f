# backend/carteira/services/fixed_income.py
"""
Fixed income positions.

Fixed income instruments have no ticker and no market quote. Each holding
row already carries its invested amount and current gross value, so it is
turned into a priced AssetPosition directly (one "unit" per holding).
"""

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from carteira.models import AssetType, FixedIncomeHolding
from carteira.services.exceptions import DataSourceError
from carteira.services.portfolio.calculators import percentage
from carteira.services.portfolio.types import AssetPosition

logger = logging.getLogger(__name__)

_ONE = Decimal("1")


class FixedIncomeService:

    def get_all_positions(self, db: Session) -> list[AssetPosition]:
        """
        Load every fixed income holding as a priced position.

        Raises:
            DataSourceError: If the query fails
        """
        stmt = select(FixedIncomeHolding).order_by(FixedIncomeHolding.id)
        try:
            holdings = db.scalars(stmt).all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load fixed income holdings: {e}")
            raise DataSourceError("fixed_income_holdings", str(e)) from e

        return [self._to_position(holding) for holding in holdings]

    @staticmethod
    def _to_position(holding: FixedIncomeHolding) -> AssetPosition:
        invested = holding.invested_amount
        current = holding.current_value
        profit_loss = current - invested
        profitability = percentage(profit_loss, invested) if invested > 0 else Decimal("0")

        return AssetPosition(
            ticker=None,
            asset_type=AssetType.FIXED_INCOME,
            market=holding.market,
            quantity=_ONE,
            average_price=invested,
            current_price=current,
            invested_amount=invested,
            current_value=current,
            profit_loss=profit_loss,
            profitability=profitability,
            name=holding.name,
        )
