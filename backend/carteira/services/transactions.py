# backend/carteira/services/transactions.py
"""Read-only access to the transaction ledger."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from carteira.models import Transaction
from carteira.services.exceptions import DataSourceError

logger = logging.getLogger(__name__)


class TransactionRepository:
    """
    Loads transactions for the valuation engine.

    The engine never writes; this class exposes reads only.
    """

    def find_all(self, db: Session) -> list[Transaction]:
        """
        Load the whole ledger ordered by date.

        Raises:
            DataSourceError: If the query fails
        """
        stmt = select(Transaction).order_by(Transaction.transaction_date, Transaction.id)
        try:
            transactions = list(db.scalars(stmt).all())
        except SQLAlchemyError as e:
            logger.error(f"Failed to load transactions: {e}")
            raise DataSourceError("transactions", str(e)) from e

        logger.debug(f"Loaded {len(transactions)} transactions")
        return transactions
