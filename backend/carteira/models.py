# backend/carteira/models.py
import enum
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Date, DateTime, Enum, Numeric, Index
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


class TransactionType(str, enum.Enum):
    BUY = "BUY"
    SELL = "SELL"


class AssetType(str, enum.Enum):
    STOCK = "STOCK"
    ETF = "ETF"
    CRYPTO = "CRYPTO"
    FIXED_INCOME = "FIXED_INCOME"
    FII = "FII"  # Fundo de Investimento Imobiliário (Brazilian REIT)


class Market(str, enum.Enum):
    BRAZIL = "BRAZIL"  # B3, domestic default
    US = "US"


class Transaction(Base):
    """
    A single BUY or SELL entry in the ledger.

    The valuation engine only reads this table. Rows without a ticker
    (e.g. fixed income bookkeeping) are ignored by position aggregation.
    """
    __tablename__ = "transactions"
    __table_args__ = (
        # "All transactions up to date D" is the evolution query pattern
        Index('ix_transaction_date', 'transaction_date'),
        Index('ix_transaction_identity', 'ticker', 'asset_type', 'market'),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    ticker: Mapped[str | None] = mapped_column(String, nullable=True)
    asset_type: Mapped[AssetType] = mapped_column(Enum(AssetType))
    market: Mapped[Market] = mapped_column(Enum(Market), default=Market.BRAZIL)
    transaction_type: Mapped[TransactionType] = mapped_column(Enum(TransactionType))

    # Numeric(18, 8) keeps crypto fractions exact
    quantity: Mapped[Decimal] = mapped_column(Numeric(18, 8))
    price_per_unit: Mapped[Decimal] = mapped_column(Numeric(18, 8))
    transaction_date: Mapped[date] = mapped_column(Date)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))


class FixedIncomeHolding(Base):
    """
    Current state of a fixed income instrument (CDB, Tesouro, LCI...).

    Accrual is computed outside this service; rows hold the invested amount
    and the latest gross value as supplied by the fixed income process.
    """
    __tablename__ = "fixed_income_holdings"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String)
    market: Mapped[Market] = mapped_column(Enum(Market), default=Market.BRAZIL)
    invested_amount: Mapped[Decimal] = mapped_column(Numeric(18, 8))
    current_value: Mapped[Decimal] = mapped_column(Numeric(18, 8))
    investment_date: Mapped[date] = mapped_column(Date)
    maturity_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
