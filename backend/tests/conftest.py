# backend/tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- Database session fixtures (in-memory SQLite)
- Fake market data provider and in-memory stores
- Sample data factories
"""

import os

# Must be set before any carteira module reads settings
os.environ.setdefault("ENVIRONMENT", "test")

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from carteira.models import (
    AssetType,
    Base,
    FixedIncomeHolding,
    Market,
    Transaction,
    TransactionType,
)
from carteira.services.exceptions import TickerNotFoundError
from carteira.services.market_data.base import MarketDataProvider, PriceData
from carteira.services.market_data.service import MarketDataService
from carteira.services.portfolio.types import AssetPosition


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture(scope="function")
def db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)


@pytest.fixture(scope="function")
def db(db_engine) -> Iterator[Session]:
    """Create a database session for testing."""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


# =============================================================================
# MOCK OBJECTS (No database needed)
# =============================================================================

@dataclass
class MockTransaction:
    """Mock Transaction for unit testing."""
    ticker: str | None
    asset_type: AssetType
    market: Market
    transaction_type: TransactionType
    quantity: Decimal
    price_per_unit: Decimal
    transaction_date: date


def buy(
        ticker: str | None,
        quantity: str,
        price: str,
        on: date = date(2024, 1, 15),
        asset_type: AssetType = AssetType.STOCK,
        market: Market = Market.BRAZIL,
) -> MockTransaction:
    return MockTransaction(
        ticker=ticker,
        asset_type=asset_type,
        market=market,
        transaction_type=TransactionType.BUY,
        quantity=Decimal(quantity),
        price_per_unit=Decimal(price),
        transaction_date=on,
    )


def sell(
        ticker: str | None,
        quantity: str,
        price: str,
        on: date = date(2024, 2, 15),
        asset_type: AssetType = AssetType.STOCK,
        market: Market = Market.BRAZIL,
) -> MockTransaction:
    return MockTransaction(
        ticker=ticker,
        asset_type=asset_type,
        market=market,
        transaction_type=TransactionType.SELL,
        quantity=Decimal(quantity),
        price_per_unit=Decimal(price),
        transaction_date=on,
    )


def make_position(
        ticker: str | None,
        current_value: str,
        asset_type: AssetType = AssetType.STOCK,
        market: Market = Market.BRAZIL,
        invested_amount: str | None = None,
        name: str | None = None,
) -> AssetPosition:
    """Priced position with quantity 1, so price == value."""
    value = Decimal(current_value)
    invested = Decimal(invested_amount) if invested_amount is not None else value
    return AssetPosition(
        ticker=ticker,
        asset_type=asset_type,
        market=market,
        quantity=Decimal("1"),
        average_price=invested,
        current_price=value,
        invested_amount=invested,
        current_value=value,
        profit_loss=value - invested,
        profitability=Decimal("0"),
        name=name,
    )


# =============================================================================
# FAKE MARKET DATA PROVIDER
# =============================================================================

class FakeMarketDataProvider(MarketDataProvider):
    """
    In-memory MarketDataProvider for testing.

    Current prices are keyed by ticker; historical prices by (ticker, date).
    Tickers without a configured price raise TickerNotFoundError for current
    quotes and return None for historical lookups.
    """

    def __init__(
            self,
            name: str = "fake",
            asset_types: frozenset[AssetType] | None = None,
    ):
        self._name = name
        self._asset_types = asset_types or frozenset(AssetType)
        self._current: dict[str, Decimal] = {}
        self._historical: dict[tuple[str, date], Decimal] = {}
        self._default_historical: dict[str, Decimal] = {}
        self._errors: dict[str, Exception] = {}
        self.current_calls: list[str] = []
        self.historical_calls: list[tuple[str, date]] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def supported_asset_types(self) -> frozenset[AssetType]:
        return self._asset_types

    def set_price(self, ticker: str, price: str) -> None:
        self._current[ticker] = Decimal(price)

    def set_historical_price(self, ticker: str, on: date, price: str) -> None:
        self._historical[(ticker, on)] = Decimal(price)

    def set_default_historical_price(self, ticker: str, price: str) -> None:
        """Price returned for every date without an explicit entry."""
        self._default_historical[ticker] = Decimal(price)

    def set_error(self, ticker: str, error: Exception) -> None:
        self._errors[ticker] = error

    def get_current_price(
            self,
            ticker: str,
            market: Market,
            asset_type: AssetType | None = None,
    ) -> Decimal:
        self.current_calls.append(ticker)
        if ticker in self._errors:
            raise self._errors[ticker]
        if ticker not in self._current:
            raise TickerNotFoundError(ticker=ticker, market=market.value, provider=self.name)
        return self._current[ticker]

    def get_historical_price(
            self,
            ticker: str,
            market: Market,
            target_date: date,
            asset_type: AssetType | None = None,
    ) -> PriceData | None:
        self.historical_calls.append((ticker, target_date))
        if ticker in self._errors:
            raise self._errors[ticker]
        price = self._historical.get((ticker, target_date), self._default_historical.get(ticker))
        if price is None:
            return None
        return PriceData(ticker=ticker, price=price, price_date=target_date, provider=self.name)


@pytest.fixture
def fake_provider() -> FakeMarketDataProvider:
    """Create a fresh fake provider for each test."""
    return FakeMarketDataProvider()


@pytest.fixture
def market_data(fake_provider) -> MarketDataService:
    return MarketDataService([fake_provider])


# =============================================================================
# IN-MEMORY STORES
# =============================================================================

class InMemoryTransactionStore:
    def __init__(self, transactions=None):
        self.transactions = list(transactions or [])

    def find_all(self, db):
        return list(self.transactions)


class InMemoryFixedIncomeService:
    def __init__(self, positions=None):
        self.positions = list(positions or [])

    def get_all_positions(self, db):
        return list(self.positions)


# =============================================================================
# SAMPLE DATA FACTORIES (database)
# =============================================================================

def create_transaction(
        db: Session,
        ticker: str | None = "PETR4",
        asset_type: AssetType = AssetType.STOCK,
        market: Market = Market.BRAZIL,
        transaction_type: TransactionType = TransactionType.BUY,
        quantity: str = "10",
        price_per_unit: str = "30.00",
        transaction_date: date = date(2024, 1, 15),
) -> Transaction:
    """Factory function for creating Transaction rows in the database."""
    transaction = Transaction(
        ticker=ticker,
        asset_type=asset_type,
        market=market,
        transaction_type=transaction_type,
        quantity=Decimal(quantity),
        price_per_unit=Decimal(price_per_unit),
        transaction_date=transaction_date,
    )
    db.add(transaction)
    db.commit()
    db.refresh(transaction)
    return transaction


def create_fixed_income_holding(
        db: Session,
        name: str = "CDB Banco X 110% CDI",
        invested_amount: str = "1000.00",
        current_value: str = "1100.00",
        market: Market = Market.BRAZIL,
        investment_date: date = date(2024, 1, 10),
) -> FixedIncomeHolding:
    """Factory function for creating FixedIncomeHolding rows in the database."""
    holding = FixedIncomeHolding(
        name=name,
        market=market,
        invested_amount=Decimal(invested_amount),
        current_value=Decimal(current_value),
        investment_date=investment_date,
    )
    db.add(holding)
    db.commit()
    db.refresh(holding)
    return holding
