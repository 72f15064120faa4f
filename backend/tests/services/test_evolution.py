# backend/tests/services/test_evolution.py
"""
Tests for the evolution reconstructor.

Test Coverage:
- Checkpoint generation (12 trailing month starts + today)
- Ledger replay up to each checkpoint
- Best-effort degradation: missing price, provider error, no provider,
  lookup timeout
- Thread pool fan-out and correlation ID propagation
"""

import threading
from datetime import date
from decimal import Decimal

import pytest

from carteira.models import AssetType, Market
from carteira.services.exceptions import ProviderUnavailableError
from carteira.services.market_data.service import MarketDataService
from carteira.services.portfolio.evolution import EvolutionReconstructor, checkpoint_dates
from carteira.utils.context import clear_correlation_id, get_correlation_id, set_correlation_id
from tests.conftest import FakeMarketDataProvider, buy, sell


TODAY = date(2025, 9, 17)


@pytest.fixture
def reconstructor(market_data) -> EvolutionReconstructor:
    return EvolutionReconstructor(market_data, max_workers=4, timeout_seconds=5)


def _by_period(evolution) -> dict:
    return {point.period: point for point in evolution.points}


# =============================================================================
# CHECKPOINTS
# =============================================================================

class TestCheckpointDates:

    def test_thirteen_checkpoints(self):
        dates = checkpoint_dates(TODAY)

        assert len(dates) == 13
        assert dates[0] == date(2024, 10, 1)
        assert dates[11] == date(2025, 9, 1)
        assert dates[12] == TODAY

    def test_month_starts_are_first_days(self):
        assert all(d.day == 1 for d in checkpoint_dates(TODAY)[:12])

    def test_dates_non_decreasing(self):
        dates = checkpoint_dates(TODAY)
        assert dates == sorted(dates)

    def test_today_on_first_of_month_is_repeated(self):
        dates = checkpoint_dates(date(2025, 9, 1))
        assert dates[-2] == dates[-1] == date(2025, 9, 1)

    def test_year_boundary(self):
        dates = checkpoint_dates(date(2025, 1, 31))

        assert dates[0] == date(2024, 2, 1)
        assert dates[10] == date(2024, 12, 1)
        assert dates[11] == date(2025, 1, 1)

    def test_custom_month_count(self):
        assert len(checkpoint_dates(TODAY, months=3)) == 4


# =============================================================================
# RECONSTRUCTION
# =============================================================================

class TestReconstruct:
    """Tests for EvolutionReconstructor.reconstruct."""

    def test_empty_ledger_gives_zero_points(self, reconstructor):
        evolution = reconstructor.reconstruct([], TODAY)

        assert len(evolution.points) == 13
        assert all(p.total_value == Decimal("0") for p in evolution.points)
        assert all(p.total_invested == Decimal("0") for p in evolution.points)

    def test_labels_are_month_year(self, reconstructor):
        evolution = reconstructor.reconstruct([], TODAY)

        periods = [p.period for p in evolution.points]
        assert periods[0] == "10/24"
        assert periods[11] == "09/25"
        assert periods[12] == "09/25"

    def test_position_appears_after_purchase(self, reconstructor, fake_provider):
        fake_provider.set_default_historical_price("PETR4", "120")
        transactions = [buy("PETR4", "10", "100", on=date(2025, 3, 10))]

        points = _by_period(reconstructor.reconstruct(transactions, TODAY))

        assert points["03/25"].total_value == Decimal("0")
        assert points["04/25"].total_value == Decimal("1200")
        assert points["04/25"].total_invested == Decimal("1000")

    def test_transaction_on_checkpoint_is_included(self, reconstructor, fake_provider):
        fake_provider.set_default_historical_price("PETR4", "100")
        transactions = [buy("PETR4", "1", "100", on=date(2025, 6, 1))]

        points = _by_period(reconstructor.reconstruct(transactions, TODAY))

        assert points["06/25"].total_value == Decimal("100")
        assert points["05/25"].total_value == Decimal("0")

    def test_uses_price_of_each_checkpoint(self, reconstructor, fake_provider):
        fake_provider.set_historical_price("PETR4", date(2025, 8, 1), "110")
        fake_provider.set_historical_price("PETR4", date(2025, 9, 1), "90")
        fake_provider.set_historical_price("PETR4", TODAY, "95")
        transactions = [buy("PETR4", "10", "100", on=date(2025, 7, 15))]

        evolution = reconstructor.reconstruct(transactions, TODAY)

        assert [p.total_value for p in evolution.points[-3:]] == [
            Decimal("1100"), Decimal("900"), Decimal("950"),
        ]

    def test_sold_position_disappears(self, reconstructor, fake_provider):
        fake_provider.set_default_historical_price("PETR4", "100")
        transactions = [
            buy("PETR4", "10", "100", on=date(2025, 1, 10)),
            sell("PETR4", "10", "120", on=date(2025, 5, 10)),
        ]

        points = _by_period(reconstructor.reconstruct(transactions, TODAY))

        assert points["05/25"].total_value == Decimal("1000")
        assert points["06/25"].total_value == Decimal("0")

    def test_missing_historical_price_excludes_only_that_asset(self, reconstructor, fake_provider):
        """Y has no price on 2025-06-01 → that checkpoint excludes Y only."""
        fake_provider.set_default_historical_price("X", "10")
        fake_provider.set_historical_price("Y", date(2025, 5, 1), "20")
        fake_provider.set_historical_price("Y", date(2025, 7, 1), "20")
        transactions = [
            buy("X", "1", "10", on=date(2025, 4, 10)),
            buy("Y", "1", "20", on=date(2025, 4, 10)),
        ]

        points = _by_period(reconstructor.reconstruct(transactions, TODAY))

        assert points["05/25"].total_value == Decimal("30")
        assert points["06/25"].total_value == Decimal("10")
        assert points["06/25"].total_invested == Decimal("10")
        assert points["07/25"].total_value == Decimal("30")

    def test_provider_error_excludes_asset(self, reconstructor, fake_provider):
        fake_provider.set_default_historical_price("X", "10")
        fake_provider.set_error("Y", ProviderUnavailableError(provider="fake", reason="timeout"))
        transactions = [
            buy("X", "1", "10", on=date(2025, 1, 10)),
            buy("Y", "1", "20", on=date(2025, 1, 10)),
        ]

        evolution = reconstructor.reconstruct(transactions, TODAY)

        assert evolution.points[-1].total_value == Decimal("10")

    def test_unexpected_error_excludes_asset(self, reconstructor, fake_provider):
        fake_provider.set_default_historical_price("X", "10")
        fake_provider.set_error("Y", RuntimeError("boom"))
        transactions = [
            buy("X", "1", "10", on=date(2025, 1, 10)),
            buy("Y", "1", "20", on=date(2025, 1, 10)),
        ]

        evolution = reconstructor.reconstruct(transactions, TODAY)

        assert evolution.points[-1].total_value == Decimal("10")

    def test_asset_type_without_provider_is_excluded(self):
        stocks_only = FakeMarketDataProvider(asset_types=frozenset({AssetType.STOCK}))
        stocks_only.set_default_historical_price("PETR4", "10")
        stocks_only.set_default_historical_price("BTC", "300000")
        reconstructor = EvolutionReconstructor(MarketDataService([stocks_only]))
        transactions = [
            buy("PETR4", "1", "10", on=date(2025, 1, 10)),
            buy("BTC", "1", "250000", on=date(2025, 1, 10), asset_type=AssetType.CRYPTO),
        ]

        evolution = reconstructor.reconstruct(transactions, TODAY)

        assert evolution.points[-1].total_value == Decimal("10")
        assert all(ticker != "BTC" for ticker, _ in stocks_only.historical_calls)

    def test_only_first_provider_is_asked(self):
        """Historical lookups do not fall through to later providers."""
        primary = FakeMarketDataProvider(name="primary")
        secondary = FakeMarketDataProvider(name="secondary")
        secondary.set_default_historical_price("PETR4", "10")
        reconstructor = EvolutionReconstructor(MarketDataService([primary, secondary]))
        transactions = [buy("PETR4", "1", "10", on=date(2025, 1, 10))]

        evolution = reconstructor.reconstruct(transactions, TODAY)

        assert evolution.points[-1].total_value == Decimal("0")
        assert secondary.historical_calls == []

    def test_transactions_after_today_are_ignored(self, reconstructor, fake_provider):
        fake_provider.set_default_historical_price("PETR4", "10")
        transactions = [buy("PETR4", "1", "10", on=date(2025, 10, 1))]

        evolution = reconstructor.reconstruct(transactions, TODAY)

        assert evolution.points[-1].total_value == Decimal("0")
        assert fake_provider.historical_calls == []

    def test_one_lookup_per_checkpoint_and_asset(self, reconstructor, fake_provider):
        fake_provider.set_default_historical_price("PETR4", "10")
        transactions = [
            buy("PETR4", "1", "10", on=date(2024, 1, 10)),
            buy("PETR4", "1", "10", on=date(2024, 2, 10)),
        ]

        reconstructor.reconstruct(transactions, TODAY)

        assert len(fake_provider.historical_calls) == 13
        assert sorted(d for _, d in fake_provider.historical_calls) == checkpoint_dates(TODAY)

    def test_identical_inputs_give_identical_series(self, reconstructor, fake_provider):
        fake_provider.set_default_historical_price("PETR4", "12.34")
        fake_provider.set_default_historical_price("AAPL", "230.10")
        transactions = [
            buy("PETR4", "7", "10", on=date(2024, 12, 10)),
            buy("AAPL", "3", "200", on=date(2025, 2, 10), market=Market.US),
        ]

        first = reconstructor.reconstruct(transactions, TODAY)
        second = reconstructor.reconstruct(transactions, TODAY)

        assert first == second


# =============================================================================
# CONCURRENCY
# =============================================================================

class BlockingProvider(FakeMarketDataProvider):
    """Blocks historical lookups for one ticker until released."""

    def __init__(self, slow_ticker: str):
        super().__init__()
        self._slow_ticker = slow_ticker
        self.release = threading.Event()

    def get_historical_price(self, ticker, market, target_date, asset_type=None):
        if ticker == self._slow_ticker:
            self.release.wait(timeout=5)
        return super().get_historical_price(ticker, market, target_date, asset_type)


class RecordingProvider(FakeMarketDataProvider):
    """Records the thread and correlation ID each lookup ran with."""

    def __init__(self):
        super().__init__()
        self.seen: list[tuple[str, str | None]] = []
        self._lock = threading.Lock()

    def get_historical_price(self, ticker, market, target_date, asset_type=None):
        with self._lock:
            self.seen.append((threading.current_thread().name, get_correlation_id()))
        return super().get_historical_price(ticker, market, target_date, asset_type)


class TestFanOut:

    def test_slow_lookup_is_dropped_at_deadline(self):
        provider = BlockingProvider(slow_ticker="SLOW")
        provider.set_default_historical_price("SLOW", "50")
        provider.set_default_historical_price("FAST", "10")
        reconstructor = EvolutionReconstructor(
            MarketDataService([provider]),
            max_workers=4,
            timeout_seconds=0.2,
        )
        transactions = [
            buy("SLOW", "1", "50", on=TODAY),
            buy("FAST", "1", "10", on=TODAY),
        ]

        try:
            evolution = reconstructor.reconstruct(transactions, TODAY)
        finally:
            provider.release.set()

        assert evolution.points[-1].total_value == Decimal("10")
        assert evolution.points[-1].total_invested == Decimal("10")

    def test_lookups_run_in_worker_threads(self):
        provider = RecordingProvider()
        provider.set_default_historical_price("PETR4", "10")
        reconstructor = EvolutionReconstructor(MarketDataService([provider]), max_workers=2)

        reconstructor.reconstruct([buy("PETR4", "1", "10", on=date(2024, 1, 10))], TODAY)

        assert len(provider.seen) == 13
        assert all(name.startswith("historical-price") for name, _ in provider.seen)

    def test_correlation_id_reaches_workers(self):
        provider = RecordingProvider()
        provider.set_default_historical_price("PETR4", "10")
        reconstructor = EvolutionReconstructor(MarketDataService([provider]), max_workers=2)

        set_correlation_id("req-evolution-1")
        try:
            reconstructor.reconstruct([buy("PETR4", "1", "10", on=date(2024, 1, 10))], TODAY)
        finally:
            clear_correlation_id()

        assert {cid for _, cid in provider.seen} == {"req-evolution-1"}
