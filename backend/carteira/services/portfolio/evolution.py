# backend/carteira/services/portfolio/evolution.py
"""
Portfolio evolution reconstruction.

Replays the ledger at a series of checkpoints and prices every open
position with its historical close, producing a value-over-time series.

Checkpoints:
    The first day of each of the trailing N calendar months (current month
    included, oldest first), followed by today.

Concurrency:
    Every (checkpoint, position) price lookup is submitted to one thread
    pool owned by the reconstruct() call. Each checkpoint then waits on
    its own futures (bounded by a timeout) before its point is summed.
    A lookup that fails, returns no data, or is still pending at the
    deadline only removes that asset from that checkpoint.

Known gap:
    Fixed income has no point-in-time valuation and is not included.
"""

from __future__ import annotations

import contextvars
import logging
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor, wait
from datetime import date
from typing import TYPE_CHECKING

from carteira.services.constants import PERIOD_LABEL_FORMAT, ZERO
from carteira.services.exceptions import MarketDataError
from carteira.services.portfolio.calculators import PositionAggregator, PositionValuer
from carteira.services.portfolio.types import (
    AggregatedPosition,
    AssetKey,
    AssetPosition,
    EvolutionPoint,
    PortfolioEvolution,
)
from carteira.utils.date_utils import trailing_month_starts

if TYPE_CHECKING:
    from carteira.models import Transaction
    from carteira.services.protocols import MarketDataServiceProtocol

logger = logging.getLogger(__name__)


def checkpoint_dates(today: date, months: int = 12) -> list[date]:
    """Trailing month starts (oldest first) followed by today."""
    return trailing_month_starts(today, months) + [today]


class EvolutionReconstructor:
    """
    Builds the evolution series from the ledger and historical prices.

    Historical prices come from the first provider registered for the
    asset type; no provider or no price for the date drops the position
    from that checkpoint instead of valuing it at zero.
    """

    def __init__(
            self,
            market_data: MarketDataServiceProtocol,
            months: int = 12,
            max_workers: int = 8,
            timeout_seconds: float = 30.0,
    ) -> None:
        self._market_data = market_data
        self._months = months
        self._max_workers = max_workers
        self._timeout_seconds = timeout_seconds
        self._aggregator = PositionAggregator()
        self._valuer = PositionValuer()

    def reconstruct(
            self,
            transactions: Sequence[Transaction],
            today: date,
    ) -> PortfolioEvolution:
        """
        Args:
            transactions: The full ledger
            today: Last checkpoint

        Returns:
            PortfolioEvolution with months + 1 points in date order
        """
        checkpoints = checkpoint_dates(today, self._months)
        logger.info(
            f"Reconstructing evolution over {len(checkpoints)} checkpoints "
            f"({checkpoints[0]} to {checkpoints[-1]})"
        )

        executor = ThreadPoolExecutor(
            max_workers=self._max_workers,
            thread_name_prefix="historical-price",
        )
        try:
            submitted = [
                (checkpoint, self._submit_lookups(executor, transactions, checkpoint))
                for checkpoint in checkpoints
            ]
            points = [
                self._collect_point(checkpoint, futures)
                for checkpoint, futures in submitted
            ]
        finally:
            # Lookups abandoned at a deadline are not waited for
            executor.shutdown(wait=False, cancel_futures=True)

        return PortfolioEvolution(points=tuple(points))

    # =========================================================================
    # FAN-OUT
    # =========================================================================

    def _positions_at(
            self,
            transactions: Sequence[Transaction],
            checkpoint: date,
    ) -> list[tuple[AssetKey, AggregatedPosition]]:
        """Open positions as of the end of checkpoint."""
        up_to_date = [t for t in transactions if t.transaction_date <= checkpoint]

        positions = []
        for key, txns in self._aggregator.group_by_asset(up_to_date).items():
            aggregated = self._aggregator.aggregate(txns)
            if aggregated is not None:
                positions.append((key, aggregated))
        return positions

    def _submit_lookups(
            self,
            executor: ThreadPoolExecutor,
            transactions: Sequence[Transaction],
            checkpoint: date,
    ) -> list[Future[AssetPosition | None]]:
        # Each task gets its own context copy: a Context cannot be entered
        # by two threads at once.
        return [
            executor.submit(
                contextvars.copy_context().run,
                self._price_position,
                key,
                aggregated,
                checkpoint,
            )
            for key, aggregated in self._positions_at(transactions, checkpoint)
        ]

    def _price_position(
            self,
            key: AssetKey,
            aggregated: AggregatedPosition,
            checkpoint: date,
    ) -> AssetPosition | None:
        """Runs in a worker thread. Never raises."""
        providers = self._market_data.find_providers_for(key.asset_type)
        if not providers:
            logger.debug(f"No provider for {key.asset_type.value}, skipping {key.ticker}")
            return None

        provider = providers[0]
        try:
            price_data = provider.get_historical_price(
                key.ticker,
                key.market,
                checkpoint,
                asset_type=key.asset_type,
            )
        except MarketDataError as e:
            logger.warning(f"Historical price for {key.ticker} on {checkpoint} unavailable: {e}")
            return None
        except Exception:
            logger.exception(f"Unexpected error pricing {key.ticker} on {checkpoint}")
            return None

        if price_data is None:
            logger.debug(f"No historical price for {key.ticker} on {checkpoint}")
            return None

        return self._valuer.value(key, aggregated, price_data.price)

    # =========================================================================
    # JOIN
    # =========================================================================

    def _collect_point(
            self,
            checkpoint: date,
            futures: list[Future[AssetPosition | None]],
    ) -> EvolutionPoint:
        """Wait for one checkpoint's lookups and sum what resolved."""
        done: set[Future[AssetPosition | None]] = set()
        if futures:
            done, not_done = wait(futures, timeout=self._timeout_seconds)
            if not_done:
                logger.warning(
                    f"{len(not_done)} of {len(futures)} price lookups for {checkpoint} "
                    f"did not finish within {self._timeout_seconds}s, dropping them"
                )
                for future in not_done:
                    future.cancel()

        total_value = ZERO
        total_invested = ZERO
        # Submission order keeps the sum deterministic
        for future in futures:
            if future not in done:
                continue
            position = future.result()
            if position is None:
                continue
            total_value += position.current_value
            total_invested += position.invested_amount

        return EvolutionPoint(
            period_date=checkpoint,
            period=checkpoint.strftime(PERIOD_LABEL_FORMAT),
            total_value=total_value,
            total_invested=total_invested,
        )
