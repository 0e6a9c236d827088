"""
Trade Statistics Implementation

A trade with pnl > 0 is a win; everything else, break-even included,
counts as a loss.
"""

import logging
from typing import Iterable, Optional

from scalpbot.schemas.statistics import ClosedPnlRecord, StatisticsSummary, SymbolTradeStats
from scalpbot.services.base import BaseService

logger = logging.getLogger(__name__)

OVERALL_SYMBOL = "ALL"


def _stats_for(symbol: str, pnls: list[float]) -> SymbolTradeStats:
    winning_pnls = [p for p in pnls if p > 0]
    losing_pnls = [p for p in pnls if p <= 0]

    total_trades = len(pnls)
    total_profit = sum(winning_pnls)
    total_loss = sum(losing_pnls)
    win_rate = (len(winning_pnls) / total_trades) * 100 if total_trades > 0 else 0

    return SymbolTradeStats(
        symbol=symbol,
        total_trades=total_trades,
        winning_trades=len(winning_pnls),
        losing_trades=len(losing_pnls),
        total_profit=round(total_profit, 8),
        total_loss=round(total_loss, 8),
        win_rate=round(win_rate, 2),
        net_pnl=round(total_profit + total_loss, 8),
    )


def summarize_closed_pnl(records: Iterable[ClosedPnlRecord]) -> dict[str, SymbolTradeStats]:
    """Group closed positions by symbol, keeping first-seen symbol order."""
    pnls_by_symbol: dict[str, list[float]] = {}
    for record in records:
        pnls_by_symbol.setdefault(record.symbol, []).append(record.closed_pnl)

    return {symbol: _stats_for(symbol, pnls) for symbol, pnls in pnls_by_symbol.items()}


def overall_stats(records: Iterable[ClosedPnlRecord]) -> SymbolTradeStats:
    return _stats_for(OVERALL_SYMBOL, [r.closed_pnl for r in records])


class StatisticsService(BaseService[list[ClosedPnlRecord], StatisticsSummary]):
    """Aggregates closed positions into a statistics summary."""

    @property
    def name(self) -> str:
        return "StatisticsService"

    async def execute(self, input_data: list[ClosedPnlRecord]) -> StatisticsSummary:
        records = await self.validate_input(input_data)
        summary = StatisticsSummary(
            symbols=summarize_closed_pnl(records),
            overall=overall_stats(records),
        )
        logger.info(
            f"Summarized {summary.overall.total_trades} closed trades "
            f"across {len(summary.symbols)} symbols"
        )
        return summary

    async def health_check(self) -> bool:
        return True


_service_instance: Optional[StatisticsService] = None


def get_statistics_service() -> StatisticsService:
    """Get or create statistics service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = StatisticsService()
    return _service_instance
