"""
Trade Statistics Service

CONTRACT:
    Input:  list[ClosedPnlRecord]
    Output: StatisticsSummary

Per-symbol win/loss counts, gross profit/loss and win rate of closed
positions. Fetching and exporting the records happen elsewhere.
"""

from scalpbot.services.statistics.service import (
    StatisticsService,
    get_statistics_service,
    summarize_closed_pnl,
)

__all__ = [
    "StatisticsService",
    "get_statistics_service",
    "summarize_closed_pnl",
]
