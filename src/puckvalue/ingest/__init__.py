"""Input adapters that normalize raw stat exports."""

from .stats import (
    StatRow,
    load_league_snapshot,
    read_historical_stats,
    read_keepers,
    read_stat_rows,
    rows_to_snapshots,
)

__all__ = [
    "StatRow",
    "load_league_snapshot",
    "read_historical_stats",
    "read_keepers",
    "read_stat_rows",
    "rows_to_snapshots",
]
