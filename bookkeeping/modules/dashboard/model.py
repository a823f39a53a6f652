# bookkeeping/modules/dashboard/model.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ...database.data_cache import DataCache
from ..reporting.aggregation import QuickStats, dashboard_quick_stats


@dataclass
class DashboardModel:
    """
    Today's quick stats computed from the DataCache snapshots.

    Usage:
        model = DashboardModel(cache)
        model.refresh()
        print(model.stats.total_sales, model.stats.balance)
    """

    cache: DataCache
    stats: QuickStats = field(init=False, default_factory=QuickStats)
    refreshed_at: Optional[datetime] = field(init=False, default=None)

    def refresh(self, now: Optional[datetime] = None) -> QuickStats:
        now = now or datetime.now()
        self.stats = dashboard_quick_stats(
            self.cache.snapshot("sales"),
            self.cache.snapshot("debts"),
            self.cache.snapshot("expenses"),
            now,
        )
        self.refreshed_at = now
        return self.stats

    @property
    def error(self) -> Optional[str]:
        return self.cache.error

    @property
    def loading(self) -> bool:
        return self.cache.loading
