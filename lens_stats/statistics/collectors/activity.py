"""
Editing activity over time statistics collector.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
import logging
from typing import Dict

from lens_stats.labels import period_key
from lens_stats.records import ChangeDataset
from lens_stats.statistics.aggregate import moving_average, period_counts
from lens_stats.statistics.base import StatisticsCollector, register_collector
from lens_stats.statistics.model import Stats

logger = logging.getLogger(__name__)


@register_collector
@dataclass
class ActivityCollector(StatisticsCollector):
    """
    Collects editing activity trends from accepted, non-deleting changes.
    
    Statistics collected:
        - Changes per ISO week
        - Creations vs modifications per period
        - Edit velocity per period with a trailing moving average
    """
    collector_id: str = "activity"
    velocity_period: str = "week"
    trend_period: str = "month"
    moving_average_window: int = 4
    
    def collect(self, dataset: ChangeDataset, existing_stats: Stats, collector_num: int = None, total_collectors: int = None) -> Stats:
        """Collect activity-over-time statistics."""
        stats = Stats()
        self._report_step(info=f"{self._prefix(collector_num, total_collectors)}Analyzing editing activity")
        
        changes = [c for c in dataset.accepted_changes if not c.is_deletion]
        
        stats.add_value('activity', 'weekly_activity', period_counts((c.change_time for c in changes), 'week'))
        
        trend: Dict[str, Dict[str, int]] = defaultdict(lambda: {'creations': 0, 'modifications': 0})
        for change in changes:
            key = period_key(change.change_time, self.trend_period)
            trend[key]['creations' if change.is_creation else 'modifications'] += 1
        stats.add_value('activity', 'creation_vs_modification', {k: trend[k] for k in sorted(trend)})
        
        velocity = period_counts((c.change_time for c in changes), self.velocity_period)
        averages = moving_average(list(velocity.values()), self.moving_average_window)
        stats.add_value('activity', 'edit_velocity', {
            period: {'count': count, 'moving_avg': avg}
            for (period, count), avg in zip(velocity.items(), averages)
        })
        
        logger.info(f"Activity: {len(changes)} changes over {len(velocity)} {self.velocity_period} periods")
        
        return stats
