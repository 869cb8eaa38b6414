"""
Data quality statistics collector.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
import logging
from typing import Dict, List

from lens_stats.facts import count_level1_lines
from lens_stats.labels import period_key
from lens_stats.records import ChangeDataset
from lens_stats.statistics.aggregate import mean
from lens_stats.statistics.base import StatisticsCollector, register_collector
from lens_stats.statistics.model import Stats

logger = logging.getLogger(__name__)


@register_collector
@dataclass
class FactCompletenessCollector(StatisticsCollector):
    """
    Shows whether records get richer over time.
    
    For every accepted modification (creations and deletions excluded) the
    number of level-1 lines is measured before and after the change, then
    averaged per period.
    """
    collector_id: str = "data_quality"
    trend_period: str = "month"
    
    def collect(self, dataset: ChangeDataset, existing_stats: Stats, collector_num: int = None, total_collectors: int = None) -> Stats:
        """Collect fact completeness progress."""
        stats = Stats()
        self._report_step(info=f"{self._prefix(collector_num, total_collectors)}Measuring fact completeness")
        
        before: Dict[str, List[int]] = defaultdict(list)
        after: Dict[str, List[int]] = defaultdict(list)
        for change in dataset.accepted_changes:
            if not change.is_modification:
                continue
            key = period_key(change.change_time, self.trend_period)
            before[key].append(count_level1_lines(change.old_gedcom))
            after[key].append(count_level1_lines(change.new_gedcom))
        
        progress = {}
        for key in sorted(before):
            before_avg = mean(before[key])
            after_avg = mean(after[key])
            progress[key] = {
                'before_avg': round(before_avg, 2),
                'after_avg': round(after_avg, 2),
                'net_gain': round(after_avg - before_avg, 2),
            }
        stats.add_value('data_quality', 'fact_completeness_progress', progress)
        
        logger.info(f"Data quality: {sum(len(v) for v in before.values())} modifications in {len(progress)} periods")
        
        return stats
