"""
Editor work pattern statistics collector.
"""
from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass
import logging
from typing import Dict, Set

from lens_stats.labels import WEEKDAY_NAMES, weekday_name
from lens_stats.records import ChangeDataset
from lens_stats.statistics.aggregate import ranked_counts
from lens_stats.statistics.base import StatisticsCollector, register_collector
from lens_stats.statistics.model import Stats

logger = logging.getLogger(__name__)


def _sorted_nested(data: Dict[str, Counter], key=None) -> Dict[str, Dict[str, int]]:
    """Sort a year -> (bucket -> count) mapping by year, then by bucket."""
    return {
        year: {bucket: data[year][bucket] for bucket in sorted(data[year], key=key)}
        for year in sorted(data)
    }


@register_collector
@dataclass
class EditorPatternsCollector(StatisticsCollector):
    """
    Collects statistics about when and how much editors work.

    Uses accepted, non-deleting changes.

    Statistics collected:
        - Changes per user (login name)
        - Changes per hour, weekday, day of month and month, for each year
        - Changes per year
        - Busiest days, with the number of distinct users
    """
    collector_id: str = "editor_patterns"
    biggest_work_days_limit: int = 10

    def collect(self, dataset: ChangeDataset, existing_stats: Stats, collector_num: int = None, total_collectors: int = None) -> Stats:
        """Collect editor work pattern statistics."""
        stats = Stats()

        changes = [c for c in dataset.accepted_changes if not c.is_deletion]
        prefix = self._prefix(collector_num, total_collectors)
        self._report_step(info=f"{prefix}Analyzing editor patterns", target=len(changes), reset_counter=True, plus_step=0)

        user_stats = Counter()
        hour_stats: Dict[str, Counter] = defaultdict(Counter)
        day_stats: Dict[str, Counter] = defaultdict(Counter)
        day_of_month_stats: Dict[str, Counter] = defaultdict(Counter)
        month_stats: Dict[str, Counter] = defaultdict(Counter)
        year_stats = Counter()
        day_counts = Counter()
        day_users: Dict[str, Set] = defaultdict(set)

        # Single pass through all changes
        for change in changes:
            moment = change.change_time
            year = f"{moment.year:04d}"
            date_only = moment.strftime('%Y-%m-%d')

            user_stats[dataset.user_login_name(change.user_id)] += 1
            hour_stats[year][f"{moment.hour:02d}"] += 1
            day_stats[year][weekday_name(moment)] += 1
            day_of_month_stats[year][f"{moment.day:02d}"] += 1
            month_stats[year][f"{moment.month:02d}"] += 1
            year_stats[year] += 1
            day_counts[date_only] += 1
            day_users[date_only].add(change.user_id)

        stats.add_value('editor_patterns', 'user_stats', ranked_counts(user_stats))
        stats.add_value('editor_patterns', 'hour_stats', _sorted_nested(hour_stats))
        stats.add_value('editor_patterns', 'day_stats', _sorted_nested(day_stats, key=WEEKDAY_NAMES.index))
        stats.add_value('editor_patterns', 'day_of_month_stats', _sorted_nested(day_of_month_stats))
        stats.add_value('editor_patterns', 'month_stats', _sorted_nested(month_stats))
        stats.add_value('editor_patterns', 'year_stats', dict(sorted(year_stats.items())))

        biggest_days = {}
        for date_only, count in ranked_counts(day_counts, self.biggest_work_days_limit).items():
            user_count = len(day_users[date_only])
            biggest_days[date_only] = {
                'date': date_only,
                'count': count,
                'users': '1 user' if user_count == 1 else f"{user_count} users",
            }
        stats.add_value('editor_patterns', 'biggest_work_days', biggest_days)

        logger.info(f"Editor patterns: {len(changes)} changes by {len(user_stats)} users over {len(day_counts)} days")

        return stats
