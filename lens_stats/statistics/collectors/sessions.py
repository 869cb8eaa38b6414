"""
Editing session statistics collector.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging

from lens_stats.records import ChangeDataset
from lens_stats.statistics.aggregate import mean, segment_sessions, session_duration_histogram
from lens_stats.statistics.base import StatisticsCollector, register_collector
from lens_stats.statistics.model import Stats

logger = logging.getLogger(__name__)


@register_collector
@dataclass
class SessionCollector(StatisticsCollector):
    """
    Collects editing session statistics.
    
    Accepted changes of each user are split into sessions wherever two
    consecutive changes are more than `session_gap_minutes` apart.
    
    Statistics collected:
        - Session duration distribution
        - Number of sessions, average duration and changes per session
    """
    collector_id: str = "sessions"
    session_gap_minutes: float = 30
    
    def collect(self, dataset: ChangeDataset, existing_stats: Stats, collector_num: int = None, total_collectors: int = None) -> Stats:
        """Collect session statistics."""
        stats = Stats()
        self._report_step(info=f"{self._prefix(collector_num, total_collectors)}Detecting editing sessions")
        
        sessions = segment_sessions(
            ((c.user_id, c.change_time) for c in dataset.accepted_changes),
            gap_minutes=self.session_gap_minutes,
        )
        
        stats.add_value('sessions', 'duration_distribution', session_duration_histogram(sessions))
        stats.add_value('sessions', 'total_sessions', len(sessions))
        stats.add_value('sessions', 'average_duration_minutes', round(mean([s.duration_minutes for s in sessions]), 1))
        stats.add_value('sessions', 'average_changes_per_session', round(mean([s.event_count for s in sessions]), 1))
        
        logger.info(f"Sessions: {len(sessions)} sessions (gap {self.session_gap_minutes} min)")
        
        return stats
