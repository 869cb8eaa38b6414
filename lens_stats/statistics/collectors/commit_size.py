"""
Commit size statistics collector.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging

from lens_stats.records import ChangeDataset
from lens_stats.statistics.aggregate import commit_size_histogram, commit_sizes, summarize_sizes
from lens_stats.statistics.base import StatisticsCollector, register_collector
from lens_stats.statistics.model import Stats

logger = logging.getLogger(__name__)


@register_collector
@dataclass
class CommitSizeCollector(StatisticsCollector):
    """
    Collects the distribution of changes per commit.
    
    A commit is the set of accepted changes saved by one user at one
    timestamp.
    
    Statistics collected:
        - Histogram over bins 1, 2, 3, 4, 5, 6-10, 11-20, 21-50, 51+
        - Mean, median and mode commit size, totals
    """
    collector_id: str = "commit_size"
    
    def collect(self, dataset: ChangeDataset, existing_stats: Stats, collector_num: int = None, total_collectors: int = None) -> Stats:
        """Collect commit size statistics."""
        stats = Stats()
        self._report_step(info=f"{self._prefix(collector_num, total_collectors)}Grouping changes into commits")
        
        sizes = commit_sizes(dataset.accepted_changes)
        histogram = commit_size_histogram(sizes)
        summary = summarize_sizes(sizes)
        
        stats.add_value('commit_size', 'bins', histogram['bins'])
        stats.add_value('commit_size', 'counts', histogram['counts'])
        stats.add_value('commit_size', 'stats', summary)
        
        logger.info(f"Commit size: {summary['total_commits']} commits, {summary['total_changes']} changes")
        
        return stats
