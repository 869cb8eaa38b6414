"""
Tree-level overview statistics collector.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
import logging

from lens_stats.labels import text_sort_key
from lens_stats.records import CHANGE_STATUSES, ChangeDataset
from lens_stats.statistics.aggregate import ranked_counts
from lens_stats.statistics.base import StatisticsCollector, register_collector
from lens_stats.statistics.model import Stats

logger = logging.getLogger(__name__)


@register_collector
@dataclass
class TreeActivityCollector(StatisticsCollector):
    """
    Collects overview statistics across trees.
    
    Statistics collected:
        - Accepted changes per tree (deletions excluded)
        - Changes per status (accepted, rejected, pending)
        - Users who made accepted changes
    """
    collector_id: str = "trees"
    
    def collect(self, dataset: ChangeDataset, existing_stats: Stats, collector_num: int = None, total_collectors: int = None) -> Stats:
        """Collect tree overview statistics."""
        stats = Stats()
        self._report_step(info=f"{self._prefix(collector_num, total_collectors)}Counting changes per tree")
        
        accepted = dataset.accepted_changes
        
        by_tree = Counter(dataset.tree_name(c.gedcom_id) for c in accepted if not c.is_deletion)
        stats.add_value('trees', 'changes_by_tree', ranked_counts(by_tree))
        
        status_counts = {status: 0 for status in CHANGE_STATUSES}
        for change in dataset.changes:
            if change.status in status_counts:
                status_counts[change.status] += 1
        stats.add_value('trees', 'status_counts', status_counts)
        
        user_ids = {c.user_id for c in accepted if c.user_id is not None}
        users = sorted(
            ((uid, dataset.user_display_name(uid)) for uid in user_ids),
            key=lambda item: (text_sort_key(item[1]), item[0]),
        )
        stats.add_value('trees', 'users_with_changes', dict(users))
        
        logger.info(f"Trees: {sum(by_tree.values())} accepted changes across {len(by_tree)} trees")
        
        return stats
