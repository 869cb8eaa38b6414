"""
User collaboration network statistics collector.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging

from lens_stats.records import ChangeDataset
from lens_stats.statistics.aggregate import collaboration_graph
from lens_stats.statistics.base import StatisticsCollector, register_collector
from lens_stats.statistics.model import Stats

logger = logging.getLogger(__name__)


@register_collector
@dataclass
class CollaborationCollector(StatisticsCollector):
    """
    Builds the network of users who edited the same records.
    
    Nodes are login names; an edge joins two users who both changed at
    least `min_shared_records` records.
    """
    collector_id: str = "collaboration"
    min_shared_records: int = 3
    
    def collect(self, dataset: ChangeDataset, existing_stats: Stats, collector_num: int = None, total_collectors: int = None) -> Stats:
        """Collect the collaboration network."""
        stats = Stats()
        self._report_step(info=f"{self._prefix(collector_num, total_collectors)}Building collaboration network")
        
        graph = collaboration_graph(
            ((dataset.user_login_name(c.user_id), c.record_key) for c in dataset.accepted_changes),
            min_shared_records=self.min_shared_records,
        )
        
        stats.add_value('collaboration', 'nodes', graph['nodes'])
        stats.add_value('collaboration', 'edges', graph['edges'])
        
        logger.info(f"Collaboration: {len(graph['nodes'])} users, {len(graph['edges'])} links")
        
        return stats
