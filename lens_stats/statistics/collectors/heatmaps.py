"""
Heatmap (2D pivot) statistics collector.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Dict, List

from lens_stats.records import ChangeDataset
from lens_stats.statistics.base import StatisticsCollector, register_collector
from lens_stats.statistics.model import Stats
from lens_stats.statistics.pivot import Dimension, Measure, pivot

logger = logging.getLogger(__name__)


def heatmap_name(x: str, y: str, measure: str) -> str:
    """Stats key of a configured heatmap, e.g. 'hour_by_day_of_week_changes'."""
    return f"{Dimension(x).value}_by_{Dimension(y).value}_{Measure(measure).value}"


@register_collector
@dataclass
class HeatmapCollector(StatisticsCollector):
    """
    Computes the configured heatmaps over accepted changes.
    
    Each entry of `heatmaps` is a mapping with 'x', 'y' and optional
    'measure' (default 'changes').
    """
    collector_id: str = "heatmaps"
    heatmaps: List[Dict[str, Any]] = field(default_factory=lambda: [
        {'x': 'hour', 'y': 'day_of_week', 'measure': 'changes'},
    ])
    
    def collect(self, dataset: ChangeDataset, existing_stats: Stats, collector_num: int = None, total_collectors: int = None) -> Stats:
        """Collect the configured heatmaps."""
        stats = Stats()
        prefix = self._prefix(collector_num, total_collectors)
        
        for spec in self.heatmaps:
            x, y, measure = spec['x'], spec['y'], spec.get('measure', 'changes')
            self._report_step(info=f"{prefix}Building heatmap {x} x {y}")
            stats.add_value('heatmaps', heatmap_name(x, y, measure), pivot(dataset, x, y, measure))
        
        logger.info(f"Heatmaps: {len(self.heatmaps)} pivots")
        
        return stats
