"""
Statistics module for change-history analysis.

Collectors summarize a request-scoped ChangeDataset (change rows, audit log,
messages) into named categories of values ready for charting. Collectors
never modify the dataset; the pipeline runs them one after the other.

Main components:
    - StatisticsCollector: Base class for creating custom statistics collectors
    - StatisticsPipeline: Orchestrates running multiple collectors
    - Statistics: Convenience wrapper (store or dataset in, results out)
    - Built-in collectors: One per report
"""

from lens_stats.statistics.base import StatisticsCollector, register_collector, get_collector_registry
from lens_stats.statistics.pipeline import StatisticsPipeline, StatisticsConfig
from lens_stats.statistics.model import Stats, StatValue
from lens_stats.statistics.pivot import Dimension, Measure, pivot
from lens_stats.statistics.statistics import Statistics

# Import collectors to ensure they're registered
from lens_stats.statistics import collectors

__all__ = [
    'StatisticsCollector',
    'register_collector',
    'get_collector_registry',
    'StatisticsPipeline',
    'StatisticsConfig',
    'Statistics',
    'Stats',
    'StatValue',
    'Dimension',
    'Measure',
    'pivot',
    'collectors',
]
