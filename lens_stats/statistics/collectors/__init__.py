"""
Built-in statistics collectors.

Import collectors here to automatically register them.
"""

from lens_stats.statistics.collectors.trees import TreeActivityCollector
from lens_stats.statistics.collectors.activity import ActivityCollector
from lens_stats.statistics.collectors.data_content import DataContentCollector
from lens_stats.statistics.collectors.data_quality import FactCompletenessCollector
from lens_stats.statistics.collectors.editor_patterns import EditorPatternsCollector
from lens_stats.statistics.collectors.commit_size import CommitSizeCollector
from lens_stats.statistics.collectors.sessions import SessionCollector
from lens_stats.statistics.collectors.collaboration import CollaborationCollector
from lens_stats.statistics.collectors.heatmaps import HeatmapCollector
from lens_stats.statistics.collectors.audit import AuditLogCollector
from lens_stats.statistics.collectors.messages import MessagesCollector

__all__ = [
    'TreeActivityCollector',
    'ActivityCollector',
    'DataContentCollector',
    'FactCompletenessCollector',
    'EditorPatternsCollector',
    'CommitSizeCollector',
    'SessionCollector',
    'CollaborationCollector',
    'HeatmapCollector',
    'AuditLogCollector',
    'MessagesCollector',
]
