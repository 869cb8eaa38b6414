"""lens_stats package: change-history statistics for genealogy trees (diffs, facts, aggregation)."""

from lens_stats.classifier import ClassifiedChange, FactDiff, classify_change, classify_record_type, diff_facts, score_change
from lens_stats.diff import DiffOp, edit_distance, myers_diff
from lens_stats.errors import CollectorError, InvalidRecordStreamError, LensStatsError
from lens_stats.facts import extract_fact_tags, strip_metadata_noise
from lens_stats.filters import ChangeFilter, TimeMode
from lens_stats.records import ChangeDataset, ChangeRecord, LogEntry, Message, UserInfo
from lens_stats.store import ChangeStore, InMemoryChangeStore, SqliteChangeStore
from lens_stats.statistics import Statistics, StatisticsConfig, StatisticsPipeline, Stats

__all__ = [
    "ChangeDataset",
    "ChangeFilter",
    "ChangeRecord",
    "ChangeStore",
    "ClassifiedChange",
    "CollectorError",
    "DiffOp",
    "FactDiff",
    "InMemoryChangeStore",
    "InvalidRecordStreamError",
    "LensStatsError",
    "LogEntry",
    "Message",
    "SqliteChangeStore",
    "Statistics",
    "StatisticsConfig",
    "StatisticsPipeline",
    "Stats",
    "TimeMode",
    "UserInfo",
    "classify_change",
    "classify_record_type",
    "diff_facts",
    "edit_distance",
    "extract_fact_tags",
    "myers_diff",
    "score_change",
    "strip_metadata_noise",
]
