"""
Collector registry and the StatisticsCollector base class.

Every report over the change history (activity, sessions, audit log ...)
is a dataclass collector registered under its collector_id. The pipeline
builds one instance per registered id, passing options from the
statistics config that match collector fields.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
import logging
from typing import Any, Dict, Type

from lens_stats.records import ChangeDataset
from lens_stats.statistics.model import Stats

logger = logging.getLogger(__name__)

# collector_id -> collector class, filled at import of the collectors package
_COLLECTOR_REGISTRY: Dict[str, Type['StatisticsCollector']] = {}


def register_collector(cls: Type['StatisticsCollector']) -> Type['StatisticsCollector']:
    """
    Class decorator adding a report collector to the registry.

    Applied above @dataclass so the collector_id default is visible:

        @register_collector
        @dataclass
        class SessionsCollector(StatisticsCollector):
            collector_id: str = "sessions"

    Classes without a collector_id are skipped with a warning.
    """
    collector_id = getattr(cls, 'collector_id', '')
    if not collector_id:
        logger.warning(f"{cls.__name__} has no collector_id; not registered")
        return cls
    if collector_id in _COLLECTOR_REGISTRY and _COLLECTOR_REGISTRY[collector_id] is not cls:
        logger.warning(f"Collector id '{collector_id}' re-registered by {cls.__name__}")
    _COLLECTOR_REGISTRY[collector_id] = cls
    logger.debug(f"Registered collector {collector_id} ({cls.__name__})")
    return cls


def get_collector_registry() -> Dict[str, Type['StatisticsCollector']]:
    """Snapshot of the registered collectors, in registration order."""
    return _COLLECTOR_REGISTRY.copy()


@dataclass
class StatisticsCollector(ABC):
    """
    One report over a ChangeDataset.

    A collector reads the request's working set (changes, users, log
    entries, messages) and returns its values in a fresh Stats object,
    normally under a category named after its collector_id. The dataset
    is shared by all collectors of a run and is treated as read-only.

    Attributes:
        collector_id: Registry key, also the config key that enables it
        enabled: False skips the collector in the pipeline
        app_hooks: Host callbacks for progress and cancellation
    """
    collector_id: str = ""
    enabled: bool = True
    app_hooks: Any = None

    @abstractmethod
    def collect(self, dataset: ChangeDataset, existing_stats: Stats, collector_num: int = None, total_collectors: int = None) -> Stats:
        """
        Compute this report.

        Args:
            dataset: Filtered working set of the request
            existing_stats: Values merged from collectors that already ran
            collector_num: 1-based position in the run, for progress text
            total_collectors: Number of enabled collectors in the run

        Returns:
            Stats holding only this collector's values
        """

    def __post_init__(self):
        if not self.collector_id:
            raise ValueError(f"{self.__class__.__name__} needs a collector_id")

    def _prefix(self, collector_num: int = None, total_collectors: int = None) -> str:
        """Progress text prefix, e.g. 'Statistics (2/9): '."""
        if collector_num and total_collectors:
            return f"Statistics ({collector_num}/{total_collectors}): "
        return "Statistics: "

    def _report_step(self, info: str = "", target: int = None, reset_counter: bool = False, plus_step: int = 0) -> None:
        """Forward progress to app_hooks.report_step, or log it at debug level."""
        report = getattr(self.app_hooks, "report_step", None) if self.app_hooks else None
        if callable(report):
            report(info=info, target=target, reset_counter=reset_counter, plus_step=plus_step)
        else:
            logger.debug(info)

    def _stop_requested(self, logger_stop_message: str = "Stop requested by user") -> bool:
        """True when the host asked to cancel; the message is logged once."""
        stop = getattr(self.app_hooks, "stop_requested", None) if self.app_hooks else None
        if not callable(stop) or not stop():
            return False
        if logger_stop_message:
            logger.debug(logger_stop_message)
        return True
