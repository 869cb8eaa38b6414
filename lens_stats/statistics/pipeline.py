"""
Pipeline for running statistics collectors.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional
import yaml

from lens_stats.errors import CollectorError
from lens_stats.records import ChangeDataset
from lens_stats.statistics.base import StatisticsCollector, get_collector_registry
from lens_stats.statistics.model import Stats

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path(__file__).parent / "config.yaml"


def _read_statistics_section(path: Path) -> Dict[str, Any]:
    """Read the 'statistics' section of a YAML file."""
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}
    return data.get('statistics', {}) or {}


@dataclass
class StatisticsConfig:
    """
    Configuration for statistics collection.

    Packaged defaults (config.yaml next to this module) are loaded first,
    then the optional user config file, then values passed explicitly.

    Attributes:
        collectors: Dict of collector_id -> enabled status
        statistics_options: Dict of option name -> value passed to collectors
        config_file: Path to YAML config file (optional)
    """
    collectors: Dict[str, bool] = field(default_factory=dict)
    statistics_options: Dict[str, Any] = field(default_factory=dict)
    config_file: Optional[Path] = None

    def __post_init__(self) -> None:
        """Merge packaged defaults, the config file and explicit values."""
        explicit_collectors = dict(self.collectors)
        explicit_options = dict(self.statistics_options)
        self.collectors = {}
        self.statistics_options = {}

        self._load_from_file(DEFAULT_CONFIG_FILE)
        if self.config_file:
            if Path(self.config_file).exists():
                self._load_from_file(Path(self.config_file))
            else:
                logger.warning(f"Statistics config file {self.config_file} not found, using defaults")

        self.collectors.update(explicit_collectors)
        self.statistics_options.update(explicit_options)

    def _load_from_file(self, path: Path) -> None:
        """
        Load configuration from YAML file.

        Reads the 'statistics' section and extracts collector enable/disable
        settings and collector options.
        """
        try:
            statistics_config = _read_statistics_section(path)
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load statistics config from {path}: {e}")
            return

        collectors_config = statistics_config.get('collectors', {}) or {}
        for collector_id, settings in collectors_config.items():
            if isinstance(settings, dict):
                self.collectors[collector_id] = settings.get('enabled', True)
            elif isinstance(settings, bool):
                self.collectors[collector_id] = settings

        self.statistics_options.update(statistics_config.get('options', {}) or {})
        logger.debug(f"Loaded statistics config from {path}")

    def is_enabled(self, collector_id: str) -> bool:
        """
        Check if a collector is enabled.

        Args:
            collector_id: Identifier of the collector to check

        Returns:
            True if enabled (default if not specified), False otherwise
        """
        return self.collectors.get(collector_id, True)

    def get_option(self, name: str, default: Any = None) -> Any:
        return self.statistics_options.get(name, default)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> StatisticsConfig:
        """
        Create configuration from dictionary.

        Useful for testing and programmatic configuration.

        Args:
            data: Dictionary with optional 'collectors' (collector_id -> enabled)
                and 'options' (option name -> value) keys

        Returns:
            StatisticsConfig instance
        """
        return cls(collectors=data.get('collectors', {}), statistics_options=data.get('options', {}))


@dataclass
class StatisticsPipeline:
    """
    Pipeline for running statistics collectors on a change dataset.

    Attributes:
        collectors: List of collector instances to run
        config: Configuration for the pipeline
        app_hooks: Optional application hooks for progress reporting
        strict: Raise CollectorError instead of recording a failure
    """
    collectors: List[StatisticsCollector] = field(default_factory=list)
    config: StatisticsConfig = field(default_factory=StatisticsConfig)
    app_hooks: Optional[Any] = field(default=None)
    strict: bool = False

    def __post_init__(self) -> None:
        """
        Initialize collectors from registry if none provided.

        If no collectors are explicitly provided, automatically loads
        all registered collectors from the global registry.
        """
        if not self.collectors:
            self._load_collectors_from_registry()

    def _collector_kwargs(self, collector_cls: type) -> Dict[str, Any]:
        """Options from the config that match dataclass fields of a collector."""
        names = {f.name for f in fields(collector_cls)} - {'collector_id', 'enabled', 'app_hooks'}
        return {name: value for name, value in self.config.statistics_options.items() if name in names}

    def _load_collectors_from_registry(self) -> None:
        """
        Load all registered collectors with configuration applied.

        Instantiates each collector from the registry, applying the
        enabled/disabled setting and any matching options.
        """
        registry = get_collector_registry()
        for collector_id, collector_cls in registry.items():
            enabled = self.config.is_enabled(collector_id)
            try:
                collector = collector_cls(enabled=enabled, app_hooks=self.app_hooks, **self._collector_kwargs(collector_cls))
                self.collectors.append(collector)
                logger.debug(f"Loaded collector: {collector_id} (enabled={enabled})")
            except (TypeError, ValueError) as e:
                logger.error(f"Failed to load collector {collector_id}: {e}")

    def run(self, dataset: ChangeDataset) -> Stats:
        """
        Run all enabled collectors on the dataset.

        Args:
            dataset: Working set of change, log and message rows

        Returns:
            Stats object with all collected values; failed collectors are
            listed in Stats.failures

        Raises:
            CollectorError: If a collector fails and the pipeline is strict
        """
        stats = Stats()

        logger.debug(f"Running statistics on {len(dataset.changes)} changes")

        # Set up progress tracking
        enabled_collectors = [c for c in self.collectors if c.enabled]
        total_collectors = len(enabled_collectors)
        self._report_step(info="Collecting statistics", target=total_collectors, reset_counter=True, plus_step=0)

        for collector_num, collector in enumerate(enabled_collectors, start=1):
            # Check for stop request
            if self._stop_requested("Statistics collection stopped by user"):
                logger.info(f"Statistics stopped after {collector_num - 1} collectors")
                return stats

            try:
                logger.debug(f"Running collector: {collector.collector_id}")
                collector_stats = collector.collect(dataset, stats, collector_num, total_collectors)
                stats.merge(collector_stats)

                # Report progress after each collector
                self._report_step(plus_step=1)
            except Exception as e:
                logger.error(f"Error in collector {collector.collector_id}: {e}", exc_info=True)
                if self.strict:
                    raise CollectorError(collector.collector_id) from e
                stats.add_failure(collector.collector_id)

        return stats

    def _report_step(self, info: str = "", target: Optional[int] = None, reset_counter: bool = False, plus_step: int = 0) -> None:
        """
        Report a step via app hooks if available. (Private method)

        Args:
            info (str): Information message.
            target (int): Target count for progress.
            reset_counter (bool): Whether to reset the counter.
            plus_step (int): Incremental step count.
        """
        if self.app_hooks and callable(getattr(self.app_hooks, "report_step", None)):
            self.app_hooks.report_step(info=info, target=target, reset_counter=reset_counter, plus_step=plus_step)
        else:
            logger.debug(info)

    def _stop_requested(self, logger_stop_message: str = "Stop requested by user") -> bool:
        """
        Check if stop has been requested via app hooks. (Private method)

        Returns:
            bool: True if stop requested, False otherwise.
        """
        if self.app_hooks and callable(getattr(self.app_hooks, "stop_requested", None)):
            if self.app_hooks.stop_requested():
                if logger_stop_message:
                    logger.info(logger_stop_message)
                return True
        return False
