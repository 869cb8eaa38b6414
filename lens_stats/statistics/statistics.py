from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, Optional
import logging

from lens_stats.app_hooks import AppHooks
from lens_stats.filters import ChangeFilter
from lens_stats.records import ChangeDataset
from lens_stats.store import ChangeStore
from .pipeline import StatisticsConfig, StatisticsPipeline
from .model import Stats
from .pivot import pivot

logger = logging.getLogger(__name__)


class Statistics:
    """
    High-level interface for collecting change-history statistics.
    
    This is a convenience wrapper around StatisticsPipeline that provides
    a simpler API for common use cases.
    
    Example:
        # From a store
        stats = Statistics(store=SqliteChangeStore('webtrees.sqlite'),
                           change_filter=ChangeFilter(days=30))
        results = stats.results  # Get Stats object
        
        # From a prepared dataset
        stats = Statistics(dataset=dataset)
        results = stats.results
    """
    
    def __init__(
        self,
        store: Optional[ChangeStore] = None,
        dataset: Optional[ChangeDataset] = None,
        change_filter: Optional[ChangeFilter] = None,
        config_dict: Optional[Dict[str, Any]] = None,
        config_file: Optional[Path] = None,
        app_hooks: Optional[AppHooks] = None,
        strict: bool = False,
    ) -> None:
        """
        Initialize statistics collection.
        
        Args:
            store: Optional ChangeStore to fetch the working set from
            dataset: Optional prepared ChangeDataset (takes precedence over store)
            change_filter: Filter for the working set (default: everything)
            config_dict: Dictionary to configure collectors (e.g., {'collectors': {'audit': False}})
            config_file: Path to YAML config file
            app_hooks: Optional application hooks for progress reporting
            strict: Raise CollectorError when a collector fails
        """
        self.app_hooks = app_hooks
        self.store = store
        self.change_filter = change_filter or ChangeFilter()
        
        if dataset is None and store is not None:
            dataset = ChangeDataset.from_store(store, self.change_filter)
        
        if dataset is None:
            logger.warning("No change data provided to Statistics")
        
        self.dataset = dataset
        
        # Create configuration
        if config_dict:
            self.config = StatisticsConfig.from_dict(config_dict)
        elif config_file:
            self.config = StatisticsConfig(config_file=config_file)
        else:
            # Use defaults - all collectors enabled
            self.config = StatisticsConfig()
        
        # Create pipeline
        self.pipeline = StatisticsPipeline(config=self.config, app_hooks=app_hooks, strict=strict)
        
        # Run analysis automatically
        self._results = None
        if dataset is not None:
            self._results = self._analyze()
    
    def _analyze(self) -> Stats:
        """
        Run statistics collection on the dataset.
        
        Returns:
            Stats object with collected statistics
        """
        logger.info(f"Collecting statistics on {len(self.dataset.changes)} changes")
        return self.pipeline.run(self.dataset)
    
    @property
    def results(self) -> Optional[Stats]:
        """Get the statistics results."""
        return self._results
    
    def analyze(self, change_filter: Optional[ChangeFilter] = None) -> Stats:
        """
        Analyze again, optionally with a new filter.
        
        A new filter requires a store to refetch the working set from.
        
        Args:
            change_filter: Optional new filter for the working set
        
        Returns:
            Stats object with collected statistics
        
        Raises:
            ValueError: If a filter is given but no store is available
        """
        if change_filter is not None:
            if self.store is None:
                raise ValueError("A new change filter needs a store to fetch data from")
            self.change_filter = change_filter
            self.dataset = ChangeDataset.from_store(self.store, change_filter)
        
        if self.dataset is None:
            self.dataset = ChangeDataset()
        
        self._results = self._analyze()
        return self._results
    
    def get_value(self, category: str, name: str, default=None):
        """
        Convenience method to get a specific statistic value.
        
        Args:
            category: Category name (e.g., 'sessions', 'commit_size')
            name: Statistic name (e.g., 'total_sessions')
            default: Default value if not found
            
        Returns:
            The statistic value or default
        """
        if self._results:
            return self._results.get_value(category, name, default)
        return default
    
    def get_category(self, category: str) -> Dict[str, Any]:
        """
        Get all statistics in a category.
        
        Args:
            category: Category name (e.g., 'editor_patterns')
            
        Returns:
            Dictionary of statistic names to values
        """
        if self._results:
            return self._results.get_category(category)
        return {}
    
    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """
        Export all statistics as a dictionary.
        
        Returns:
            Dictionary of categories to statistics
        """
        if self._results:
            return self._results.to_dict()
        return {}
    
    def heatmap(self, x: str, y: str, measure: str = 'changes', xrefs: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        """
        Ad hoc 2D pivot over the accepted changes of the dataset.
        
        Args:
            x: Dimension of the X axis (e.g. 'hour')
            y: Dimension of the Y axis (e.g. 'day_of_week')
            measure: Measure per cell (default 'changes')
            xrefs: Restrict the pivot to these records
        
        Returns:
            Dict with 'data', 'x_labels' and 'y_labels'
        
        Raises:
            ValueError: For an unknown dimension or measure
        """
        dataset = self.dataset or ChangeDataset()
        changes = dataset.accepted_changes
        if xrefs:
            wanted = set(xrefs)
            changes = [c for c in changes if c.xref in wanted]
        return pivot(dataset, x, y, measure, changes=changes)
