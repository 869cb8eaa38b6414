"""
filters.py - Query filter builder.

A ChangeFilter selects the working set of a statistics request. It supports
two mutually exclusive time modes, "last N days" and "explicit year set",
plus independent actor, tree and record restrictions. The same filter can be
applied in Python (predicates over rows) or rendered as a parameterised SQL
WHERE clause for a relational store.

When a positive day count and a year set are both given, the day window
wins and the years are ignored.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from .records import ChangeRecord, naive_local

logger = logging.getLogger(__name__)

SQL_TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'


class TimeMode(str, Enum):
    ALL = 'all'
    LAST_DAYS = 'last_days'
    YEARS = 'years'


@dataclass
class ChangeFilter:
    """
    Filter for change history, audit log and message rows.

    Attributes:
        days: Look back this many days from `now` (None or <= 0 disables).
        years: Calendar years to include (empty disables).
        user_ids: Actor allow-list (empty means every actor).
        tree_ids: Tree scope for change rows (empty means every tree).
        xrefs: Record allow-list for change rows (empty means every record).
        now: Reference time for the day window; fixed to the current time when
            the filter is created.
    """
    days: Optional[int] = None
    years: Sequence[int] = field(default_factory=tuple)
    user_ids: Sequence[int] = field(default_factory=tuple)
    tree_ids: Sequence[int] = field(default_factory=tuple)
    xrefs: Sequence[str] = field(default_factory=tuple)
    now: Optional[datetime] = None

    def __post_init__(self) -> None:
        self.years = tuple(sorted({int(y) for y in self.years or ()}))
        self.user_ids = tuple(int(u) for u in self.user_ids or ())
        self.tree_ids = tuple(int(t) for t in self.tree_ids or ())
        self.xrefs = tuple(self.xrefs or ())
        if self.days is not None and self.days > 0 and self.years:
            logger.debug(f"Both last {self.days} days and years {self.years} given; using the day window")
        if self.now is None and self.time_mode is TimeMode.LAST_DAYS:
            self.now = datetime.now()
        elif self.now is not None:
            self.now = naive_local(self.now)

    @property
    def time_mode(self) -> TimeMode:
        if self.days is not None and self.days > 0:
            return TimeMode.LAST_DAYS
        if self.years:
            return TimeMode.YEARS
        return TimeMode.ALL

    @property
    def cutoff(self) -> Optional[datetime]:
        """Exclusive lower bound of the day window, or None outside day mode."""
        if self.time_mode is not TimeMode.LAST_DAYS:
            return None
        return (self.now - timedelta(days=self.days)).replace(microsecond=0)

    def matches_time(self, moment: datetime) -> bool:
        mode = self.time_mode
        if mode is TimeMode.LAST_DAYS:
            return naive_local(moment) > self.cutoff
        if mode is TimeMode.YEARS:
            return moment.year in self.years
        return True

    def matches_user(self, user_id: Optional[int], include_anonymous: bool = False) -> bool:
        """
        Check the actor allow-list.

        Args:
            user_id: Actor of the row (None for anonymous rows).
            include_anonymous: Let anonymous rows through an active allow-list.
        """
        if not self.user_ids:
            return True
        if user_id is None:
            return include_anonymous
        return user_id in self.user_ids

    def matches_tree(self, gedcom_id: int) -> bool:
        return not self.tree_ids or gedcom_id in self.tree_ids

    def matches_change(self, change: ChangeRecord) -> bool:
        return (
            self.matches_time(change.change_time)
            and self.matches_user(change.user_id)
            and self.matches_tree(change.gedcom_id)
            and (not self.xrefs or change.xref in self.xrefs)
        )

    def apply(self, changes: Iterable[ChangeRecord]) -> List[ChangeRecord]:
        return [c for c in changes if self.matches_change(c)]

    def time_clause(self, column: str) -> Tuple[str, List[str]]:
        """
        Render the time filter as SQL.

        Args:
            column: Timestamp column to filter on.

        Returns:
            Tuple[str, List[str]]: Clause ('' when no time filter) and parameters.
        """
        mode = self.time_mode
        if mode is TimeMode.LAST_DAYS:
            return f"{column} > ?", [self.cutoff.strftime(SQL_TIMESTAMP_FORMAT)]
        if mode is TimeMode.YEARS:
            parts = []
            params: List[str] = []
            for year in self.years:
                parts.append(f"{column} BETWEEN ? AND ?")
                params.extend([f"{year:04d}-01-01 00:00:00", f"{year:04d}-12-31 23:59:59"])
            return '(' + ' OR '.join(parts) + ')', params
        return '', []

    def where_clause(
        self,
        time_column: str,
        user_column: Optional[str] = None,
        tree_column: Optional[str] = None,
        xref_column: Optional[str] = None,
    ) -> Tuple[str, list]:
        """
        Render the filter as a SQL WHERE clause body.

        Only the columns that are named take part; omitted columns leave the
        corresponding restriction to the caller.

        Returns:
            Tuple[str, list]: Conditions joined with AND ('1=1' when empty) and parameters.
        """
        conditions = []
        params: list = []

        clause, time_params = self.time_clause(time_column)
        if clause:
            conditions.append(clause)
            params.extend(time_params)

        for column, values in ((user_column, self.user_ids), (tree_column, self.tree_ids), (xref_column, self.xrefs)):
            if column and values:
                conditions.append(f"{column} IN ({', '.join('?' for _ in values)})")
                params.extend(values)

        return (' AND '.join(conditions) or '1=1'), params
