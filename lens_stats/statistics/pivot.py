"""
Generic 2D pivot (heatmap) over change records.

Cross-tabulates a measure over two dimensions. Each dimension has its own
canonical label order (chronological, numeric or a fixed enumeration), never
plain lexicographic order.
"""
from __future__ import annotations

from collections import defaultdict
from enum import Enum
import logging
from typing import Any, Callable, Dict, Hashable, Iterable, List, Tuple, Union

from lens_stats.classifier import classify_record_type
from lens_stats.labels import (
    MONTH_ABBREVIATIONS,
    NOT_AVAILABLE,
    RECORD_TYPE_ORDER,
    WEEKDAY_ABBREVIATIONS,
    hour_label,
    month_abbreviation,
    order_index,
    text_sort_key,
    weekday_abbreviation,
)
from lens_stats.records import ChangeDataset, ChangeRecord

logger = logging.getLogger(__name__)


class Dimension(str, Enum):
    HOUR = 'hour'
    DAY_OF_WEEK = 'day_of_week'
    DAY_OF_MONTH = 'day_of_month'
    MONTH = 'month'
    YEAR = 'year'
    USER = 'user'
    RECORD_TYPE = 'record_type'


class Measure(str, Enum):
    CHANGES = 'changes'
    UNIQUE_RECORDS = 'unique_records'
    UNIQUE_USERS = 'unique_users'
    UNIQUE_DAYS = 'unique_days'


def _dimension_label(change: ChangeRecord, dimension: Dimension, dataset: ChangeDataset) -> str:
    moment = change.change_time
    if dimension is Dimension.HOUR:
        return hour_label(moment.hour)
    if dimension is Dimension.DAY_OF_WEEK:
        return weekday_abbreviation(moment)
    if dimension is Dimension.DAY_OF_MONTH:
        return str(moment.day)
    if dimension is Dimension.MONTH:
        return month_abbreviation(moment.month)
    if dimension is Dimension.YEAR:
        return str(moment.year)
    if dimension is Dimension.USER:
        if change.user_id is None:
            return NOT_AVAILABLE
        return dataset.user_display_name(change.user_id)
    return classify_record_type(change.xref, change.new_gedcom or change.old_gedcom)


def _numeric_key(label: str) -> Tuple[int, Union[int, str]]:
    head = label.split(':', 1)[0]
    return (0, int(head)) if head.isdigit() else (1, label)


def _label_sort_key(dimension: Dimension) -> Callable[[str], Any]:
    if dimension in (Dimension.HOUR, Dimension.DAY_OF_MONTH, Dimension.YEAR):
        return _numeric_key
    if dimension is Dimension.DAY_OF_WEEK:
        return lambda label: order_index(WEEKDAY_ABBREVIATIONS, label)
    if dimension is Dimension.MONTH:
        return lambda label: order_index(MONTH_ABBREVIATIONS, label)
    if dimension is Dimension.RECORD_TYPE:
        return lambda label: (order_index(RECORD_TYPE_ORDER, label), label)
    return lambda label: (label == NOT_AVAILABLE, text_sort_key(label), label)


def sort_dimension_labels(dimension: Union[Dimension, str], labels: Iterable[str]) -> List[str]:
    """Sort axis labels in the canonical order of their dimension."""
    dimension = Dimension(dimension)
    return sorted(set(labels), key=_label_sort_key(dimension))


def _measure_item(change: ChangeRecord, measure: Measure) -> Hashable:
    if measure is Measure.UNIQUE_RECORDS:
        return change.record_key
    if measure is Measure.UNIQUE_USERS:
        # anonymous rows are not actors
        return change.user_id
    if measure is Measure.UNIQUE_DAYS:
        return change.change_time.date()
    return None


def pivot(
    dataset: ChangeDataset,
    x: Union[Dimension, str],
    y: Union[Dimension, str],
    measure: Union[Measure, str] = Measure.CHANGES,
    changes: Iterable[ChangeRecord] = None,
) -> Dict[str, List[Any]]:
    """
    Cross-tabulate a measure over two dimensions.

    Args:
        dataset: Working set; supplies actor names and, by default, the rows.
        x: Dimension of the X axis.
        y: Dimension of the Y axis.
        measure: 'changes', 'unique_records', 'unique_users' or 'unique_days'.
        changes: Rows to pivot; defaults to the accepted changes of the dataset.

    Returns:
        Dict with 'data' (sparse list of {'x', 'y', 'v'} cells, v > 0),
        'x_labels' and 'y_labels' (distinct observed labels in canonical order).

    Raises:
        ValueError: For an unknown dimension or measure name.
    """
    x = Dimension(x)
    y = Dimension(y)
    measure = Measure(measure)
    rows = dataset.accepted_changes if changes is None else list(changes)

    counts: Dict[Tuple[str, str], int] = defaultdict(int)
    distinct: Dict[Tuple[str, str], set] = defaultdict(set)
    for change in rows:
        cell = (_dimension_label(change, x, dataset), _dimension_label(change, y, dataset))
        if measure is Measure.CHANGES:
            counts[cell] += 1
        else:
            item = _measure_item(change, measure)
            if item is not None:
                distinct[cell].add(item)

    values = counts if measure is Measure.CHANGES else {cell: len(items) for cell, items in distinct.items()}

    x_labels = sort_dimension_labels(x, (cx for cx, _ in values))
    y_labels = sort_dimension_labels(y, (cy for _, cy in values))
    x_pos = {label: i for i, label in enumerate(x_labels)}
    y_pos = {label: i for i, label in enumerate(y_labels)}

    data = [
        {'x': cx, 'y': cy, 'v': int(v)}
        for (cx, cy), v in sorted(values.items(), key=lambda item: (x_pos[item[0][0]], y_pos[item[0][1]]))
        if v > 0
    ]

    logger.debug(f"Pivot {x.value} x {measure.value} x {y.value}: {len(data)} cells from {len(rows)} rows")
    return {'data': data, 'x_labels': x_labels, 'y_labels': y_labels}
