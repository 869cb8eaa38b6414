"""
Pure summarization helpers shared by the statistics collectors.

Every function here tolerates empty input and returns an empty or zeroed
result instead of raising.
"""
from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass
from datetime import datetime
from itertools import combinations
import logging
from typing import Any, Dict, Hashable, Iterable, List, Mapping, Optional, Sequence, Tuple

from lens_stats.labels import period_key
from lens_stats.records import ChangeRecord

logger = logging.getLogger(__name__)

COMMIT_SIZE_BINS = ['1', '2', '3', '4', '5', '6-10', '11-20', '21-50', '51+']

# (label, inclusive upper bound in minutes); the last bin is open-ended
SESSION_DURATION_BINS: List[Tuple[str, Optional[float]]] = [
    ('0-15min', 15),
    ('15-30min', 30),
    ('30-60min', 60),
    ('1-2hr', 120),
    ('2hr+', None),
]

DEFAULT_SESSION_GAP_MINUTES = 30
DEFAULT_MIN_SHARED_RECORDS = 3


def ranked_counts(counts: Mapping[Any, int], limit: Optional[int] = None) -> Dict[Any, int]:
    """
    Order counts by descending value, ties broken by ascending key text.

    Args:
        counts: Mapping of key -> count.
        limit: Keep only the first `limit` entries.

    Returns:
        Dict[Any, int]: Ordered copy of the counts.
    """
    ordered = sorted(counts.items(), key=lambda item: (-item[1], str(item[0])))
    if limit is not None:
        ordered = ordered[:limit]
    return dict(ordered)


def period_counts(moments: Iterable[datetime], period: str) -> Dict[str, int]:
    """Count timestamps per calendar bucket, in chronological key order."""
    counts = Counter(period_key(moment, period) for moment in moments)
    return dict(sorted(counts.items()))


def commit_sizes(changes: Iterable[ChangeRecord]) -> List[int]:
    """
    Sizes of the commits in a change stream.

    A commit is the set of rows sharing the same actor and timestamp.
    """
    commits = Counter((change.user_id, change.change_time) for change in changes)
    return list(commits.values())


def commit_size_bin(size: int) -> str:
    """Histogram bin label for a commit size (1-5 individually, then ranges)."""
    if size <= 5:
        return str(size)
    if size <= 10:
        return '6-10'
    if size <= 20:
        return '11-20'
    if size <= 50:
        return '21-50'
    return '51+'


def commit_size_histogram(sizes: Iterable[int]) -> Dict[str, List[Any]]:
    """Histogram over the fixed commit-size bins, zero-filled."""
    histogram = Counter(commit_size_bin(size) for size in sizes if size > 0)
    return {
        'bins': list(COMMIT_SIZE_BINS),
        'counts': [histogram.get(b, 0) for b in COMMIT_SIZE_BINS],
    }


def mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def median(values: Sequence[float]) -> float:
    """Median, averaging the two middle values for an even count; 0 when empty."""
    if not values:
        return 0.0
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2 == 0:
        return (ordered[mid - 1] + ordered[mid]) / 2
    return float(ordered[mid])


def mode(values: Sequence[int]) -> int:
    """Most frequent value, ties broken by the smallest value; 0 when empty."""
    if not values:
        return 0
    counts = Counter(values)
    return min(counts.items(), key=lambda item: (-item[1], item[0]))[0]


def summarize_sizes(sizes: Sequence[int]) -> Dict[str, Any]:
    """Mean (1 decimal), median, mode and totals of per-commit sizes."""
    return {
        'mean': round(mean(sizes), 1),
        'median': median(sizes),
        'mode': mode(sizes),
        'total_commits': len(sizes),
        'total_changes': sum(sizes),
    }


def moving_average(values: Sequence[float], window: int) -> List[float]:
    """
    Trailing moving average.

    For index i the average covers indices max(0, i - window + 1) .. i, so
    the first points use a shorter window instead of being left undefined.
    """
    if window < 1:
        raise ValueError(f"Moving average window must be positive, got {window}")
    result = []
    for i in range(len(values)):
        start = max(0, i - window + 1)
        chunk = values[start:i + 1]
        result.append(sum(chunk) / len(chunk))
    return result


@dataclass(frozen=True)
class Session:
    """
    A run of one actor's events with no gap above the threshold.

    Attributes:
        user_id: Actor of the session.
        start_time: First event.
        end_time: Last event.
        event_count: Number of events in the run.
    """
    user_id: Optional[int]
    start_time: datetime
    end_time: datetime
    event_count: int

    @property
    def duration_minutes(self) -> float:
        return (self.end_time - self.start_time).total_seconds() / 60


def _actor_sort_key(user_id: Optional[int]) -> Tuple[int, int]:
    return (1, 0) if user_id is None else (0, user_id)


def segment_sessions(
    events: Iterable[Tuple[Optional[int], datetime]],
    gap_minutes: float = DEFAULT_SESSION_GAP_MINUTES,
) -> List[Session]:
    """
    Split (actor, timestamp) events into sessions.

    Events are sorted by actor then time. A new session starts at the first
    event of an actor and whenever the gap since the previous event of the
    same actor exceeds `gap_minutes`.

    Args:
        events: Iterable of (user_id, timestamp) pairs.
        gap_minutes: Largest gap, in minutes, still inside one session.

    Returns:
        List[Session]: Sessions ordered by actor then start time.
    """
    ordered = sorted(events, key=lambda e: (_actor_sort_key(e[0]), e[1]))
    gap_seconds = gap_minutes * 60

    sessions: List[Session] = []
    current: Optional[Dict[str, Any]] = None
    for user_id, moment in ordered:
        if (
            current is None
            or user_id != current['user_id']
            or (moment - current['end_time']).total_seconds() > gap_seconds
        ):
            if current is not None:
                sessions.append(Session(**current))
            current = {'user_id': user_id, 'start_time': moment, 'end_time': moment, 'event_count': 1}
        else:
            current['end_time'] = moment
            current['event_count'] += 1

    if current is not None:
        sessions.append(Session(**current))
    return sessions


def session_duration_histogram(sessions: Iterable[Session]) -> Dict[str, int]:
    """Count sessions per duration bin (upper bounds inclusive)."""
    bins = {label: 0 for label, _ in SESSION_DURATION_BINS}
    for session in sessions:
        duration = session.duration_minutes
        for label, upper in SESSION_DURATION_BINS:
            if upper is None or duration <= upper:
                bins[label] += 1
                break
    return bins


def collaboration_graph(
    touches: Iterable[Tuple[str, Hashable]],
    min_shared_records: int = DEFAULT_MIN_SHARED_RECORDS,
) -> Dict[str, List[Any]]:
    """
    Build the actor collaboration graph.

    Args:
        touches: (actor, record key) pairs; duplicates are ignored.
        min_shared_records: Smallest number of shared records that creates an edge.

    Returns:
        Dict with 'nodes' (sorted actors) and 'edges' ({'source', 'target',
        'weight'} for every unordered actor pair sharing enough records).
    """
    records_by_actor: Dict[str, set] = defaultdict(set)
    for actor, record in touches:
        records_by_actor[actor].add(record)

    nodes = sorted(records_by_actor)
    edges = []
    for source, target in combinations(nodes, 2):
        weight = len(records_by_actor[source] & records_by_actor[target])
        if weight >= min_shared_records:
            edges.append({'source': source, 'target': target, 'weight': weight})

    return {'nodes': nodes, 'edges': edges}
