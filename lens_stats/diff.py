"""
diff.py - Line-based shortest edit script (Myers' algorithm).

Lines are compared by exact string equality. For a replaced block the
script lists the deletions before the insertions, so the same inputs always
produce the same script.
"""
from __future__ import annotations

from enum import Enum
from typing import List, Sequence, Tuple


class DiffOp(str, Enum):
    """Operation applied to one line of the edit script."""
    INSERT = 'insert'
    DELETE = 'delete'
    RETAIN = 'retain'


DiffResult = List[Tuple[str, DiffOp]]


def _shortest_edit_trace(a: Sequence[str], b: Sequence[str]) -> List[List[int]]:
    """
    Run the forward Myers search.

    Returns the snapshot of the furthest-reaching x per diagonal taken at
    the start of every edit distance d, up to and including the d that
    reaches the end of both sequences.
    """
    n, m = len(a), len(b)
    max_d = n + m
    offset = max_d
    v = [0] * (2 * max_d + 2)
    trace = []

    for d in range(max_d + 1):
        trace.append(list(v))
        for k in range(-d, d + 1, 2):
            if k == -d or (k != d and v[offset + k - 1] < v[offset + k + 1]):
                x = v[offset + k + 1]
            else:
                x = v[offset + k - 1] + 1
            y = x - k
            while x < n and y < m and a[x] == b[y]:
                x += 1
                y += 1
            v[offset + k] = x
            if x >= n and y >= m:
                return trace
    return trace


def myers_diff(a: Sequence[str], b: Sequence[str]) -> DiffResult:
    """
    Compute the shortest edit script turning sequence a into sequence b.

    Args:
        a (Sequence[str]): Original lines.
        b (Sequence[str]): New lines.

    Returns:
        DiffResult: Ordered (line, operation) pairs covering every line of
        both inputs exactly once.
    """
    a = list(a)
    b = list(b)
    trace = _shortest_edit_trace(a, b)
    offset = len(a) + len(b)

    x, y = len(a), len(b)
    script: DiffResult = []
    for d in range(len(trace) - 1, -1, -1):
        v = trace[d]
        k = x - y
        if k == -d or (k != d and v[offset + k - 1] < v[offset + k + 1]):
            prev_k = k + 1
        else:
            prev_k = k - 1
        prev_x = v[offset + prev_k]
        prev_y = prev_x - prev_k

        while x > prev_x and y > prev_y:
            x -= 1
            y -= 1
            script.append((a[x], DiffOp.RETAIN))

        if d > 0:
            if x == prev_x:
                script.append((b[prev_y], DiffOp.INSERT))
            else:
                script.append((a[prev_x], DiffOp.DELETE))
        x, y = prev_x, prev_y

    script.reverse()
    return script


def count_changes(diff: DiffResult) -> Tuple[int, int]:
    """Return (inserted, deleted) line counts of an edit script."""
    inserted = sum(1 for _, op in diff if op is DiffOp.INSERT)
    deleted = sum(1 for _, op in diff if op is DiffOp.DELETE)
    return inserted, deleted


def edit_distance(a: Sequence[str], b: Sequence[str]) -> int:
    """Number of single-line insertions plus deletions needed to turn a into b."""
    inserted, deleted = count_changes(myers_diff(a, b))
    return inserted + deleted
