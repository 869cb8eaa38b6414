"""
classifier.py - Per-change enrichment: record type, fact deltas, change score.

All functions degrade gracefully on malformed GEDCOM: a missing header gives
the 'Other' type and unparseable lines simply contribute no facts.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
import logging
from typing import List

from .diff import count_changes, myers_diff
from .facts import extract_fact_tags, strip_metadata_noise
from .gedcom_line import record_header, split_lines
from .labels import DEFAULT_RECORD_TYPE, XREF_PREFIX_LABELS, record_type_label
from .records import ChangeRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FactDiff:
    """
    Fact-level summary of one change.

    Attributes:
        edited: Fact tags present on both sides (multiset intersection).
        added: One entry per extra occurrence of a tag on the new side.
        deleted: One entry per missing occurrence of a tag on the new side.
    """
    edited: List[str] = field(default_factory=list)
    added: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ClassifiedChange:
    """A change record together with its derived classification."""
    record: ChangeRecord
    record_type: str
    facts: FactDiff
    score: int


def classify_record_type(xref: str, gedcom: str) -> str:
    """
    Determine the record type label of a change.

    Uses the '0 @ID@ TYPE' header when present, otherwise the legacy
    single-letter xref prefix (I, F, S ...), otherwise 'Other'.
    """
    header = record_header(gedcom)
    if header is not None:
        return record_type_label(header.tag)

    if xref:
        return XREF_PREFIX_LABELS.get(xref[0], DEFAULT_RECORD_TYPE)
    return DEFAULT_RECORD_TYPE


def _expand(counts: Counter) -> List[str]:
    return [tag for tag, count in counts.items() for _ in range(count)]


def diff_facts(old_gedcom: str, new_gedcom: str) -> FactDiff:
    """
    Compare the fact tags of two revisions of a record.

    Args:
        old_gedcom (str): Revision before the change.
        new_gedcom (str): Revision after the change.

    Returns:
        FactDiff: edited/added/deleted fact tags.
    """
    old_counts = Counter(extract_fact_tags(old_gedcom))
    new_counts = Counter(extract_fact_tags(new_gedcom))

    return FactDiff(
        edited=_expand(old_counts & new_counts),
        added=_expand(new_counts - old_counts),
        deleted=_expand(old_counts - new_counts),
    )


def score_change(old_gedcom: str, new_gedcom: str) -> int:
    """
    Score the magnitude of a change as inserted plus deleted lines.

    Change-tracking blocks are removed first, so 0 means the change only
    touched bookkeeping.
    """
    old_lines = split_lines(strip_metadata_noise(old_gedcom))
    new_lines = split_lines(strip_metadata_noise(new_gedcom))
    inserted, deleted = count_changes(myers_diff(old_lines, new_lines))
    return inserted + deleted


def classify_change(record: ChangeRecord) -> ClassifiedChange:
    """Derive record type, fact deltas and change score for one change row."""
    return ClassifiedChange(
        record=record,
        record_type=classify_record_type(record.xref, record.new_gedcom or record.old_gedcom),
        facts=diff_facts(record.old_gedcom, record.new_gedcom),
        score=score_change(record.old_gedcom, record.new_gedcom),
    )
