"""
facts.py - GEDCOM fact extraction and metadata-noise removal.

A "fact" is a level-1 tag directly under a record (BIRT, NAME, DEAT, _MILI...).
Bookkeeping tags (change tracking, object links, ids and reference numbers)
are not genealogical content and never count as facts.
"""
from __future__ import annotations

import logging
import re
from typing import List

from .gedcom_line import iter_lines, parse_line, record_header, split_lines

logger = logging.getLogger(__name__)

# Technical tags that are excluded from fact statistics
EXCLUDED_FACT_TAGS = frozenset({'CHAN', 'OBJE', '_UID', 'RIN', 'REFN', 'RFN', 'AFN'})

FACT_TAG_RE = re.compile(r'^(?:[A-Z]{3,5}|_[A-Z][A-Z0-9_]*)$')

CHANGE_BLOCK_TAG = 'CHAN'

MAX_NAME_LENGTH = 30
MAX_NOTE_LENGTH = 60


def is_fact_tag(tag: str) -> bool:
    """Check whether a level-1 tag counts as a fact."""
    return bool(FACT_TAG_RE.match(tag)) and tag not in EXCLUDED_FACT_TAGS


def extract_fact_tags(gedcom: str) -> List[str]:
    """
    Extract the level-1 fact tags of a GEDCOM record, in document order.

    Args:
        gedcom (str): GEDCOM text of one record.

    Returns:
        List[str]: Fact tags (repeated when a fact occurs more than once).
    """
    return [line.tag for line in iter_lines(gedcom) if line.level == 1 and is_fact_tag(line.tag)]


def count_level1_lines(gedcom: str) -> int:
    """
    Count all level-1 lines with an uppercase tag, bookkeeping included.

    Used as a coarse "richness" measure of a record.
    """
    return sum(1 for line in iter_lines(gedcom) if line.level == 1 and line.tag[:1].isupper())


def _is_change_block_header(raw: str) -> bool:
    parsed = parse_line(raw)
    return (
        parsed is not None
        and parsed.level == 1
        and parsed.tag == CHANGE_BLOCK_TAG
        and parsed.value == ''
    )


def strip_metadata_noise(gedcom: str) -> str:
    """
    Remove change-tracking blocks from a GEDCOM record.

    Drops every '1 CHAN' header together with its deeper lines (2 DATE,
    3 TIME, 2 _WT_USER ...). The block ends at the next level-0 or level-1
    line, which is kept. DATE lines under real facts are untouched.

    Args:
        gedcom (str): GEDCOM text.

    Returns:
        str: GEDCOM text without CHAN blocks.
    """
    result = []
    in_change_block = False

    for raw in split_lines(gedcom):
        if _is_change_block_header(raw):
            in_change_block = True
            continue

        if in_change_block:
            parsed = parse_line(raw)
            if parsed is not None and parsed.level <= 1:
                in_change_block = False
            else:
                continue

        result.append(raw)

    return '\n'.join(result)


def _truncate(text: str, limit: int) -> str:
    return text[:limit - 3] + '...' if len(text) > limit else text


def extract_name(gedcom: str) -> str:
    """Return the first level-1 NAME value without surname slashes, or 'Unknown'."""
    for line in iter_lines(gedcom):
        if line.level == 1 and line.tag == 'NAME' and line.value:
            name = ' '.join(line.value.replace('/', ' ').split())
            if name:
                return name
    return 'Unknown'


def _first_value(gedcom: str, tag: str, level: int = 1) -> str:
    for line in iter_lines(gedcom):
        if line.level == level and line.tag == tag and line.value:
            return line.value
    return ''


def extract_record_title(gedcom: str) -> str:
    """
    Return a human-readable title for a record, or '' if none can be found.

    Individuals use their NAME, sources their TITL, repositories and
    submitters their NAME, notes their (truncated) text, media their TITL
    or FILE.
    """
    header = record_header(gedcom)
    if header is None:
        return ''

    record_type = header.tag
    if record_type == 'INDI':
        name = extract_name(gedcom)
        return '' if name == 'Unknown' else name
    if record_type in ('REPO', 'SUBM', '_LOC'):
        return _first_value(gedcom, 'NAME')
    if record_type == 'SOUR':
        return _first_value(gedcom, 'TITL')
    if record_type in ('NOTE', 'SNOTE'):
        text = header.value or _first_value(gedcom, 'CONT')
        return _truncate(text, MAX_NOTE_LENGTH)
    if record_type == 'OBJE':
        return _first_value(gedcom, 'TITL') or _first_value(gedcom, 'TITL', level=2) or _first_value(gedcom, 'FILE')
    return ''


def shorten_name(name: str) -> str:
    """Shorten a display name for chart labels."""
    return _truncate(name, MAX_NAME_LENGTH)
