"""
gedcom_line.py - Minimal tokenizer for level-prefixed GEDCOM lines.

Splits a GEDCOM line into (level, xref, tag, value). Every decision that
depends on line structure (fact lines, CHAN blocks, record headers) is built
on top of this module instead of ad hoc regular expressions.
"""
from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Iterator, List, Optional

LINE_RE = re.compile(
    r'^(\d+)\s+(?:(@[^@]+@)\s+)?([A-Za-z0-9_]+)(?:\s(.*))?$'
)  # allow optional @xref@ before the tag


@dataclass(frozen=True)
class GedcomLine:
    """
    One tokenized GEDCOM line.

    Attributes:
        level (int): Structural level (0 for record headers).
        xref (Optional[str]): Cross-reference id without the '@' delimiters.
        tag (str): Tag token, e.g. 'INDI', 'BIRT', '_UID'.
        value (str): Remainder of the line after the tag.
    """
    level: int
    xref: Optional[str]
    tag: str
    value: str = ""

    @property
    def is_record_header(self) -> bool:
        return self.level == 0 and self.xref is not None


def split_lines(gedcom: str) -> List[str]:
    """Split GEDCOM text into lines, normalizing CR/LF endings. Empty text has no lines."""
    if not gedcom:
        return []
    return gedcom.replace('\r\n', '\n').replace('\r', '\n').split('\n')


def parse_line(line: str) -> Optional[GedcomLine]:
    """
    Tokenize a single GEDCOM line.

    Args:
        line (str): Raw line text.

    Returns:
        Optional[GedcomLine]: Parsed line, or None if the line does not follow
        the level-prefixed grammar.
    """
    m = LINE_RE.match(line.rstrip())
    if not m:
        return None
    level_s, xref, tag, value = m.groups()
    return GedcomLine(
        level=int(level_s),
        xref=xref.strip('@') if xref else None,
        tag=tag,
        value=(value or '').strip(),
    )


def iter_lines(gedcom: str) -> Iterator[GedcomLine]:
    """Yield the parseable lines of a GEDCOM text, skipping anything malformed."""
    for raw in split_lines(gedcom):
        parsed = parse_line(raw)
        if parsed is not None:
            yield parsed


def record_header(gedcom: str) -> Optional[GedcomLine]:
    """Return the first level-0 line carrying an xref (e.g. '0 @I1@ INDI'), if any."""
    for line in iter_lines(gedcom):
        if line.is_record_header:
            return line
    return None
