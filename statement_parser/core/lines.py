"""
Line segmentation of the entries section.

PDF text extraction sometimes collapses a whole page region into a single
line. When that happens the text is cut at entry dates instead of newlines.
This is a best-effort heuristic tuned for one layout.
"""
import re
from typing import List, Optional
import logging

from .normalize import DAY_MONTH, NBSP

logger = logging.getLogger(__name__)

# An entry date must start the text or follow whitespace, so references glued
# to a word ("D01/12", "FISIO03/12") are not mistaken for a new entry.
ENTRY_DATE_TOKEN = re.compile(r'(?:^|(?<=\s))(' + DAY_MONTH + r'(?:/\d{4})?)\s+')

# At most this many non-blank lines means the extraction probably collapsed rows
COLLAPSED_LINE_LIMIT = 2


def split_lines(text: Optional[str]) -> List[str]:
    """Split text on line breaks, keeping blank lines."""
    if not text or not text.strip():
        return []
    return re.split(r'\r?\n', text.replace(NBSP, ' '))


def split_by_entry_dates(text: Optional[str]) -> List[str]:
    """
    Cut text into chunks that each start at an entry date token.

    Args:
        text: Section text, possibly a single long line

    Returns:
        Trimmed chunks; the newline split when fewer than two dates are found
    """
    if not text or not text.strip():
        return []

    cleaned = text.replace(NBSP, ' ').strip()
    starts = [m.start(1) for m in ENTRY_DATE_TOKEN.finditer(cleaned)]

    if len(starts) <= 1:
        return split_lines(text)

    chunks = []
    for i, start in enumerate(starts):
        end = starts[i + 1] if i + 1 < len(starts) else len(cleaned)
        chunk = cleaned[start:end].strip()
        if chunk:
            chunks.append(chunk)

    return chunks


def segment_lines(text: Optional[str]) -> List[str]:
    """
    Split section text into candidate entry lines.

    Newlines are used unless the text has at most two non-blank lines and
    cutting at entry dates yields strictly more chunks.

    Args:
        text: Section text

    Returns:
        Candidate lines in document order
    """
    base = split_lines(text)
    non_blank = sum(1 for line in base if line.strip())

    logger.debug(f"segment_lines: non_blank={non_blank}, lines={len(base)}")

    if non_blank <= COLLAPSED_LINE_LIMIT:
        by_date = split_by_entry_dates(text)
        if len(by_date) > len(base):
            logger.debug(f"Collapsed extraction detected; split into {len(by_date)} entries by date")
            return by_date

    return base
