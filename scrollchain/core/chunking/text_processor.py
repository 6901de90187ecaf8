"""
Text preprocessing and natural break finding.

Normalizes whitespace so chunk boundaries are stable, and finds the
nearest paragraph, sentence or word break before a window end.

Dependencies: re (stdlib)
System role: Text preparation for the chunking engine
"""

import math
import re

from scrollchain.core.exceptions import ChunkingError

_HORIZONTAL_WS = re.compile(r"[ \t]+")
_LEADING_WS = re.compile(r"\n[ \t]+")
_TRAILING_WS = re.compile(r"[ \t]+\n")
_EXCESS_BLANK_LINES = re.compile(r"\n{3,}")

PARAGRAPH_BREAK = "\n\n"
SENTENCE_BREAKS = (". ", "? ", "! ")
WORD_BREAK = " "


def normalize(text: str) -> str:
    """
    Normalize line endings and whitespace.

    Collapses runs of spaces/tabs, strips whitespace around line breaks,
    caps blank lines at one and trims the ends. Idempotent.

    Args:
        text: Raw document text

    Returns:
        str: Normalized text

    Raises:
        ChunkingError: When text is not a string
    """
    if not isinstance(text, str):
        raise ChunkingError("Text must be a string", {"type": type(text).__name__})

    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _HORIZONTAL_WS.sub(" ", text)
    text = _LEADING_WS.sub("\n", text)
    text = _TRAILING_WS.sub("\n", text)
    text = _EXCESS_BLANK_LINES.sub("\n\n", text)
    return text.strip()


def find_natural_break(text: str, start: int, end: int, lookback: int = 200) -> int:
    """
    Find where a window starting at `start` should end.

    Searches the last `lookback` characters before `end` for, in priority
    order, a paragraph break, a sentence break, then a word break in the
    latter half of the search window. Falls back to `end` (a hard cut that
    may split a word).

    Args:
        text: Full normalized text
        start: Window start offset
        end: Greedy window end offset
        lookback: Maximum characters searched before `end`

    Returns:
        int: Absolute offset in (start, end] where the window ends
    """
    if end >= len(text):
        return len(text)

    search_start = max(start, end - lookback)
    search_text = text[search_start:end]
    search_length = len(search_text)

    position = search_text.rfind(PARAGRAPH_BREAK)
    if position != -1:
        return search_start + position + len(PARAGRAPH_BREAK)

    for marker in SENTENCE_BREAKS:
        position = search_text.rfind(marker)
        if position != -1:
            return search_start + position + len(marker)

    position = search_text.rfind(WORD_BREAK)
    if position != -1 and position > search_length * 0.5:
        return search_start + position + len(WORD_BREAK)

    return end


def estimate_chunk_count(text: str, target_chunk_chars: int) -> int:
    """
    Naive chunk count before natural breaks and oversize splitting.

    Args:
        text: Raw document text
        target_chunk_chars: Target window size

    Returns:
        int: ceil(len(normalize(text)) / target_chunk_chars)
    """
    return math.ceil(len(normalize(text)) / target_chunk_chars)
