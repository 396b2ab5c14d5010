"""Text normalization and offset mapping between raw and normalized text.

Character timings from the TTS provider are indexed against the text that was
narrated, while segment text coming back from the language model may differ in
whitespace. Searching is done on normalized text and the resulting offsets are
translated back through a position map.
"""

import re

_WHITESPACE_RUN = re.compile(r"\s+")
_QUOTES = frozenset("'\"")


def normalize(text: str) -> str:
    """Collapse whitespace runs (including newlines) to one space and trim."""
    return _WHITESPACE_RUN.sub(" ", text).strip()


def build_position_map(original: str) -> list[int]:
    """Map each index of ``normalize(original)`` to its index in ``original``.

    Non-whitespace characters map to themselves; a whitespace run maps to its
    first character. Leading and trailing runs are trimmed by ``normalize`` and
    therefore have no entry.
    """
    positions: list[int] = []
    pending_space: int | None = None
    for i, char in enumerate(original):
        if char.isspace():
            if pending_space is None and positions:
                pending_space = i
            continue
        if pending_space is not None:
            positions.append(pending_space)
            pending_space = None
        positions.append(i)
    return positions


def strip_quotes(text: str) -> tuple[str, list[int]]:
    """Remove quote characters.

    Returns:
        Tuple of (stripped_text, index_map) where ``index_map[i]`` is the
        offset in ``text`` of ``stripped_text[i]``.
    """
    chars: list[str] = []
    index_map: list[int] = []
    for i, char in enumerate(text):
        if char in _QUOTES:
            continue
        chars.append(char)
        index_map.append(i)
    return "".join(chars), index_map


def find_span(haystack: str, needle: str, cursor: int = 0) -> tuple[int, int] | None:
    """Locate ``needle`` in ``haystack`` at or after ``cursor``.

    Falls back to a quote-insensitive search when the exact search misses. The
    returned ``[start, end)`` span is always expressed in ``haystack`` offsets.
    """
    start = haystack.find(needle, cursor)
    if start != -1:
        return start, start + len(needle)

    relaxed_needle, _ = strip_quotes(needle)
    relaxed_haystack, index_map = strip_quotes(haystack)
    if not relaxed_needle:
        return None

    # First stripped index whose source offset is at or after the cursor
    relaxed_cursor = len(index_map)
    for i, offset in enumerate(index_map):
        if offset >= cursor:
            relaxed_cursor = i
            break

    relaxed_start = relaxed_haystack.find(relaxed_needle, relaxed_cursor)
    if relaxed_start == -1:
        return None
    relaxed_end = relaxed_start + len(relaxed_needle)
    return index_map[relaxed_start], index_map[relaxed_end - 1] + 1
