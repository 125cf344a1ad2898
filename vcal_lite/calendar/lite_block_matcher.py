"""BEGIN/END block markers for calendar text - vcal_lite.

Markers are matched as literals for one expected component name supplied by
the calling parser; this is not a general tag parser. A failed match returns
None and leaves the caller's cursor untouched.
"""

from typing import Optional

from vcal_lite.calendar.lite_content_line import consume_line_ending, find_line_end

BEGIN_PREFIX = "BEGIN:"
END_PREFIX = "END:"


def _match_marker(text: str, pos: int, prefix: str, name: str) -> Optional[int]:
    if not text.startswith(prefix, pos):
        return None
    name_start = pos + len(prefix)
    if not text.startswith(name, name_start):
        return None
    name_end = name_start + len(name)
    # The name must end the line: BEGIN:VEVENTX is not BEGIN:VEVENT.
    if name_end < len(text) and text[name_end] not in "\r\n":
        return None
    return consume_line_ending(text, name_end)


def match_begin(text: str, pos: int, name: str) -> Optional[int]:
    """Match ``BEGIN:<name>`` plus optional line break; return the new offset or None."""
    return _match_marker(text, pos, BEGIN_PREFIX, name)


def match_end(text: str, pos: int, name: str) -> Optional[int]:
    """Match ``END:<name>`` plus optional line break; return the new offset or None."""
    return _match_marker(text, pos, END_PREFIX, name)


def skip_line(text: str, pos: int) -> int:
    """Consume the rest of the physical line at ``pos`` and its line break."""
    return consume_line_ending(text, find_line_end(text, pos))
