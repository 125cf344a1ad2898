"""Line unfolding for calendar text - vcal_lite.

Folding splits a long content line by inserting a line break followed by a
single space or tab. Folds may fall inside a property name, a parameter or a
value, so unfolding runs once over the whole document before any structural
parsing.
"""

import re

# A CRLF or bare LF immediately followed by exactly one folding character.
_FOLD_RE = re.compile(r"\r?\n[ \t]")


def unfold_lines(text: str) -> str:
    """Return ``text`` with every folded line joined back onto its logical line.

    The line break and the one folding space/tab are removed; any further
    whitespace belongs to the content. All other line breaks pass through.

    Examples:
        >>> unfold_lines("DESCRIPTION:a long\\r\\n  description\\r\\n")
        'DESCRIPTION:a long description\\r\\n'
        >>> unfold_lines("SUMMARY:plain\\nUID:1\\n")
        'SUMMARY:plain\\nUID:1\\n'
    """
    return _FOLD_RE.sub("", text)


def fold_line(line: str, width: int = 75, line_break: str = "\r\n") -> str:
    """Fold one logical line into physical lines of at most ``width`` characters.

    Continuation lines start with a single space, which ``unfold_lines`` removes.
    Width counts characters, not octets.
    """
    if width < 2:
        raise ValueError("width must be at least 2")
    if len(line) <= width:
        return line
    parts = [line[:width]]
    rest = line[width:]
    while rest:
        parts.append(" " + rest[: width - 1])
        rest = rest[width - 1 :]
    return line_break.join(parts)
