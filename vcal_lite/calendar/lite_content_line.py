"""Content-line grammar for calendar text - vcal_lite.

Parses one logical line of the shape ``NAME[;PARAM=VALUE]*:VALUE``. The
functions here work on a cursor (an integer offset) into the unfolded text and
build ``LiteTextView`` objects from match spans, so no text is copied.
"""

import re
from typing import Optional

from vcal_lite.config_loader import LiteParserLimits
from vcal_lite.lite_exceptions import (
    LiteCapacityExceededError,
    LiteMalformedContentLineError,
)
from vcal_lite.lite_models import LiteContentLine, LiteTextView

# Unicode alphanumerics and hyphen; [^\W_] is exactly str.isalnum().
_NAME_RE = re.compile(r"(?:[^\W_]|-)+")
_PARAM_VALUE_RE = re.compile(r"[^:;\r\n]+")
_LINE_BREAK_RE = re.compile(r"[\r\n]")


def find_line_end(text: str, pos: int) -> int:
    """Offset of the next CR or LF at or after ``pos`` (``len(text)`` if none)."""
    match = _LINE_BREAK_RE.search(text, pos)
    return match.start() if match else len(text)


def consume_line_ending(text: str, pos: int) -> int:
    """Consume an optional CRLF or LF at ``pos``."""
    if text.startswith("\r\n", pos):
        return pos + 2
    if text.startswith("\n", pos):
        return pos + 1
    return pos


def match_name(text: str, pos: int) -> Optional[int]:
    """End offset of a property/parameter name at ``pos``, or None."""
    match = _NAME_RE.match(text, pos)
    return match.end() if match else None


def _try_parameter(text: str, pos: int) -> Optional[tuple[LiteTextView, LiteTextView, int]]:
    """Match ``PARAM=VALUE`` at ``pos`` (just after the ``;``).

    Returns (name, value, end) or None. Nothing is consumed on failure.
    """
    name_end = match_name(text, pos)
    if name_end is None or not text.startswith("=", name_end):
        return None
    value_match = _PARAM_VALUE_RE.match(text, name_end + 1)
    if value_match is None:
        return None
    return (
        LiteTextView(text, pos, name_end),
        LiteTextView(text, value_match.start(), value_match.end()),
        value_match.end(),
    )


def parse_content_line(
    text: str,
    pos: int = 0,
    limits: Optional[LiteParserLimits] = None,
) -> tuple[LiteContentLine, int]:
    """Parse one content line starting at ``pos``.

    Args:
        text: Unfolded calendar text
        pos: Offset of the first character of the line
        limits: Optional capacity bounds for parameters and value length

    Returns:
        (content line, offset just past the line and its optional line break)

    Raises:
        LiteMalformedContentLineError: name missing or ``:`` separator not found
        LiteCapacityExceededError: too many parameters or value too long
    """
    name_end = match_name(text, pos)
    if name_end is None:
        raise LiteMalformedContentLineError(
            "Expected property name", position=pos, production="content line name", text=text
        )

    parameters: list[tuple[LiteTextView, LiteTextView]] = []
    cursor = name_end
    while text.startswith(";", cursor):
        parameter = _try_parameter(text, cursor + 1)
        if parameter is None:
            # cursor stays on the ';' so the separator check below reports it
            break
        param_name, param_value, cursor = parameter
        parameters.append((param_name, param_value))
        if limits is not None and limits.max_parameters is not None:
            if len(parameters) > limits.max_parameters:
                raise LiteCapacityExceededError(
                    f"More than {limits.max_parameters} parameters on one line",
                    position=param_name.start,
                    production="content line parameters",
                    limit_name="max_parameters",
                    limit=limits.max_parameters,
                    text=text,
                )

    if not text.startswith(":", cursor):
        raise LiteMalformedContentLineError(
            "Expected ':' separator", position=cursor, production="content line", text=text
        )

    value_start = cursor + 1
    value_end = find_line_end(text, value_start)
    if limits is not None and limits.max_value_length is not None:
        if value_end - value_start > limits.max_value_length:
            raise LiteCapacityExceededError(
                f"Property value longer than {limits.max_value_length} characters",
                position=value_start,
                production="content line value",
                limit_name="max_value_length",
                limit=limits.max_value_length,
                text=text,
            )

    next_pos = consume_line_ending(text, value_end)
    line = LiteContentLine(
        name=LiteTextView(text, pos, name_end),
        parameters=tuple(parameters),
        value=LiteTextView(text, value_start, value_end),
        start=pos,
        end=next_pos,
    )
    return line, next_pos
