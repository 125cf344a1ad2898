"""Component parsers for calendar text - vcal_lite.

One parser per block type (VCALENDAR, VEVENT, VALARM, VTIMEZONE). Each starts
after its own ``BEGIN:<NAME>`` marker and, per iteration, tries the productions
legal inside the block in a fixed priority order until ``END:<NAME>``.

Backtracking is explicit: every alternative receives the current cursor and
either returns a new cursor or None, in which case the caller still holds the
old cursor and tries the next alternative. A nested block parser only returns
None when its own ``BEGIN:`` marker is absent; once the marker matched it is
committed, and a failure inside the block is raised instead of being
reinterpreted as an unknown property of the enclosing block.

Properties are routed through a closed table per block type. Names outside the
table go through ``_discard_unknown_property``.
"""

import logging
from typing import Any, Callable, Optional

from vcal_lite.calendar.lite_block_matcher import (
    BEGIN_PREFIX,
    END_PREFIX,
    match_begin,
    match_end,
    skip_line,
)
from vcal_lite.calendar.lite_content_line import parse_content_line
from vcal_lite.calendar.lite_datetime_utils import make_datetime_value
from vcal_lite.calendar.lite_parser_telemetry import LiteParseTelemetry
from vcal_lite.config_loader import LiteParserLimits
from vcal_lite.lite_exceptions import (
    LiteCapacityExceededError,
    LiteMissingBlockError,
    LiteUnterminatedBlockError,
)
from vcal_lite.lite_models import (
    LiteContentLine,
    LiteVAlarm,
    LiteVCalendar,
    LiteVEvent,
    LiteVTimezone,
)

logger = logging.getLogger(__name__)

VCALENDAR = "VCALENDAR"
VEVENT = "VEVENT"
VALARM = "VALARM"
VTIMEZONE = "VTIMEZONE"

# Property name -> (field name, projection of the content line)
PropertyRoutes = dict[str, tuple[str, Callable[[LiteContentLine], Any]]]


def _raw_value(line: LiteContentLine) -> Any:
    return line.value


CALENDAR_ROUTES: PropertyRoutes = {
    "VERSION": ("version", _raw_value),
    "PRODID": ("product_id", _raw_value),
}

EVENT_ROUTES: PropertyRoutes = {
    "UID": ("uid", _raw_value),
    "SUMMARY": ("summary", _raw_value),
    "DESCRIPTION": ("description", _raw_value),
    "LOCATION": ("location", _raw_value),
    "DTSTAMP": ("dtstamp", _raw_value),
    "STATUS": ("status", _raw_value),
    "RRULE": ("recurrence_rule", _raw_value),
    "CATEGORIES": ("categories", _raw_value),
    "ORGANIZER": ("organizer", _raw_value),
    "URL": ("url", _raw_value),
    "PRIORITY": ("priority", _raw_value),
    "SEQUENCE": ("sequence", _raw_value),
    "TRANSP": ("transparency", _raw_value),
    "CREATED": ("created", _raw_value),
    "LAST-MODIFIED": ("last_modified", _raw_value),
    "DTSTART": ("dtstart", make_datetime_value),
    "DTEND": ("dtend", make_datetime_value),
}

ALARM_ROUTES: PropertyRoutes = {
    "TRIGGER": ("trigger", _raw_value),
    "ACTION": ("action", _raw_value),
    "DESCRIPTION": ("description", _raw_value),
    "REPEAT": ("repeat", _raw_value),
    "DURATION": ("duration", _raw_value),
}

TIMEZONE_ROUTES: PropertyRoutes = {
    "TZID": ("tzid", _raw_value),
}


class _ParseContext:
    """State shared by the parsers of one document: text, limits, telemetry."""

    __slots__ = ("text", "limits", "telemetry")

    def __init__(
        self,
        text: str,
        limits: Optional[LiteParserLimits] = None,
        telemetry: Optional[LiteParseTelemetry] = None,
    ) -> None:
        self.text = text
        self.limits = limits if limits is not None else LiteParserLimits()
        self.telemetry = telemetry if telemetry is not None else LiteParseTelemetry()

    def content_line(self, pos: int) -> tuple[LiteContentLine, int]:
        line, next_pos = parse_content_line(self.text, pos, self.limits)
        self.telemetry.record_content_line()
        return line, next_pos

    def ensure_open(self, pos: int, name: str, begin_pos: int) -> None:
        """Raise if input ran out before ``END:<name>``."""
        if pos >= len(self.text):
            raise LiteUnterminatedBlockError(
                f"Input ended before END:{name}",
                position=pos,
                production=f"{name} block",
                text=self.text,
                begin_position=begin_pos,
            )

    def append_bounded(
        self,
        items: list[Any],
        item: Any,
        limit_name: str,
        position: int,
        production: str,
    ) -> None:
        limit = getattr(self.limits, limit_name)
        if limit is not None and len(items) >= limit:
            raise LiteCapacityExceededError(
                f"More than {limit} {production} entries",
                position=position,
                production=production,
                limit_name=limit_name,
                limit=limit,
                text=self.text,
            )
        items.append(item)


def _discard_unknown_property(ctx: _ParseContext, line: LiteContentLine) -> None:
    """Ignore a property the block does not know, for forward compatibility."""
    ctx.telemetry.record_discarded(str(line.name))


def _route_property(
    ctx: _ParseContext,
    line: LiteContentLine,
    routes: PropertyRoutes,
    fields: dict[str, Any],
) -> None:
    route = routes.get(str(line.name))
    if route is None:
        _discard_unknown_property(ctx, line)
        return
    field_name, project = route
    # A repeated property overwrites the earlier one.
    fields[field_name] = project(line)


def _try_parse_valarm(ctx: _ParseContext, pos: int) -> Optional[tuple[LiteVAlarm, int]]:
    cursor = match_begin(ctx.text, pos, VALARM)
    if cursor is None:
        return None

    fields: dict[str, Any] = {}
    while True:
        ctx.ensure_open(cursor, VALARM, pos)

        end = match_end(ctx.text, cursor, VALARM)
        if end is not None:
            return LiteVAlarm(**fields), end

        line, cursor = ctx.content_line(cursor)
        _route_property(ctx, line, ALARM_ROUTES, fields)


def _try_parse_vevent(ctx: _ParseContext, pos: int) -> Optional[tuple[LiteVEvent, int]]:
    cursor = match_begin(ctx.text, pos, VEVENT)
    if cursor is None:
        return None

    fields: dict[str, Any] = {}
    alarms: list[LiteVAlarm] = []
    while True:
        ctx.ensure_open(cursor, VEVENT, pos)

        nested = _try_parse_valarm(ctx, cursor)
        if nested is not None:
            alarm, next_cursor = nested
            ctx.append_bounded(alarms, alarm, "max_alarms_per_event", cursor, VALARM)
            cursor = next_cursor
            continue

        end = match_end(ctx.text, cursor, VEVENT)
        if end is not None:
            return LiteVEvent(alarms=tuple(alarms), **fields), end

        line, cursor = ctx.content_line(cursor)
        _route_property(ctx, line, EVENT_ROUTES, fields)


def _try_parse_vtimezone(ctx: _ParseContext, pos: int) -> Optional[tuple[LiteVTimezone, int]]:
    cursor = match_begin(ctx.text, pos, VTIMEZONE)
    if cursor is None:
        return None

    fields: dict[str, Any] = {}
    # 1 is the VTIMEZONE block itself; STANDARD/DAYLIGHT raise it.
    depth = 1
    text = ctx.text
    while True:
        ctx.ensure_open(cursor, VTIMEZONE, pos)

        if text.startswith(BEGIN_PREFIX, cursor):
            depth += 1
            ctx.telemetry.record_skipped_subcomponent()
            cursor = skip_line(text, cursor)
            continue

        end = match_end(text, cursor, VTIMEZONE)
        if end is not None:
            return LiteVTimezone(**fields), end

        if text.startswith(END_PREFIX, cursor):
            depth -= 1
            if depth < 1:
                ctx.telemetry.record_unexpected_end()
                logger.debug("END marker at %d closes a sub-block that was never opened", cursor)
            cursor = skip_line(text, cursor)
            continue

        # Lines inside sub-blocks must still be valid content lines.
        line, cursor = ctx.content_line(cursor)
        if depth == 1:
            _route_property(ctx, line, TIMEZONE_ROUTES, fields)


def _parse_vcalendar(ctx: _ParseContext, pos: int) -> tuple[LiteVCalendar, int]:
    cursor = match_begin(ctx.text, pos, VCALENDAR)
    if cursor is None:
        raise LiteMissingBlockError(
            f"Expected BEGIN:{VCALENDAR}",
            position=pos,
            production=f"{VCALENDAR} block",
            text=ctx.text,
        )

    fields: dict[str, Any] = {}
    events: list[LiteVEvent] = []
    timezones: list[LiteVTimezone] = []
    while True:
        ctx.ensure_open(cursor, VCALENDAR, pos)

        nested_event = _try_parse_vevent(ctx, cursor)
        if nested_event is not None:
            event, next_cursor = nested_event
            ctx.append_bounded(events, event, "max_events", cursor, VEVENT)
            cursor = next_cursor
            continue

        nested_timezone = _try_parse_vtimezone(ctx, cursor)
        if nested_timezone is not None:
            tz, next_cursor = nested_timezone
            ctx.append_bounded(timezones, tz, "max_timezones", cursor, VTIMEZONE)
            cursor = next_cursor
            continue

        end = match_end(ctx.text, cursor, VCALENDAR)
        if end is not None:
            logger.debug(
                "Parsed %s with %d events and %d timezones", VCALENDAR, len(events), len(timezones)
            )
            return LiteVCalendar(events=tuple(events), timezones=tuple(timezones), **fields), end

        line, cursor = ctx.content_line(cursor)
        _route_property(ctx, line, CALENDAR_ROUTES, fields)


def _require(result: Optional[tuple[Any, int]], ctx: _ParseContext, pos: int, name: str) -> tuple[Any, int]:
    if result is None:
        raise LiteMissingBlockError(
            f"Expected BEGIN:{name}", position=pos, production=f"{name} block", text=ctx.text
        )
    return result


def parse_vcalendar(
    text: str,
    pos: int = 0,
    limits: Optional[LiteParserLimits] = None,
    telemetry: Optional[LiteParseTelemetry] = None,
) -> tuple[LiteVCalendar, int]:
    """Parse a ``BEGIN:VCALENDAR ... END:VCALENDAR`` block of unfolded text.

    Args:
        text: Unfolded calendar text (see ``unfold_lines``)
        pos: Offset of the ``BEGIN:VCALENDAR`` marker
        limits: Optional capacity bounds
        telemetry: Optional per-call telemetry collector

    Returns:
        (calendar, offset just past ``END:VCALENDAR``)

    Raises:
        LiteParseError: on the first unrecoverable condition; no partial tree
    """
    return _parse_vcalendar(_ParseContext(text, limits, telemetry), pos)


def parse_vevent(
    text: str, pos: int = 0, limits: Optional[LiteParserLimits] = None
) -> tuple[LiteVEvent, int]:
    """Parse a single VEVENT block starting at ``pos``."""
    ctx = _ParseContext(text, limits)
    return _require(_try_parse_vevent(ctx, pos), ctx, pos, VEVENT)


def parse_valarm(
    text: str, pos: int = 0, limits: Optional[LiteParserLimits] = None
) -> tuple[LiteVAlarm, int]:
    """Parse a single VALARM block starting at ``pos``."""
    ctx = _ParseContext(text, limits)
    return _require(_try_parse_valarm(ctx, pos), ctx, pos, VALARM)


def parse_vtimezone(
    text: str, pos: int = 0, limits: Optional[LiteParserLimits] = None
) -> tuple[LiteVTimezone, int]:
    """Parse a single VTIMEZONE block starting at ``pos``."""
    ctx = _ParseContext(text, limits)
    return _require(_try_parse_vtimezone(ctx, pos), ctx, pos, VTIMEZONE)
