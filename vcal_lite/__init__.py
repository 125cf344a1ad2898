"""vcal_lite - zero-copy parser for calendar text on constrained devices.

Turns a decoded ``BEGIN:VCALENDAR`` document into a tree of calendar, event,
alarm and timezone nodes whose string fields are views into the unfolded
source text.
"""

__version__ = "0.1.0"

from vcal_lite.calendar.lite_component_parsers import (
    parse_valarm,
    parse_vcalendar,
    parse_vevent,
    parse_vtimezone,
)
from vcal_lite.calendar.lite_content_line import parse_content_line
from vcal_lite.calendar.lite_datetime_utils import make_datetime_value
from vcal_lite.calendar.lite_parser import LiteICSParser, parse_calendar
from vcal_lite.calendar.lite_unfolder import unfold_lines
from vcal_lite.config_loader import EMBEDDED_LIMITS, LiteParserLimits, load_parser_limits
from vcal_lite.lite_exceptions import (
    LiteCapacityExceededError,
    LiteMalformedContentLineError,
    LiteMissingBlockError,
    LiteParseError,
    LiteParseErrorKind,
    LiteUnterminatedBlockError,
    LiteVCalError,
)
from vcal_lite.lite_models import (
    LiteContentLine,
    LiteDateTimeValue,
    LiteICSParseResult,
    LiteTextView,
    LiteVAlarm,
    LiteVCalendar,
    LiteVEvent,
    LiteVTimezone,
)

__all__ = [
    "EMBEDDED_LIMITS",
    "LiteCapacityExceededError",
    "LiteContentLine",
    "LiteDateTimeValue",
    "LiteICSParseResult",
    "LiteICSParser",
    "LiteMalformedContentLineError",
    "LiteMissingBlockError",
    "LiteParseError",
    "LiteParseErrorKind",
    "LiteParserLimits",
    "LiteTextView",
    "LiteUnterminatedBlockError",
    "LiteVAlarm",
    "LiteVCalError",
    "LiteVCalendar",
    "LiteVEvent",
    "LiteVTimezone",
    "load_parser_limits",
    "make_datetime_value",
    "parse_calendar",
    "parse_content_line",
    "parse_valarm",
    "parse_vcalendar",
    "parse_vevent",
    "parse_vtimezone",
    "unfold_lines",
]
