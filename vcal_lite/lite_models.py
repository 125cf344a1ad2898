"""Data models for calendar text parsing - vcal_lite.

Every string field of the parsed tree is a ``LiteTextView``: a reference to the
unfolded source text plus offsets. No text is copied while parsing; a view
materializes its text only when ``str()`` is called on it. The view holds a
reference to its source, so the source buffer lives at least as long as any
tree built from it, and Python strings cannot be mutated underneath it.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class LiteTextView:
    """Non-owning view of ``source[start:end]``."""

    __slots__ = ("_source", "_start", "_end")

    def __init__(self, source: str, start: int, end: int) -> None:
        if not 0 <= start <= end <= len(source):
            raise ValueError(f"Invalid view bounds {start}:{end} for source of length {len(source)}")
        self._source = source
        self._start = start
        self._end = end

    @property
    def source(self) -> str:
        """The buffer this view borrows from."""
        return self._source

    @property
    def start(self) -> int:
        return self._start

    @property
    def end(self) -> int:
        return self._end

    @property
    def span(self) -> tuple[int, int]:
        return self._start, self._end

    @property
    def text(self) -> str:
        """Materialize the viewed text (this copies)."""
        return self._source[self._start : self._end]

    def startswith(self, prefix: str) -> bool:
        return self._source.startswith(prefix, self._start, self._end)

    def endswith(self, suffix: str) -> bool:
        return self._source.endswith(suffix, self._start, self._end)

    def __len__(self) -> int:
        return self._end - self._start

    def __bool__(self) -> bool:
        return self._end > self._start

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"LiteTextView({self.text!r}, span={self.span})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, LiteTextView):
            if len(other) != len(self):
                return False
            other = other.text
        if isinstance(other, str):
            return len(other) == len(self) and self._source.startswith(other, self._start)
        return NotImplemented

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self) -> int:
        return hash(self.text)


def _serialize_view(view: Optional[LiteTextView]) -> Optional[str]:
    return None if view is None else str(view)


@dataclass(frozen=True)
class LiteContentLine:
    """One parsed ``NAME[;PARAM=VALUE]*:VALUE`` line.

    Parsing intermediate only; never part of the returned tree. ``start`` and
    ``end`` delimit the whole line including its trailing line break.
    """

    name: LiteTextView
    parameters: tuple[tuple[LiteTextView, LiteTextView], ...]
    value: LiteTextView
    start: int
    end: int

    def get_parameter(self, name: str) -> Optional[LiteTextView]:
        """Return the value of the first parameter called ``name`` (case-sensitive)."""
        for param_name, param_value in self.parameters:
            if param_name == name:
                return param_value
        return None


class LiteDateTimeValue(BaseModel):
    """Raw DTSTART/DTEND value plus its optional TZID parameter.

    No resolution into an absolute instant happens here; a downstream date/time
    component interprets the pair. Without ``tzid`` the value is either UTC
    (trailing ``Z``) or floating local time.
    """

    value: LiteTextView
    tzid: Optional[LiteTextView] = None

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    @property
    def is_utc(self) -> bool:
        """Value uses the UTC form (``...T...Z``)."""
        return self.value.endswith("Z")

    @property
    def is_date_only(self) -> bool:
        """Value is a DATE (no time part)."""
        return len(self.value) > 0 and "T" not in str(self.value)

    @field_serializer("value", "tzid")
    def serialize_view(self, view: Optional[LiteTextView]) -> Optional[str]:
        """Serialize views to their text."""
        return _serialize_view(view)


class LiteVAlarm(BaseModel):
    """One VALARM block nested inside an event."""

    trigger: Optional[LiteTextView] = None
    action: Optional[LiteTextView] = None
    description: Optional[LiteTextView] = None
    repeat: Optional[LiteTextView] = None
    duration: Optional[LiteTextView] = None

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    @field_serializer("trigger", "action", "description", "repeat", "duration")
    def serialize_view(self, view: Optional[LiteTextView]) -> Optional[str]:
        """Serialize views to their text."""
        return _serialize_view(view)


class LiteVEvent(BaseModel):
    """One VEVENT block."""

    uid: Optional[LiteTextView] = None
    summary: Optional[LiteTextView] = None
    description: Optional[LiteTextView] = None
    location: Optional[LiteTextView] = None
    dtstart: Optional[LiteDateTimeValue] = None
    dtend: Optional[LiteDateTimeValue] = None
    dtstamp: Optional[LiteTextView] = None
    status: Optional[LiteTextView] = None
    recurrence_rule: Optional[LiteTextView] = Field(
        default=None, description="RRULE value, uninterpreted"
    )
    categories: Optional[LiteTextView] = None
    organizer: Optional[LiteTextView] = None
    url: Optional[LiteTextView] = None
    priority: Optional[LiteTextView] = None
    sequence: Optional[LiteTextView] = None
    transparency: Optional[LiteTextView] = None
    created: Optional[LiteTextView] = None
    last_modified: Optional[LiteTextView] = None
    alarms: tuple[LiteVAlarm, ...] = ()

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    @field_serializer(
        "uid",
        "summary",
        "description",
        "location",
        "dtstamp",
        "status",
        "recurrence_rule",
        "categories",
        "organizer",
        "url",
        "priority",
        "sequence",
        "transparency",
        "created",
        "last_modified",
    )
    def serialize_view(self, view: Optional[LiteTextView]) -> Optional[str]:
        """Serialize views to their text."""
        return _serialize_view(view)


class LiteVTimezone(BaseModel):
    """One top-level VTIMEZONE block; only its own TZID is captured."""

    tzid: Optional[LiteTextView] = None

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    @field_serializer("tzid")
    def serialize_view(self, view: Optional[LiteTextView]) -> Optional[str]:
        """Serialize views to their text."""
        return _serialize_view(view)


class LiteVCalendar(BaseModel):
    """Root of a parsed document."""

    version: Optional[LiteTextView] = None
    product_id: Optional[LiteTextView] = None
    events: tuple[LiteVEvent, ...] = ()
    timezones: tuple[LiteVTimezone, ...] = ()

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    @property
    def alarm_count(self) -> int:
        """Total number of alarms across all events."""
        return sum(len(event.alarms) for event in self.events)

    @field_serializer("version", "product_id")
    def serialize_view(self, view: Optional[LiteTextView]) -> Optional[str]:
        """Serialize views to their text."""
        return _serialize_view(view)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class LiteICSParseResult(BaseModel):
    """Result of a non-raising parse through ``LiteICSParser``."""

    success: bool
    calendar: Optional[LiteVCalendar] = Field(default=None, description="Parsed calendar tree")
    source_url: Optional[str] = Field(default=None, description="Source URL for tracking")

    # Error information
    error_message: Optional[str] = None
    error_kind: Optional[str] = None
    error_position: Optional[int] = None
    error_line: Optional[int] = None
    error_column: Optional[int] = None

    # Parse statistics
    event_count: int = 0
    timezone_count: int = 0
    alarm_count: int = 0
    telemetry: dict[str, Any] = Field(default_factory=dict)

    parse_time: datetime = Field(default_factory=_now_utc)

    @field_serializer("parse_time")
    def serialize_datetime(self, dt: datetime) -> str:
        """Serialize datetime to ISO format."""
        return dt.isoformat()
