"""Unit tests for lite_component_parsers module."""

import pytest

from tests.fixtures.mock_ics_data import BUDAPEST_TIMEZONE_LINES, ICSDataFactory, join_lines
from vcal_lite.calendar.lite_component_parsers import (
    parse_valarm,
    parse_vcalendar,
    parse_vevent,
    parse_vtimezone,
)
from vcal_lite.calendar.lite_unfolder import fold_line, unfold_lines
from vcal_lite.config_loader import LiteParserLimits
from vcal_lite.lite_exceptions import (
    LiteCapacityExceededError,
    LiteMalformedContentLineError,
    LiteMissingBlockError,
    LiteParseErrorKind,
    LiteUnterminatedBlockError,
)

pytestmark = pytest.mark.unit


class TestParseVAlarm:
    """Tests for parse_valarm."""

    def test_alarm_fields(self):
        """Test alarm properties are routed to their fields."""
        text = join_lines(
            [
                "BEGIN:VALARM",
                "TRIGGER:-P1D",
                "ACTION:DISPLAY",
                "DESCRIPTION:Reminder",
                "REPEAT:2",
                "DURATION:PT5M",
                "END:VALARM",
            ]
        )

        alarm, end = parse_valarm(text)

        assert alarm.trigger == "-P1D"
        assert alarm.action == "DISPLAY"
        assert alarm.description == "Reminder"
        assert alarm.repeat == "2"
        assert alarm.duration == "PT5M"
        assert end == len(text)

    def test_missing_begin(self):
        """Test text not starting with the marker raises."""
        with pytest.raises(LiteMissingBlockError):
            parse_valarm("TRIGGER:-P1D\r\n")

    def test_unterminated_alarm(self):
        """Test an alarm without END raises at end of input."""
        text = join_lines(["BEGIN:VALARM", "TRIGGER:-P1D"])

        with pytest.raises(LiteUnterminatedBlockError) as exc_info:
            parse_valarm(text)

        error = exc_info.value
        assert error.kind is LiteParseErrorKind.UNTERMINATED_BLOCK
        assert error.position == len(text)
        assert error.begin_position == 0
        assert error.production == "VALARM block"


class TestParseVEvent:
    """Tests for parse_vevent."""

    def test_simple_event(self):
        """Test a UTC event without parameters."""
        text = join_lines(
            [
                "BEGIN:VEVENT",
                "UID:test-uid-123",
                "SUMMARY:Test Event",
                "DTSTART:20251222T170000Z",
                "DTEND:20251222T180000Z",
                "END:VEVENT",
            ]
        )

        event, end = parse_vevent(text)

        assert event.uid == "test-uid-123"
        assert event.summary == "Test Event"
        assert event.dtstart.value == "20251222T170000Z"
        assert event.dtstart.tzid is None
        assert event.dtend.value == "20251222T180000Z"
        assert event.alarms == ()
        assert end == len(text)

    def test_event_with_alarm(self):
        """Test a nested alarm is attached to the event."""
        text = join_lines(
            [
                "BEGIN:VEVENT",
                "UID:test-uid-456",
                "SUMMARY:Event with Alarm",
                "BEGIN:VALARM",
                "TRIGGER:-PT15M",
                "ACTION:DISPLAY",
                "END:VALARM",
                "END:VEVENT",
            ]
        )

        event, _ = parse_vevent(text)

        assert event.uid == "test-uid-456"
        assert len(event.alarms) == 1
        assert event.alarms[0].trigger == "-PT15M"

    def test_event_with_rrule(self):
        """Test RRULE is kept as an uninterpreted value."""
        text = join_lines(
            [
                "BEGIN:VEVENT",
                "UID:recurring-event",
                "SUMMARY:Weekly Meeting",
                "RRULE:FREQ=WEEKLY;BYDAY=MO,WE,FR",
                "LOCATION:Conference Room A",
                "END:VEVENT",
            ]
        )

        event, _ = parse_vevent(text)

        assert event.recurrence_rule == "FREQ=WEEKLY;BYDAY=MO,WE,FR"
        assert event.location == "Conference Room A"

    def test_all_known_event_properties(self):
        """Test every routed event property lands in its field."""
        text = join_lines(
            [
                "BEGIN:VEVENT",
                "UID:u",
                "SUMMARY:s",
                "DESCRIPTION:d",
                "LOCATION:l",
                "DTSTAMP:20251221T081106Z",
                "STATUS:TENTATIVE",
                "CATEGORIES:WORK,MEETING",
                "ORGANIZER;CN=Jane:mailto:jane@example.com",
                "URL:https://example.com/e/1",
                "PRIORITY:5",
                "SEQUENCE:3",
                "TRANSP:TRANSPARENT",
                "CREATED:20250101T000000Z",
                "LAST-MODIFIED:20250102T000000Z",
                "END:VEVENT",
            ]
        )

        event, _ = parse_vevent(text)

        assert event.description == "d"
        assert event.location == "l"
        assert event.dtstamp == "20251221T081106Z"
        assert event.status == "TENTATIVE"
        assert event.categories == "WORK,MEETING"
        assert event.organizer == "mailto:jane@example.com"
        assert event.url == "https://example.com/e/1"
        assert event.priority == "5"
        assert event.sequence == "3"
        assert event.transparency == "TRANSPARENT"
        assert event.created == "20250101T000000Z"
        assert event.last_modified == "20250102T000000Z"

    def test_alarm_order_is_preserved(self):
        """Test alarms keep document order, interleaved with properties."""
        text = join_lines(
            [
                "BEGIN:VEVENT",
                "BEGIN:VALARM",
                "TRIGGER:-PT5M",
                "END:VALARM",
                "UID:interleaved",
                "BEGIN:VALARM",
                "TRIGGER:-PT10M",
                "END:VALARM",
                "END:VEVENT",
            ]
        )

        event, _ = parse_vevent(text)

        assert event.uid == "interleaved"
        assert [str(alarm.trigger) for alarm in event.alarms] == ["-PT5M", "-PT10M"]

    def test_repeated_property_last_wins(self):
        """Test a repeated property keeps the later value."""
        text = join_lines(["BEGIN:VEVENT", "SUMMARY:first", "SUMMARY:second", "END:VEVENT"])

        event, _ = parse_vevent(text)

        assert event.summary == "second"

    def test_unknown_property_named_like_sub_block_is_ignored(self):
        """Test unknown BEGIN/END lines inside an event are plain properties."""
        text = join_lines(
            [
                "BEGIN:VEVENT",
                "UID:x",
                "BEGIN:X-CUSTOM",
                "FOO:bar",
                "END:X-CUSTOM",
                "END:VEVENT",
            ]
        )

        event, end = parse_vevent(text)

        assert event.uid == "x"
        assert end == len(text)

    def test_unterminated_event(self):
        """Test an event without END raises."""
        text = join_lines(["BEGIN:VEVENT", "UID:x"])

        with pytest.raises(LiteUnterminatedBlockError) as exc_info:
            parse_vevent(text)

        assert exc_info.value.production == "VEVENT block"

    def test_unterminated_nested_alarm_is_not_reinterpreted(self):
        """Test a broken alarm fails instead of being read as event properties."""
        text = join_lines(["BEGIN:VEVENT", "UID:x", "BEGIN:VALARM", "TRIGGER:-P1D", "END:VEVENT"])

        with pytest.raises(LiteUnterminatedBlockError) as exc_info:
            parse_vevent(text)

        error = exc_info.value
        assert error.production == "VALARM block"
        assert error.begin_position == text.index("BEGIN:VALARM")

    def test_malformed_line_inside_event(self):
        """Test a line matching no production raises."""
        text = join_lines(["BEGIN:VEVENT", "UID:x", "garbage line", "END:VEVENT"])

        with pytest.raises(LiteMalformedContentLineError) as exc_info:
            parse_vevent(text)

        assert exc_info.value.lineno == 3

    def test_alarm_capacity(self):
        """Test exceeding max_alarms_per_event raises."""
        text = ICSDataFactory.create_event_with_alarms_ics(alarm_count=3)
        start = text.index("BEGIN:VEVENT")

        with pytest.raises(LiteCapacityExceededError) as exc_info:
            parse_vevent(text, start, LiteParserLimits(max_alarms_per_event=2))

        assert exc_info.value.limit_name == "max_alarms_per_event"
        assert exc_info.value.limit == 2


class TestParseVTimezone:
    """Tests for parse_vtimezone."""

    def test_timezone_skips_sub_blocks(self):
        """Test only the block's own TZID is captured."""
        text = join_lines(BUDAPEST_TIMEZONE_LINES)

        tz, end = parse_vtimezone(text)

        assert tz.tzid == "Europe/Budapest"
        assert end == len(text)

    def test_sub_block_tzid_is_not_captured(self):
        """Test a TZID inside STANDARD does not overwrite the block TZID."""
        text = join_lines(
            [
                "BEGIN:VTIMEZONE",
                "TZID:Europe/Budapest",
                "BEGIN:STANDARD",
                "TZID:Not/This",
                "END:STANDARD",
                "END:VTIMEZONE",
            ]
        )

        tz, _ = parse_vtimezone(text)

        assert tz.tzid == "Europe/Budapest"

    def test_tzid_after_sub_blocks(self):
        """Test TZID is captured after sub-blocks closed again."""
        text = join_lines(
            [
                "BEGIN:VTIMEZONE",
                "BEGIN:DAYLIGHT",
                "TZNAME:CEST",
                "END:DAYLIGHT",
                "TZID:Europe/Budapest",
                "END:VTIMEZONE",
            ]
        )

        tz, _ = parse_vtimezone(text)

        assert tz.tzid == "Europe/Budapest"

    def test_nested_sub_blocks(self):
        """Test deeper nesting is tracked."""
        text = join_lines(
            [
                "BEGIN:VTIMEZONE",
                "BEGIN:STANDARD",
                "BEGIN:X-INNER",
                "TZID:inner",
                "END:X-INNER",
                "TZID:standard",
                "END:STANDARD",
                "TZID:Europe/Budapest",
                "END:VTIMEZONE",
            ]
        )

        tz, _ = parse_vtimezone(text)

        assert tz.tzid == "Europe/Budapest"

    def test_stray_end_is_tolerated(self, telemetry):
        """Test an END with no open sub-block is counted, not raised."""
        text = join_lines(
            ["BEGIN:VTIMEZONE", "END:STANDARD", "TZID:Europe/Budapest", "END:VTIMEZONE"]
        )
        calendar_text = join_lines(["BEGIN:VCALENDAR"]) + text + join_lines(["END:VCALENDAR"])

        calendar, _ = parse_vcalendar(calendar_text, telemetry=telemetry)

        assert calendar.timezones[0].tzid is None
        assert telemetry.unexpected_end_markers == 1

    def test_unterminated_timezone(self):
        """Test a timezone without END raises."""
        text = join_lines(["BEGIN:VTIMEZONE", "TZID:Europe/Budapest", "BEGIN:STANDARD"])

        with pytest.raises(LiteUnterminatedBlockError) as exc_info:
            parse_vtimezone(text)

        assert exc_info.value.production == "VTIMEZONE block"

    def test_malformed_line_inside_sub_block(self):
        """Test sub-block lines must still be content lines."""
        text = join_lines(
            ["BEGIN:VTIMEZONE", "BEGIN:STANDARD", "not a line", "END:STANDARD", "END:VTIMEZONE"]
        )

        with pytest.raises(LiteMalformedContentLineError):
            parse_vtimezone(text)


class TestParseVCalendar:
    """Tests for parse_vcalendar."""

    @pytest.mark.critical_path
    def test_full_budapest_calendar(self, budapest_ics):
        """Test the full sample document."""
        calendar, end = parse_vcalendar(budapest_ics)

        assert end == len(budapest_ics)
        assert calendar.version == "2.0"
        assert calendar.product_id == "DAVx5/4.5.7.1-ose ical4j/3.2.19"
        assert len(calendar.events) == 1
        assert len(calendar.timezones) == 1

        event = calendar.events[0]
        assert event.summary == "Fürdő"
        assert event.uid == "481b79c2-cc82-47bd-bf60-6082bab80e99"
        assert event.status == "CONFIRMED"
        assert event.dtstart.value == "20251222T170000"
        assert event.dtstart.tzid == "Europe/Budapest"
        assert event.dtend.value == "20251222T230000"
        assert len(event.alarms) == 1
        assert event.alarms[0].trigger == "-P1D"
        assert event.alarms[0].action == "DISPLAY"
        assert event.alarms[0].description == "Fürdő"
        assert calendar.timezones[0].tzid == "Europe/Budapest"

    def test_lf_line_endings(self, ics_factory):
        """Test LF-only documents parse identically."""
        calendar, _ = parse_vcalendar(ics_factory.create_budapest_ics(line_break="\n"))

        assert calendar.version == "2.0"
        assert calendar.events[0].summary == "Fürdő"
        assert calendar.events[0].alarms[0].trigger == "-P1D"
        assert calendar.timezones[0].tzid == "Europe/Budapest"

    def test_folded_document_after_unfolding(self, ics_factory):
        """Test a folded description is whole after unfolding."""
        text = unfold_lines(ics_factory.create_folded_ics(width=20))

        calendar, _ = parse_vcalendar(text)

        assert calendar.events[0].description == (
            "This is a very long description that has been folded "
            "across multiple lines for readability."
        )

    def test_multiple_events_keep_order(self, ics_factory):
        """Test events are returned in document order."""
        calendar, _ = parse_vcalendar(ics_factory.create_multiple_events_ics(3))

        assert [str(event.uid) for event in calendar.events] == ["event-1", "event-2", "event-3"]
        assert calendar.events[2].priority == "3"

    def test_unknown_properties_are_ignored(self, ics_factory, telemetry):
        """Test unknown properties are discarded and counted."""
        calendar, _ = parse_vcalendar(ics_factory.create_unknown_properties_ics(), telemetry=telemetry)

        assert calendar.version == "2.0"
        assert calendar.events[0].summary == "Known"
        assert telemetry.discarded_properties == 4
        assert telemetry.discarded_names == {
            "CALSCALE",
            "X-WR-CALNAME",
            "X-MICROSOFT-CDO-BUSYSTATUS",
            "ATTENDEE",
        }

    def test_empty_calendar(self, ics_factory):
        """Test a calendar without components."""
        calendar, _ = parse_vcalendar(ics_factory.create_empty_ics())

        assert calendar.events == ()
        assert calendar.timezones == ()
        assert calendar.product_id is None

    def test_timezone_before_events(self):
        """Test components may come in any order."""
        text = join_lines(
            [
                "BEGIN:VCALENDAR",
                *BUDAPEST_TIMEZONE_LINES,
                "BEGIN:VEVENT",
                "UID:after-tz",
                "END:VEVENT",
                "VERSION:2.0",
                "END:VCALENDAR",
            ]
        )

        calendar, _ = parse_vcalendar(text)

        assert calendar.timezones[0].tzid == "Europe/Budapest"
        assert calendar.events[0].uid == "after-tz"
        assert calendar.version == "2.0"

    def test_missing_begin_marker(self):
        """Test a document not opening with BEGIN:VCALENDAR."""
        with pytest.raises(LiteMissingBlockError) as exc_info:
            parse_vcalendar("VERSION:2.0\r\n")

        assert exc_info.value.kind is LiteParseErrorKind.MISSING_BLOCK
        assert exc_info.value.position == 0

    def test_unterminated_calendar(self):
        """Test a calendar without END raises."""
        text = join_lines(["BEGIN:VCALENDAR", "VERSION:2.0"])

        with pytest.raises(LiteUnterminatedBlockError) as exc_info:
            parse_vcalendar(text)

        assert exc_info.value.production == "VCALENDAR block"
        assert exc_info.value.position == len(text)

    def test_unterminated_event_in_calendar(self, ics_factory):
        """Test an unterminated event fails the whole document."""
        with pytest.raises(LiteUnterminatedBlockError) as exc_info:
            parse_vcalendar(ics_factory.create_unterminated_ics())

        assert exc_info.value.production == "VEVENT block"

    def test_malformed_line_reports_location(self, ics_factory):
        """Test a malformed line is reported with line and column."""
        with pytest.raises(LiteMalformedContentLineError) as exc_info:
            parse_vcalendar(ics_factory.create_malformed_ics())

        error = exc_info.value
        assert error.lineno == 5
        assert error.line == "SUMMARY without separator"
        assert error.col == len("SUMMARY") + 1

    def test_event_capacity(self, ics_factory):
        """Test exceeding max_events raises with no partial tree."""
        with pytest.raises(LiteCapacityExceededError) as exc_info:
            parse_vcalendar(ics_factory.create_large_ics(5), limits=LiteParserLimits(max_events=4))

        assert exc_info.value.limit_name == "max_events"

    def test_timezone_capacity(self):
        """Test exceeding max_timezones raises."""
        text = join_lines(
            ["BEGIN:VCALENDAR", *BUDAPEST_TIMEZONE_LINES, *BUDAPEST_TIMEZONE_LINES, "END:VCALENDAR"]
        )

        with pytest.raises(LiteCapacityExceededError) as exc_info:
            parse_vcalendar(text, limits=LiteParserLimits(max_timezones=1))

        assert exc_info.value.limit_name == "max_timezones"

    def test_trailing_content_is_not_consumed(self, ics_factory):
        """Test the returned offset stops after END:VCALENDAR."""
        document = ics_factory.create_empty_ics()

        _, end = parse_vcalendar(document + "trailing garbage")

        assert end == len(document)

    def test_views_borrow_from_text(self, budapest_ics):
        """Test the tree references the parsed text rather than copies."""
        calendar, _ = parse_vcalendar(budapest_ics)

        summary = calendar.events[0].summary
        assert summary.source is budapest_ics
        assert budapest_ics[summary.start : summary.end] == "Fürdő"


class TestDocumentProperties:
    """Tests for tree-level properties of the parser."""

    SCENARIO_A = (
        "BEGIN:VCALENDAR\r\nVERSION:2.0\r\nBEGIN:VEVENT\r\nUID:e1\r\nSUMMARY:Test\r\n"
        "END:VEVENT\r\nEND:VCALENDAR\r\n"
    )

    def test_minimal_calendar(self):
        """Test a minimal calendar with one event."""
        calendar, _ = parse_vcalendar(self.SCENARIO_A)

        assert calendar.version == "2.0"
        assert len(calendar.events) == 1
        assert calendar.events[0].uid == "e1"
        assert calendar.events[0].summary == "Test"

    def test_alarm_has_only_its_fields(self):
        """Test an alarm with TRIGGER and ACTION leaves everything else absent."""
        text = join_lines(
            ["BEGIN:VEVENT", "BEGIN:VALARM", "TRIGGER:-P1D", "ACTION:DISPLAY", "END:VALARM", "END:VEVENT"]
        )

        event, _ = parse_vevent(text)

        assert len(event.alarms) == 1
        assert event.alarms[0].model_dump() == {
            "trigger": "-P1D",
            "action": "DISPLAY",
            "description": None,
            "repeat": None,
            "duration": None,
        }

    def test_timezone_inner_properties_do_not_leak(self, budapest_ics):
        """Test nothing from STANDARD/DAYLIGHT appears in the result."""
        calendar, _ = parse_vcalendar(budapest_ics)

        dumped = calendar.model_dump_json()

        assert calendar.timezones[0].model_dump() == {"tzid": "Europe/Budapest"}
        for inner in ("CET", "CEST", "+0200", "+0100", "19961027T030000", "BYMONTH=10"):
            assert inner not in dumped

    def test_removing_unknown_lines_keeps_known_fields(self, ics_factory):
        """Test unknown lines have no effect on the parsed tree."""
        with_unknown = ics_factory.create_unknown_properties_ics()
        known_only = "".join(
            line
            for line in with_unknown.splitlines(keepends=True)
            if not line.startswith(("CALSCALE", "X-", "ATTENDEE"))
        )

        first, _ = parse_vcalendar(with_unknown)
        second, _ = parse_vcalendar(known_only)

        assert first.model_dump() == second.model_dump()

    @pytest.mark.parametrize("width", [2, 5, 11, 17, 40])
    @pytest.mark.parametrize("line_break", ["\r\n", "\n"])
    def test_folding_does_not_change_tree(self, budapest_ics, width, line_break):
        """Test folding every line and unfolding yields the same tree."""
        lines = budapest_ics.split("\r\n")[:-1]
        folded = "".join(fold_line(line, width=width, line_break=line_break) + "\r\n" for line in lines)

        expected, _ = parse_vcalendar(budapest_ics)
        actual, _ = parse_vcalendar(unfold_lines(folded))

        assert actual.model_dump() == expected.model_dump()
