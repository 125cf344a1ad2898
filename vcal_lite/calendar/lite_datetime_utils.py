"""DateTime value extraction for calendar text - vcal_lite.

DTSTART/DTEND lines are projected into a (raw value, optional TZID) pair.
Turning that pair into an absolute instant is left to a downstream date/time
component; nothing here validates or interprets the date syntax.
"""

from vcal_lite.lite_models import LiteContentLine, LiteDateTimeValue

TZID_PARAMETER = "TZID"


def make_datetime_value(line: LiteContentLine) -> LiteDateTimeValue:
    """Build a DateTime value from a DTSTART or DTEND content line.

    Args:
        line: Parsed content line, e.g. ``DTSTART;TZID=Europe/Budapest:20251222T170000``

    Returns:
        LiteDateTimeValue with the raw value and the first TZID parameter, if any

    Examples:
        ``DTSTART;TZID=Europe/Budapest:20251222T170000`` gives value
        ``20251222T170000`` and tzid ``Europe/Budapest``; ``DTEND:20251222T180000Z``
        gives no tzid (UTC form).
    """
    return LiteDateTimeValue(value=line.value, tzid=line.get_parameter(TZID_PARAMETER))
