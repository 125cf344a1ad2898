"""Calendar text parser entry points - vcal_lite.

``parse_calendar`` unfolds and parses one document, raising on failure.
``LiteICSParser`` wraps it for callers that treat any failure as "could not
parse this calendar" and want a result object instead of an exception.
"""

import logging
import re
from typing import Optional

from vcal_lite.calendar.lite_component_parsers import parse_vcalendar
from vcal_lite.calendar.lite_parser_telemetry import LiteParseTelemetry
from vcal_lite.calendar.lite_unfolder import unfold_lines
from vcal_lite.config_loader import LiteParserLimits
from vcal_lite.lite_exceptions import LiteCapacityExceededError, LiteParseError
from vcal_lite.lite_models import LiteICSParseResult, LiteVCalendar

logger = logging.getLogger(__name__)

_BLANK_RE = re.compile(r"\s*")

# Upper bound of UTF-8 octets per code point.
_MAX_UTF8_WIDTH = 4


def _validate_ics_size(ics_content: str, limits: LiteParserLimits) -> None:
    """Validate document size before processing.

    Raises:
        LiteCapacityExceededError: If content exceeds ``max_document_bytes``
    """
    max_bytes = limits.max_document_bytes
    if max_bytes is None or len(ics_content) * _MAX_UTF8_WIDTH <= max_bytes:
        return

    if len(ics_content) > max_bytes:
        # every code point takes at least one octet
        size_bytes = len(ics_content)
    else:
        size_bytes = len(ics_content.encode("utf-8"))
    if size_bytes > max_bytes:
        logger.error("ICS content too large: %d bytes exceeds %d limit", size_bytes, max_bytes)
        raise LiteCapacityExceededError(
            f"ICS content too large: {size_bytes} bytes exceeds {max_bytes} limit",
            position=0,
            production="document",
            limit_name="max_document_bytes",
            limit=max_bytes,
        )


def parse_calendar(
    ics_content: str,
    limits: Optional[LiteParserLimits] = None,
    unfold: bool = True,
    telemetry: Optional[LiteParseTelemetry] = None,
) -> LiteVCalendar:
    """Parse a complete calendar document.

    Args:
        ics_content: Decoded calendar text
        limits: Optional capacity bounds (defaults to ``LiteParserLimits()``)
        unfold: Set to False when ``ics_content`` is already unfolded
        telemetry: Optional collector for per-call counters

    Returns:
        The calendar tree. Its views borrow from the unfolded text, which the
        tree keeps alive.

    Raises:
        LiteParseError: The document could not be parsed. Positions refer to
            the unfolded text (``error.text``).
    """
    limits = limits if limits is not None else LiteParserLimits()
    _validate_ics_size(ics_content, limits)

    text = unfold_lines(ics_content) if unfold else ics_content
    calendar, end = parse_vcalendar(text, 0, limits, telemetry)

    if _BLANK_RE.fullmatch(text, end) is None:
        logger.debug("Ignoring %d characters after END:VCALENDAR", len(text) - end)
    return calendar


class LiteICSParser:
    """Non-raising calendar parser returning ``LiteICSParseResult``."""

    def __init__(self, limits: Optional[LiteParserLimits] = None) -> None:
        """Initialize the parser.

        Args:
            limits: Capacity bounds applied to every document
        """
        self.limits = limits if limits is not None else LiteParserLimits()
        logger.debug("Lite ICS parser initialized with limits %s", self.limits)

    def parse_ics_content(
        self,
        ics_content: str,
        source_url: Optional[str] = None,
        unfold: bool = True,
    ) -> LiteICSParseResult:
        """Parse ICS content into a calendar tree.

        Args:
            ics_content: Decoded ICS file content
            source_url: Optional source URL for logging and tracking
            unfold: Set to False when the content is already unfolded

        Returns:
            Parse result; ``success`` is False on any parse failure
        """
        if not ics_content or _BLANK_RE.fullmatch(ics_content):
            logger.warning("Empty ICS content provided")
            return LiteICSParseResult(
                success=False,
                error_message="Empty ICS content",
                source_url=source_url,
            )

        telemetry = LiteParseTelemetry()
        try:
            calendar = parse_calendar(ics_content, self.limits, unfold=unfold, telemetry=telemetry)
        except LiteParseError as e:
            logger.warning("Failed to parse ICS content from %s: %s", source_url or "unknown", e)
            return LiteICSParseResult(
                success=False,
                source_url=source_url,
                error_message=str(e),
                error_kind=e.kind.value,
                error_position=e.position,
                error_line=e.lineno,
                error_column=e.col,
                telemetry=telemetry.as_dict(),
            )

        telemetry.log_summary(source_url)
        logger.debug(
            "Parsed ICS content from %s: %d events, %d timezones",
            source_url or "unknown",
            len(calendar.events),
            len(calendar.timezones),
        )
        return LiteICSParseResult(
            success=True,
            calendar=calendar,
            source_url=source_url,
            event_count=len(calendar.events),
            timezone_count=len(calendar.timezones),
            alarm_count=calendar.alarm_count,
            telemetry=telemetry.as_dict(),
        )
