"""Per-call parser telemetry - vcal_lite.

Counts what the parser saw but did not keep: discarded unknown properties,
skipped timezone sub-blocks and stray END markers. One instance belongs to one
parse call; nothing is shared between calls.
"""

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)

# Distinct discarded names remembered for diagnostics.
MAX_TRACKED_NAMES = 32


class LiteParseTelemetry:
    """Tracks parsing progress for a single document."""

    def __init__(self, max_tracked_names: int = MAX_TRACKED_NAMES) -> None:
        """Initialize parser telemetry.

        Args:
            max_tracked_names: Maximum distinct discarded property names to remember
        """
        self.max_tracked_names = max_tracked_names

        self.content_lines = 0
        self.discarded_properties = 0
        self.discarded_names: set[str] = set()
        self.skipped_subcomponents = 0
        self.unexpected_end_markers = 0

    def record_content_line(self) -> None:
        """Record that a content line was parsed."""
        self.content_lines += 1

    def record_discarded(self, name: str) -> None:
        """Record an unknown property that was ignored."""
        self.discarded_properties += 1
        if len(self.discarded_names) < self.max_tracked_names:
            self.discarded_names.add(name)

    def record_skipped_subcomponent(self) -> None:
        """Record a BEGIN marker skipped inside a timezone block."""
        self.skipped_subcomponents += 1

    def record_unexpected_end(self) -> None:
        """Record an END marker that closed more sub-blocks than were open."""
        self.unexpected_end_markers += 1

    def as_dict(self) -> dict[str, Any]:
        """Snapshot of the counters."""
        return {
            "content_lines": self.content_lines,
            "discarded_properties": self.discarded_properties,
            "discarded_names": sorted(self.discarded_names),
            "skipped_subcomponents": self.skipped_subcomponents,
            "unexpected_end_markers": self.unexpected_end_markers,
        }

    def log_summary(self, source_url: Optional[str] = None) -> None:
        """Log the counters at debug level."""
        logger.debug(
            "Parse telemetry - source_url=%s, content_lines=%d, discarded_properties=%d, "
            "discarded_names=%s, skipped_subcomponents=%d, unexpected_end_markers=%d",
            source_url or "unknown",
            self.content_lines,
            self.discarded_properties,
            sorted(self.discarded_names),
            self.skipped_subcomponents,
            self.unexpected_end_markers,
        )
