"""vcal_lite.config_loader

Parser limits for constrained deployments.

- Reads YAML (PyYAML), or JSON for files with a .json suffix.
- Minimal imports at module import time to keep startup light.
- Exposes a typed dataclass `LiteParserLimits` and a `load_parser_limits()`
  helper that accepts an optional path override.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

MAX_ICS_SIZE_BYTES = 50 * 1024 * 1024  # 50MB limit


@dataclass(frozen=True)
class LiteParserLimits:
    """Capacity bounds applied while parsing.

    ``None`` means unbounded. Exceeding a bound is reported as a
    ``LiteCapacityExceededError``, never as silent truncation.

    Fields:
        max_document_bytes: UTF-8 size of the document before unfolding
        max_events: events per calendar
        max_alarms_per_event: alarms per event
        max_timezones: timezones per calendar
        max_parameters: parameters per content line
        max_value_length: characters in one property value
    """

    max_document_bytes: int | None = MAX_ICS_SIZE_BYTES
    max_events: int | None = None
    max_alarms_per_event: int | None = None
    max_timezones: int | None = None
    max_parameters: int | None = None
    max_value_length: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> LiteParserLimits:
        """Create limits from a plain mapping, applying defaults and validation.

        Numeric-like values are coerced to int. Values that are not ints keep the
        default; zero or negative values and explicit nulls mean unbounded. Unknown
        keys are ignored with a warning.
        """
        if data is None:
            data = {}

        known = {f.name for f in fields(cls)}
        for key in data:
            if key not in known:
                logger.warning("Unknown parser limit %r ignored", key)

        values: dict[str, int | None] = {}
        for f in fields(cls):
            if f.name not in data:
                continue
            raw = data[f.name]
            if raw is None:
                values[f.name] = None
                continue
            try:
                coerced = int(raw)
            except (TypeError, ValueError):
                logger.warning("Parser limit %s=%r is not an int; using default", f.name, raw)
                continue
            if coerced <= 0:
                logger.warning("Parser limit %s=%d is not positive; treating as unbounded", f.name, coerced)
                values[f.name] = None
            else:
                values[f.name] = coerced

        return cls(**values)


# Bounds sized for a microcontroller-class display device.
EMBEDDED_LIMITS = LiteParserLimits(
    max_document_bytes=256 * 1024,
    max_events=64,
    max_alarms_per_event=4,
    max_timezones=8,
    max_parameters=8,
    max_value_length=1024,
)


def _load_yaml_or_json(path: Path) -> Any:
    """
    Load a mapping from a YAML or JSON file.

    ``.json`` files are read with the json module, everything else with PyYAML.
    Heavy import of `yaml` is performed lazily inside this function to avoid increasing
    package import cost on constrained devices.
    """
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        try:
            return json.loads(text)
        except ValueError as exc:
            raise ValueError(f"Limits file {path} is not valid JSON: {exc}") from exc

    import yaml  # noqa: PLC0415

    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"Limits file {path} is not valid YAML: {exc}") from exc
    # safe_load returns None for empty files
    if loaded is None:
        return {}
    return loaded


def load_parser_limits(path: str | None = None) -> LiteParserLimits:
    """Load parser limits from a YAML/JSON file.

    Args:
        path: Optional path to the limits file. Defaults to
              ./vcal_lite/limits.yaml (relative to current working dir).

    Returns:
        LiteParserLimits instance with values from file (or defaults).

    Behavior:
    - If file is missing: returns LiteParserLimits() with defaults.
    - If file exists but top-level is not a mapping: raises ValueError.
    - A top-level ``limits`` key, when present, holds the mapping.
    """
    p = Path(path) if path else Path.cwd() / "vcal_lite" / "limits.yaml"
    logger.debug("Attempting to load parser limits from %s", p)
    if not p.exists():
        logger.info("Limits file %s not found; using defaults", p)
        return LiteParserLimits()

    raw = _load_yaml_or_json(p)
    if isinstance(raw, dict) and isinstance(raw.get("limits"), dict):
        raw = raw["limits"]
    if not isinstance(raw, dict):
        logger.warning("Limits file %s parsed but top-level is not a mapping: %r", p, raw)
        raise ValueError("Limits file must contain a mapping at top level")  # noqa: TRY004
    limits = LiteParserLimits.from_dict(raw)
    logger.info("Loaded parser limits from %s", p)
    logger.debug("Parser limits: %s", limits)
    return limits
