"""
Value types used by SADL literals and validation.

- Decimal: arbitrary precision numbers (``decimal.Decimal``), the type of every
  numeric literal in SADL source
- Timestamp: UTC instants, rendered as RFC 3339 with milliseconds
- UUID: 36 character canonical string form
- UnitValue: a decimal value paired with a unit, rendered as "value unit"
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

# =============================================================================
# Decimal
# =============================================================================


def parse_decimal(text: str) -> Decimal:
    """
    Parse a decimal number without loss of precision.

    Raises:
        ValueError: If the text is not a finite decimal number
    """
    try:
        value = Decimal(text.strip())
    except (InvalidOperation, AttributeError) as e:
        raise ValueError(f"Bad Decimal number: {text}") from e
    if not value.is_finite():
        raise ValueError(f"Bad Decimal number: {text}")
    return value


def format_decimal(value: Decimal) -> str:
    """Render a decimal in plain (non-exponent) notation."""
    text = format(value, "f")
    if text == "-0":
        return "0"
    return text


def decimal_to_json(value: Decimal) -> str:
    """Encode a decimal as a quoted JSON string so no precision is lost."""
    return json.dumps(format_decimal(value))


def decimal_from_json(raw: str | bytes) -> Decimal:
    """
    Decode a decimal from JSON text.

    Accepts either a quoted decimal string or a raw JSON number.
    """
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    text = raw.strip()
    if text.startswith('"'):
        try:
            text = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Bad Decimal number: {raw}") from e
    return parse_decimal(text)


def is_integral(value: Decimal) -> bool:
    return value == value.to_integral_value()


# =============================================================================
# Timestamp
# =============================================================================

_TIMESTAMP_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d{1,9}))?Z$"
)

_RFC2616_FORMAT = "%a, %d %b %Y %H:%M:%S GMT"


@dataclass(frozen=True, order=True)
class Timestamp:
    """A UTC instant with millisecond string representation."""

    value: datetime

    @classmethod
    def parse(cls, text: str) -> Timestamp:
        """
        Parse a timestamp string.

        Accepts ``YYYY-MM-DDTHH:MM:SS[.fff]Z`` plus the ``+00:00``, ``-00:00``,
        ``+0000`` and ``-0000`` suffix variants, and RFC 2616 dates.

        Raises:
            ValueError: If the text is not a valid timestamp
        """
        s = text
        for suffix in ("+00:00", "-00:00"):
            if s.endswith(suffix):
                s = s[: -len(suffix)] + "Z"
        for suffix in ("+0000", "-0000"):
            if s.endswith(suffix):
                s = s[: -len(suffix)] + "Z"

        match = _TIMESTAMP_RE.match(s)
        if match:
            year, month, day, hour, minute, second, frac = match.groups()
            micros = int((frac or "0").ljust(9, "0")[:6])
            try:
                dt = datetime(
                    int(year),
                    int(month),
                    int(day),
                    int(hour),
                    int(minute),
                    int(second),
                    micros,
                    tzinfo=timezone.utc,
                )
            except ValueError as e:
                raise ValueError(f"Bad Timestamp: {text!r}") from e
            return cls(dt)

        try:
            dt = datetime.strptime(text, _RFC2616_FORMAT).replace(tzinfo=timezone.utc)
        except ValueError as e:
            raise ValueError(f"Bad Timestamp: {text!r}") from e
        return cls(dt)

    def __str__(self) -> str:
        v = self.value.astimezone(timezone.utc)
        return (
            f"{v.year:04d}-{v.month:02d}-{v.day:02d}T"
            f"{v.hour:02d}:{v.minute:02d}:{v.second:02d}.{v.microsecond // 1000:03d}Z"
        )

    def to_json(self) -> str:
        return json.dumps(str(self))


# =============================================================================
# UUID
# =============================================================================

UUID_LENGTH = 36


class UUID(str):
    """A UUID in canonical 8-4-4-4-12 string form."""

    @classmethod
    def parse(cls, text: str) -> UUID:
        """
        Check the length and dash positions of a UUID string.

        Raises:
            ValueError: If the text is not a canonical UUID
        """
        if len(text) != UUID_LENGTH or any(text[i] != "-" for i in (8, 13, 18, 23)):
            raise ValueError(f"Bad UUID: {text!r}")
        return cls(text)


# =============================================================================
# UnitValue
# =============================================================================


@dataclass(frozen=True)
class UnitValue:
    """A decimal value with a unit, such as ``12.50 USD``."""

    value: Decimal
    unit: str

    @classmethod
    def parse(cls, text: str) -> UnitValue:
        """
        Parse "value unit", splitting on the first space.

        Raises:
            ValueError: If the text is not a valid unit value
        """
        value_text, sep, unit = text.partition(" ")
        if not (sep and value_text and unit):
            raise ValueError(f"Not a valid UnitValue: {text!r}")
        try:
            value = parse_decimal(value_text)
        except ValueError as e:
            raise ValueError(f"Not a valid UnitValue: {text!r}") from e
        return cls(value, unit)

    def __str__(self) -> str:
        return f"{format_decimal(self.value)} {self.unit}"

    def to_json(self) -> str:
        return json.dumps(str(self))


def json_default(obj: Any) -> Any:
    """``default`` hook for ``json.dumps`` covering the SADL value types."""
    if isinstance(obj, Decimal):
        return format_decimal(obj)
    if isinstance(obj, (Timestamp, UnitValue)):
        return str(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")
