"""Time conversion and parameter validation helpers."""

from __future__ import annotations

import calendar
from collections.abc import Iterable
from typing import Any


class InvalidSettingsError(ValueError):
    """Raised when a configuration value is outside its allowed bounds."""


def to_utc_seconds(
    year: int, month: int, day: int, hour: int, minute: int, second: int
) -> int:
    """Return seconds since the Unix epoch for a broken-down UTC date and time.

    Day, hour, minute and second values outside their usual ranges are
    normalised arithmetically, so a leap second of 60 rolls into the next minute.
    """
    return calendar.timegm((year, month, day, hour, minute, second, 0, 0, 0))


def check_min(val: Any, minimum: Any, name: str) -> None:
    """Raise InvalidSettingsError if ``val`` is below ``minimum``."""
    if val < minimum:
        raise InvalidSettingsError(f"Invalid settings: {name} must be > {minimum}")


def check_range(val: Any, minimum: Any, maximum: Any, name: str) -> None:
    """Raise InvalidSettingsError if ``val`` lies outside ``[minimum, maximum]``."""
    if val < minimum or val > maximum:
        raise InvalidSettingsError(
            f"Invalid settings: {name} must be in range [{minimum}, {maximum}]."
        )


def check_range_all(values: Iterable[Any], minimum: Any, maximum: Any, name: str) -> None:
    """Check every element of ``values``; the error names the offending index."""
    for index, value in enumerate(values):
        check_range(value, minimum, maximum, f"{name}[{index}]")


def check_uint(value: int, bits: int, name: str) -> int:
    """Return ``value`` if it fits an unsigned integer of ``bits`` bits."""
    if bits <= 0:
        raise ValueError(f"bit width must be positive, got {bits}")
    check_range(value, 0, (1 << bits) - 1, name)
    return value