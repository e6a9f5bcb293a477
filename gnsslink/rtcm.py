"""RTCM output message configuration."""

from __future__ import annotations

from dataclasses import dataclass

_UINT8_MAX = 0xFF


@dataclass(frozen=True)
class Rtcm:
    """An RTCM output message ID together with the rate it is sent at."""

    id: int
    rate: int

    def __post_init__(self) -> None:
        for field_name in ("id", "rate"):
            value = getattr(self, field_name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"RTCM {field_name} must be an integer, got {value!r}")
            if not 0 <= value <= _UINT8_MAX:
                raise ValueError(
                    f"RTCM {field_name} must be in range [0, {_UINT8_MAX}], got {value}"
                )