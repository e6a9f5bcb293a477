"""Frequency and timestamp expectations for published topics."""

from __future__ import annotations

from dataclasses import dataclass


def target_frequency(nav_rate: int, meas_rate: int) -> float:
    """Return the expected solution rate in Hz.

    ``meas_rate`` is the measurement period in milliseconds and ``nav_rate``
    the number of measurement cycles per navigation solution.
    """
    if nav_rate <= 0 or meas_rate <= 0:
        raise ValueError(
            f"nav_rate and meas_rate must be positive, got {nav_rate} and {meas_rate}"
        )
    return 1.0 / (meas_rate * 1e-3 * nav_rate)


class FixDiagnostic:
    """Frequency and timestamp bounds for the fix topics."""

    def __init__(
        self,
        name: str,
        freq_tol: float,
        freq_window: int,
        stamp_min: float,
        nav_rate: int,
        meas_rate: int,
    ) -> None:
        target = target_frequency(nav_rate, meas_rate)
        self.name = name
        self.min_freq = target
        self.max_freq = target
        self.freq_tol = freq_tol
        self.freq_window = freq_window
        self.stamp_min = stamp_min
        self.stamp_max = meas_rate * 1e-3 * (1 + freq_tol)

    def __repr__(self) -> str:
        return (
            f"FixDiagnostic(name={self.name!r}, min_freq={self.min_freq}, "
            f"max_freq={self.max_freq}, freq_tol={self.freq_tol}, "
            f"freq_window={self.freq_window}, stamp_min={self.stamp_min}, "
            f"stamp_max={self.stamp_max})"
        )


@dataclass
class UbloxTopicDiagnostic:
    """Frequency bounds for a topic whose messages carry no header."""

    topic: str
    min_freq: float
    max_freq: float
    freq_tol: float
    freq_window: int

    @classmethod
    def from_rates(
        cls,
        topic: str,
        freq_tol: float,
        freq_window: int,
        nav_rate: int,
        meas_rate: int,
    ) -> "UbloxTopicDiagnostic":
        """Bounds equal to the navigation solution rate."""
        target = target_frequency(nav_rate, meas_rate)
        return cls(topic, target, target, freq_tol, freq_window)

    @classmethod
    def from_bounds(
        cls,
        topic: str,
        freq_min: float,
        freq_max: float,
        freq_tol: float,
        freq_window: int,
    ) -> "UbloxTopicDiagnostic":
        """Explicit minimum and maximum frequencies."""
        return cls(topic, freq_min, freq_max, freq_tol, freq_window)