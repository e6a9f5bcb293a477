"""The set of GNSS constellations a receiver supports."""

from __future__ import annotations


class Gnss:
    """Records which GNSS names a device reports as supported."""

    def __init__(self) -> None:
        self._supported: set[str] = set()

    def add(self, gnss: str) -> None:
        """Mark the named GNSS as supported."""
        self._supported.add(gnss)

    def is_supported(self, gnss: str) -> bool:
        """Return whether the named GNSS has been marked as supported."""
        return gnss in self._supported

    def __contains__(self, gnss: object) -> bool:
        return gnss in self._supported

    def __iter__(self):
        return iter(sorted(self._supported))

    def __len__(self) -> int:
        return len(self._supported)