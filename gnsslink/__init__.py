"""Tools for u-blox GNSS receivers: UBX framing, message dispatch, NAV-PVT conversion, diagnostics and an NTRIP correction client."""

__version__ = "0.1.0"