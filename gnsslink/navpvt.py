"""NAV-PVT messages and their conversion into fix, velocity and diagnostics."""

from __future__ import annotations

import struct
import time
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, ClassVar, Optional

from .utils import to_utc_seconds

_HEAD = struct.Struct("<IHBBBBBBIiBBBBiiiiIIiiiiiIIH")
_TAIL8 = struct.Struct("<B5xihH")
_TAIL7 = struct.Struct("<6x")
_NS_PER_S = 1_000_000_000


@dataclass
class NavPvt:
    """Navigation position, velocity and time solution (UBX-NAV-PVT)."""

    CLASS_ID: ClassVar[int] = 0x01
    MESSAGE_ID: ClassVar[int] = 0x07

    VALID_DATE: ClassVar[int] = 1
    VALID_TIME: ClassVar[int] = 2
    VALID_FULLY_RESOLVED: ClassVar[int] = 4

    FIX_TYPE_NO_FIX: ClassVar[int] = 0
    FIX_TYPE_DEAD_RECKONING_ONLY: ClassVar[int] = 1
    FIX_TYPE_2D: ClassVar[int] = 2
    FIX_TYPE_3D: ClassVar[int] = 3
    FIX_TYPE_GNSS_DEAD_RECKONING_COMBINED: ClassVar[int] = 4
    FIX_TYPE_TIME_ONLY: ClassVar[int] = 5

    FLAGS_GNSS_FIX_OK: ClassVar[int] = 1
    FLAGS_DIFF_SOLN: ClassVar[int] = 2
    CARRIER_PHASE_FLOAT: ClassVar[int] = 64
    CARRIER_PHASE_FIXED: ClassVar[int] = 128

    FLAGS2_CONFIRMED_AVAILABLE: ClassVar[int] = 32
    FLAGS2_CONFIRMED_DATE: ClassVar[int] = 64
    FLAGS2_CONFIRMED_TIME: ClassVar[int] = 128

    i_tow: int = 0
    year: int = 0
    month: int = 0
    day: int = 0
    hour: int = 0
    minute: int = 0
    second: int = 0
    valid: int = 0
    t_acc: int = 0
    nano: int = 0
    fix_type: int = 0
    flags: int = 0
    flags2: int = 0
    num_sv: int = 0
    lon: int = 0
    lat: int = 0
    height: int = 0
    h_msl: int = 0
    h_acc: int = 0
    v_acc: int = 0
    vel_n: int = 0
    vel_e: int = 0
    vel_d: int = 0
    g_speed: int = 0
    head_mot: int = 0
    s_acc: int = 0
    head_acc: int = 0
    p_dop: int = 0
    flags3: int = 0
    head_veh: int = 0
    mag_dec: int = 0
    mag_acc: int = 0

    @classmethod
    def from_payload(cls, payload: bytes) -> "NavPvt":
        """Decode an 84-byte (firmware 7) or 92-byte (firmware 8+) payload."""
        payload = bytes(payload)
        if len(payload) not in (_HEAD.size + _TAIL7.size, _HEAD.size + _TAIL8.size):
            raise ValueError(f"NAV-PVT payload must be 84 or 92 bytes, got {len(payload)}")
        message = cls(*_HEAD.unpack_from(payload))
        if len(payload) == _HEAD.size + _TAIL8.size:
            (message.flags3, message.head_veh, message.mag_dec, message.mag_acc) = (
                _TAIL8.unpack_from(payload, _HEAD.size)
            )
        return message

    def to_payload(self, extended: bool = True) -> bytes:
        """Encode as a 92-byte payload, or 84 bytes if ``extended`` is False."""
        head = _HEAD.pack(
            self.i_tow, self.year, self.month, self.day, self.hour, self.minute,
            self.second, self.valid, self.t_acc, self.nano, self.fix_type, self.flags,
            self.flags2, self.num_sv, self.lon, self.lat, self.height, self.h_msl,
            self.h_acc, self.v_acc, self.vel_n, self.vel_e, self.vel_d, self.g_speed,
            self.head_mot, self.s_acc, self.head_acc, self.p_dop,
        )
        if extended:
            return head + _TAIL8.pack(self.flags3, self.head_veh, self.mag_dec, self.mag_acc)
        return head + _TAIL7.pack()


class FixStatus(IntEnum):
    """Status of a satellite fix."""

    NO_FIX = -1
    FIX = 0
    SBAS_FIX = 1
    GBAS_FIX = 2


class DiagnosticLevel(IntEnum):
    """Severity of a diagnostic report."""

    OK = 0
    WARN = 1
    ERROR = 2
    STALE = 3


COVARIANCE_TYPE_DIAGONAL_KNOWN = 2


@dataclass
class NavSatFix:
    """A geodetic position fix with diagonal covariance."""

    frame_id: str
    stamp: tuple[int, int]
    latitude: float
    longitude: float
    altitude: float
    status: FixStatus
    service: int
    position_covariance: list[float] = field(default_factory=lambda: [0.0] * 9)
    position_covariance_type: int = COVARIANCE_TYPE_DIAGONAL_KNOWN


@dataclass
class TwistWithCovariance:
    """A linear velocity in east-north-up axes with a 6x6 covariance."""

    frame_id: str
    stamp: tuple[int, int]
    linear: tuple[float, float, float]
    covariance: list[float] = field(default_factory=lambda: [0.0] * 36)


def _stamp_from_now(now: Optional[float]) -> tuple[int, int]:
    total_ns = time.time_ns() if now is None else round(now * _NS_PER_S)
    sec, nanosec = divmod(total_ns, _NS_PER_S)
    return int(sec), int(nanosec)


def _stamp(m: NavPvt, now: Optional[float]) -> tuple[int, int]:
    valid_time = m.VALID_DATE | m.VALID_TIME | m.VALID_FULLY_RESOLVED
    if (m.valid & valid_time) == valid_time and m.flags2 & m.FLAGS2_CONFIRMED_AVAILABLE:
        utc = to_utc_seconds(m.year, m.month, m.day, m.hour, m.minute, m.second)
        if m.nano < 0:
            return utc - 1, m.nano + _NS_PER_S
        return utc, m.nano
    return _stamp_from_now(now)


def nav_pvt_to_fix(
    m: NavPvt, frame_id: str = "", service: int = 0, now: Optional[float] = None
) -> NavSatFix:
    """Build a position fix from ``m``.

    The receiver's timestamp is used when date and time are valid and
    confirmed; otherwise ``now`` (seconds since the epoch, default the
    current time) stamps the fix.
    """
    fix_ok = bool(m.flags & m.FLAGS_GNSS_FIX_OK)
    if fix_ok and m.fix_type >= m.FIX_TYPE_2D:
        status = FixStatus.GBAS_FIX if m.flags & m.CARRIER_PHASE_FIXED else FixStatus.FIX
    else:
        status = FixStatus.NO_FIX
    var_h = (m.h_acc / 1000.0) ** 2
    var_v = (m.v_acc / 1000.0) ** 2
    covariance = [0.0] * 9
    covariance[0] = var_h
    covariance[4] = var_h
    covariance[8] = var_v
    return NavSatFix(
        frame_id=frame_id,
        stamp=_stamp(m, now),
        latitude=m.lat * 1e-7,
        longitude=m.lon * 1e-7,
        altitude=m.height * 1e-3,
        status=status,
        service=service,
        position_covariance=covariance,
    )


def nav_pvt_to_velocity(
    m: NavPvt, stamp: tuple[int, int], frame_id: str = ""
) -> TwistWithCovariance:
    """Build an east-north-up velocity in m/s from ``m``; angular rate is unsupported."""
    cov_speed = (m.s_acc * 1e-3) ** 2
    covariance = [0.0] * 36
    cols = 6
    for axis in range(3):
        covariance[cols * axis + axis] = cov_speed
    covariance[cols * 3 + 3] = -1.0
    return TwistWithCovariance(
        frame_id=frame_id,
        stamp=stamp,
        linear=(m.vel_e * 1e-3, m.vel_n * 1e-3, -m.vel_d * 1e-3),
        covariance=covariance,
    )


def fix_diagnostic(m: NavPvt) -> tuple[DiagnosticLevel, str, dict[str, Any]]:
    """Summarise the fix in ``m`` as a level, a message and reported values."""
    level = DiagnosticLevel.OK
    message = ""
    if m.fix_type == m.FIX_TYPE_DEAD_RECKONING_ONLY:
        level, message = DiagnosticLevel.WARN, "Dead reckoning only"
    elif m.fix_type == m.FIX_TYPE_2D:
        level, message = DiagnosticLevel.WARN, "2D fix"
    elif m.fix_type == m.FIX_TYPE_3D:
        level, message = DiagnosticLevel.OK, "3D fix"
    elif m.fix_type == m.FIX_TYPE_GNSS_DEAD_RECKONING_COMBINED:
        level, message = DiagnosticLevel.OK, "GPS and dead reckoning combined"
    elif m.fix_type == m.FIX_TYPE_TIME_ONLY:
        level, message = DiagnosticLevel.OK, "Time only fix"

    if not m.flags & m.FLAGS_GNSS_FIX_OK:
        level = DiagnosticLevel.WARN
        message += ", fix not ok"
    if m.fix_type == m.FIX_TYPE_NO_FIX:
        level, message = DiagnosticLevel.ERROR, "No fix"

    values: dict[str, Any] = {
        "iTOW [ms]": m.i_tow,
        "Latitude [deg]": m.lat * 1e-7,
        "Longitude [deg]": m.lon * 1e-7,
        "Altitude [m]": m.height * 1e-3,
        "Height above MSL [m]": m.h_msl * 1e-3,
        "Horizontal Accuracy [m]": m.h_acc * 1e-3,
        "Vertical Accuracy [m]": m.v_acc * 1e-3,
        "# SVs used": int(m.num_sv),
    }
    return level, message, values