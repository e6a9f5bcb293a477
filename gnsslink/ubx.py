"""UBX binary frame encoding and stream scanning."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import NamedTuple

SYNC = b"\xb5\x62"
HEADER_SIZE = 6
CHECKSUM_SIZE = 2
FRAME_OVERHEAD = HEADER_SIZE + CHECKSUM_SIZE
MAX_PAYLOAD = 0xFFFF


def ubx_checksum(data: bytes) -> tuple[int, int]:
    """Return the two 8-bit Fletcher checksum bytes over ``data``.

    ``data`` is the class, message ID, length and payload of a frame.
    """
    ck_a = ck_b = 0
    for byte in data:
        ck_a = (ck_a + byte) & 0xFF
        ck_b = (ck_b + ck_a) & 0xFF
    return ck_a, ck_b


def encode_frame(class_id: int, message_id: int, payload: bytes = b"") -> bytes:
    """Build a complete UBX frame including sync characters and checksum."""
    for label, value in (("class_id", class_id), ("message_id", message_id)):
        if not 0 <= value <= 0xFF:
            raise ValueError(f"{label} must be in range [0, 255], got {value}")
    payload = bytes(payload)
    if len(payload) > MAX_PAYLOAD:
        raise ValueError(f"payload too long: {len(payload)} bytes")
    body = bytes((class_id, message_id)) + struct.pack("<H", len(payload)) + payload
    return SYNC + body + bytes(ubx_checksum(body))


@dataclass(frozen=True)
class UbxFrame:
    """A decoded UBX frame: class, message ID and raw payload."""

    class_id: int
    message_id: int
    payload: bytes = b""

    @property
    def key(self) -> tuple[int, int]:
        return self.class_id, self.message_id

    @property
    def length(self) -> int:
        return len(self.payload)

    def to_bytes(self) -> bytes:
        return encode_frame(self.class_id, self.message_id, self.payload)


class _ScanResult(NamedTuple):
    frames: list[UbxFrame]
    extra: bytes
    consumed: int


def scan(data: bytes) -> _ScanResult:
    """Find every complete UBX frame in ``data``.

    Returns the frames found, the bytes that were not part of any frame
    (such as NMEA text), and how many leading bytes were consumed. An
    incomplete frame at the end, or a lone trailing sync byte, is left
    unconsumed so that it can be completed by later input. A frame whose
    checksum does not match is skipped one byte at a time.
    """
    data = bytes(data)
    size = len(data)
    frames: list[UbxFrame] = []
    extra = bytearray()
    pos = 0
    while pos < size:
        start = data.find(SYNC, pos)
        if start < 0:
            if data[-1] == SYNC[0]:
                extra += data[pos : size - 1]
                pos = size - 1
            else:
                extra += data[pos:]
                pos = size
            break
        extra += data[pos:start]
        pos = start
        if size - start < FRAME_OVERHEAD:
            break
        (length,) = struct.unpack_from("<H", data, start + 4)
        end = start + FRAME_OVERHEAD + length
        if end > size:
            break
        body = data[start + 2 : start + HEADER_SIZE + length]
        if bytes(ubx_checksum(body)) == data[end - CHECKSUM_SIZE : end]:
            frames.append(
                UbxFrame(data[start + 2], data[start + 3], data[start + HEADER_SIZE : end - 2])
            )
            pos = end
        else:
            extra += data[start : start + 1]
            pos = start + 1
    return _ScanResult(frames, bytes(extra), pos)