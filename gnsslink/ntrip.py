"""NTRIP client that streams RTCM corrections from a caster."""

from __future__ import annotations

import argparse
import base64
import logging
import socket
import sys
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import reduce
from operator import xor
from typing import Optional, Union

_log = logging.getLogger(__name__)

Moment = Union[datetime, float, int, None]


@dataclass(frozen=True)
class Fix:
    """A position in degrees latitude and longitude and metres altitude."""

    latitude: float
    longitude: float
    altitude: float


def base64_encode(text: str) -> str:
    """Return the padded standard base64 encoding of ``text`` as UTF-8."""
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def _utc(now: Moment) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if isinstance(now, datetime):
        if now.tzinfo is None:
            return now.replace(tzinfo=timezone.utc)
        return now.astimezone(timezone.utc)
    return datetime.fromtimestamp(now, timezone.utc)


def _split_degrees(value: float) -> tuple[int, float]:
    magnitude = abs(value)
    whole = int(magnitude)
    return whole, (magnitude - whole) * 60.0


def generate_gga(fix: Optional[Fix], now: Moment = None) -> str:
    """Build a GPGGA sentence, with checksum and CRLF, reporting ``fix``.

    ``now`` is the UTC time to report (a datetime or seconds since the epoch,
    default the current time). Returns an empty string when there is no fix.
    """
    if fix is None:
        return ""
    time_str = _utc(now).strftime("%H%M%S")
    lat_dir = "N" if fix.latitude >= 0 else "S"
    lat_deg, lat_min = _split_degrees(fix.latitude)
    lon_dir = "E" if fix.longitude >= 0 else "W"
    lon_deg, lon_min = _split_degrees(fix.longitude)
    sentence = (
        f"$GPGGA,{time_str},"
        f"{lat_deg:02d}{lat_min:.4f},{lat_dir},"
        f"{lon_deg:03d}{lon_min:.4f},{lon_dir}"
        f",1,12,1.0,{fix.altitude:.1f},M,0.0,M,,"
    )
    checksum = reduce(xor, sentence[1:].encode("latin-1"), 0)
    return f"{sentence}*{checksum:02X}\r\n"


def build_request(
    host: str, port: int, mountpoint: str, username: str, password: str
) -> str:
    """Build the NTRIP 2.0 HTTP request for ``mountpoint`` with basic auth."""
    credentials = base64_encode(f"{username}:{password}")
    return (
        f"GET /{mountpoint} HTTP/1.1\r\n"
        f"Host: {host}:{port}\r\n"
        "Ntrip-Version: Ntrip/2.0\r\n"
        "User-Agent: NTRIP ROS2 Client\r\n"
        f"Authorization: Basic {credentials}\r\n"
        "Connection: close\r\n\r\n"
    )


class NtripClient:
    """Connects to an NTRIP caster once a fix is known and relays RTCM data.

    Every chunk of data received from the caster is passed to ``on_rtcm``.
    """

    fix_poll_interval = 0.5
    gga_delay = 0.5
    chunk_size = 4096

    def __init__(
        self,
        host: str,
        port: int,
        mountpoint: str = "",
        username: str = "",
        password: str = "",
        on_rtcm: Optional[Callable[[bytes], None]] = None,
    ) -> None:
        self.host = host
        self.port = port
        self.mountpoint = mountpoint
        self.username = username
        self.password = password
        self.on_rtcm = on_rtcm
        self._fix: Optional[Fix] = None
        self._fix_cond = threading.Condition()
        self._stop = threading.Event()
        self._sock_lock = threading.Lock()
        self._sock: Optional[socket.socket] = None
        self._thread: Optional[threading.Thread] = None

    def __enter__(self) -> "NtripClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def update_fix(self, fix: Fix) -> None:
        """Record the latest position; it is reported to the caster as GGA."""
        with self._fix_cond:
            self._fix = fix
            self._fix_cond.notify_all()

    def stream(self) -> None:
        """Wait for a fix, connect, and relay data until the caster closes.

        Returns early if the client is stopped. Connection errors propagate
        as OSError.
        """
        with self._fix_cond:
            while self._fix is None and not self._stop.is_set():
                self._fix_cond.wait(self.fix_poll_interval)
        if self._stop.is_set():
            return
        _log.info("Received GPS fix. Starting NTRIP connection.")

        sock = socket.create_connection((self.host, self.port))
        with self._sock_lock:
            if self._stop.is_set():
                sock.close()
                return
            self._sock = sock
        try:
            request = build_request(
                self.host, self.port, self.mountpoint, self.username, self.password
            )
            sock.sendall(request.encode("utf-8"))
            if self._stop.wait(self.gga_delay):
                return
            with self._fix_cond:
                gga = generate_gga(self._fix)
            sock.sendall(gga.encode("ascii"))
            while not self._stop.is_set():
                try:
                    data = sock.recv(self.chunk_size)
                except OSError:
                    break
                if not data:
                    break
                if self.on_rtcm is not None:
                    self.on_rtcm(data)
        finally:
            with self._sock_lock:
                self._sock = None
            sock.close()

    def _run(self) -> None:
        try:
            self.stream()
        except OSError as exc:
            _log.error("NTRIP connection failed: %s", exc)

    def start(self) -> None:
        """Run ``stream`` on a background thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="ntrip-client", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop streaming, close the connection and wait for the thread."""
        self._stop.set()
        with self._fix_cond:
            self._fix_cond.notify_all()
        with self._sock_lock:
            if self._sock is not None:
                try:
                    self._sock.shutdown(socket.SHUT_RDWR)
                except OSError:
                    pass
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gnsslink-ntrip", description="Stream RTCM corrections from an NTRIP caster."
    )
    parser.add_argument("--host", required=True)
    parser.add_argument("--port", type=int, required=True)
    parser.add_argument("--mountpoint", default="")
    parser.add_argument("--username", default="")
    parser.add_argument("--password", default="")
    parser.add_argument("--lat", type=float, required=True, help="latitude [deg]")
    parser.add_argument("--lon", type=float, required=True, help="longitude [deg]")
    parser.add_argument("--alt", type=float, default=0.0, help="altitude [m]")
    parser.add_argument("--output", default="-", help="file for RTCM data, - for stdout")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Stream corrections for a fixed position to a file or standard output."""
    args = _parser().parse_args(argv)
    fix = Fix(args.lat, args.lon, args.alt)

    def run(out) -> int:
        def write(data: bytes) -> None:
            out.write(data)
            out.flush()

        client = NtripClient(
            args.host, args.port, args.mountpoint, args.username, args.password, write
        )
        client.update_fix(fix)
        try:
            client.stream()
        except OSError as exc:
            print(f"NTRIP connection failed: {exc}", file=sys.stderr)
            return 1
        except KeyboardInterrupt:
            client.stop()
        return 0

    if args.output == "-":
        return run(sys.stdout.buffer)
    with open(args.output, "wb") as out:
        return run(out)


if __name__ == "__main__":
    sys.exit(main())