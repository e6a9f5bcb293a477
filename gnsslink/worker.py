"""Background I/O workers that read from and write to a byte stream."""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import timedelta
from typing import Any, Optional, Union

_log = logging.getLogger(__name__)

ReadCallback = Callable[[bytes], int]
RawDataCallback = Callable[[bytes], None]
Timeout = Union[float, timedelta, None]

_JOIN_TIMEOUT = 5.0
_IDLE_SLEEP = 0.001


def _hex_dump(data: bytes) -> str:
    return " ".join(f"{byte:x}" for byte in data)


def _seconds(timeout: Timeout) -> Optional[float]:
    if isinstance(timeout, timedelta):
        return timeout.total_seconds()
    return timeout


class Worker(ABC):
    """Reads incoming bytes and sends outgoing bytes over some transport."""

    @abstractmethod
    def set_callback(self, callback: Optional[ReadCallback]) -> None:
        """Set the function that processes buffered input.

        It receives the whole input buffer and returns how many bytes of it
        were consumed.
        """

    @abstractmethod
    def set_raw_data_callback(self, callback: Optional[RawDataCallback]) -> None:
        """Set the function that receives every chunk of raw input."""

    @abstractmethod
    def send(self, data: bytes) -> bool:
        """Queue ``data`` for sending; return False if it cannot be queued."""

    @abstractmethod
    def wait(self, timeout: Timeout) -> bool:
        """Block until input is processed or ``timeout`` elapses."""

    @abstractmethod
    def is_open(self) -> bool:
        """Return whether the underlying stream is open."""


class AsyncWorker(Worker):
    """Runs reading and writing of a stream on background threads.

    ``stream`` needs ``read(size)`` returning up to ``size`` bytes (``b""`` at
    end of stream, ``None`` when no data is ready), ``write(data)`` and
    ``close()``. Whether it is open is taken from an ``is_open`` attribute or
    method if present, otherwise from ``closed``.
    """

    def __init__(self, stream: Any, buffer_size: int = 8192, debug: int = 1) -> None:
        if buffer_size <= 0:
            raise ValueError(f"buffer_size must be positive, got {buffer_size}")
        self._stream = stream
        self._capacity = buffer_size
        self._debug = debug

        self._read_cond = threading.Condition()
        self._in = bytearray()
        self._write_cond = threading.Condition()
        self._out = bytearray()

        self._read_callback: Optional[ReadCallback] = None
        self._raw_callback: Optional[RawDataCallback] = None

        self._stopping = False
        self._closed = False

        self._reader = threading.Thread(
            target=self._read_loop, name="gnsslink-reader", daemon=True
        )
        self._writer = threading.Thread(
            target=self._write_loop, name="gnsslink-writer", daemon=True
        )
        self._reader.start()
        self._writer.start()

    def __enter__(self) -> "AsyncWorker":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def set_callback(self, callback: Optional[ReadCallback]) -> None:
        self._read_callback = callback

    def set_raw_data_callback(self, callback: Optional[RawDataCallback]) -> None:
        self._raw_callback = callback

    def send(self, data: bytes) -> bool:
        with self._write_cond:
            if not data:
                _log.error("AsyncWorker.send: size of message to send is 0")
                return True
            if self._capacity - len(self._out) < len(data):
                _log.error("AsyncWorker.send: output buffer too full to send message")
                return False
            self._out += data
            self._write_cond.notify_all()
        return True

    def wait(self, timeout: Timeout) -> bool:
        with self._read_cond:
            return self._read_cond.wait(_seconds(timeout))

    def is_open(self) -> bool:
        flag = getattr(self._stream, "is_open", None)
        if callable(flag):
            return bool(flag())
        if flag is not None:
            return bool(flag)
        return not getattr(self._stream, "closed", False)

    def close(self) -> None:
        """Stop the background threads and close the stream."""
        with self._read_cond:
            if self._closed:
                return
            self._closed = True
            self._stopping = True
        with self._write_cond:
            self._write_cond.notify_all()
        try:
            self._stream.close()
        except (OSError, ValueError) as exc:
            _log.error("Error while closing the AsyncWorker stream: %s", exc)
        current = threading.current_thread()
        for thread in (self._writer, self._reader):
            if thread is not current:
                thread.join(_JOIN_TIMEOUT)

    def _read_loop(self) -> None:
        while True:
            with self._read_cond:
                if self._stopping:
                    break
                if len(self._in) >= self._capacity:
                    # A message longer than the buffer can never complete;
                    # drop everything rather than asking for a zero-byte read.
                    self._in.clear()
                wanted = self._capacity - len(self._in)
            try:
                chunk = self._stream.read(wanted)
            except (OSError, ValueError) as exc:
                if self._stopping or not self.is_open():
                    break
                _log.error("Input buffer read error: %s", exc)
                continue
            if chunk is None:
                time.sleep(_IDLE_SLEEP)
                continue
            if not chunk:
                if not self._stopping:
                    _log.error("Stream transferred zero bytes; end of stream")
                break
            self._process(bytes(chunk))
        with self._read_cond:
            self._read_cond.notify_all()

    def _process(self, chunk: bytes) -> None:
        with self._read_cond:
            self._in += chunk
            try:
                if self._raw_callback is not None:
                    self._raw_callback(chunk)
                if self._debug >= 4:
                    _log.debug("Received %d bytes\n%s", len(chunk), _hex_dump(chunk))
                if self._read_callback is not None:
                    consumed = self._read_callback(bytes(self._in))
                    consumed = max(0, min(int(consumed), len(self._in)))
                    del self._in[:consumed]
            except Exception:
                _log.exception("Input callback failed")
            self._read_cond.notify_all()

    def _write_loop(self) -> None:
        with self._write_cond:
            while True:
                while not self._out and not self._stopping:
                    self._write_cond.wait()
                if not self._out:
                    break
                data = bytes(self._out)
                try:
                    self._write_all(data)
                except (OSError, ValueError) as exc:
                    _log.error("Output write error: %s", exc)
                if self._debug >= 2:
                    _log.debug("Sent %d bytes: \n%s", len(data), _hex_dump(data))
                self._out.clear()
                self._write_cond.notify_all()

    def _write_all(self, data: bytes) -> None:
        view = memoryview(data)
        while view:
            written = self._stream.write(view)
            if written is None:
                written = len(view)
            view = view[written:]
        flush = getattr(self._stream, "flush", None)
        if callable(flush):
            flush()