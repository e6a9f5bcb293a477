"""Dispatch of decoded UBX messages and NMEA sentences to callbacks."""

from __future__ import annotations

import logging
import struct
import threading
from collections.abc import Callable
from datetime import timedelta
from typing import Any, Generic, Optional, TypeVar, Union

from .ubx import FRAME_OVERHEAD, UbxFrame, scan

_log = logging.getLogger(__name__)

T = TypeVar("T")
Decoder = Callable[[bytes], Any]
Timeout = Union[float, timedelta, None]

DEFAULT_TIMEOUT = 1.0


def _seconds(timeout: Timeout) -> Optional[float]:
    if isinstance(timeout, timedelta):
        return timeout.total_seconds()
    return timeout


class CallbackHandler(Generic[T]):
    """Decodes one message type and hands it to a callback."""

    def __init__(
        self,
        decoder: Callable[[bytes], T],
        callback: Optional[Callable[[T], None]] = None,
        debug: int = 1,
    ) -> None:
        self._decoder = decoder
        self._callback = callback
        self._debug = debug
        self._cond = threading.Condition()
        self._message: Optional[T] = None
        self._notifications = 0

    def get(self) -> Optional[T]:
        """Return the last successfully decoded message, or None."""
        with self._cond:
            return self._message

    def handle(self, frame: UbxFrame) -> None:
        """Decode ``frame`` and call the callback if decoding succeeded.

        Waiters are woken whether or not decoding succeeded.
        """
        with self._cond:
            try:
                try:
                    message = self._decoder(frame.payload)
                except (ValueError, struct.error) as exc:
                    message = None
                    if self._debug >= 2:
                        _log.debug(
                            "Decoder error for 0x%02x / 0x%02x (%d bytes): %s",
                            frame.class_id,
                            frame.message_id,
                            frame.length,
                            exc,
                        )
                if message is not None:
                    self._message = message
                    if self._callback is not None:
                        self._callback(message)
            finally:
                self._notifications += 1
                self._cond.notify_all()

    def wait(self, timeout: Timeout) -> bool:
        """Wait for the next handled frame; return False on timeout."""
        with self._cond:
            start = self._notifications
            return self._cond.wait_for(
                lambda: self._notifications != start, _seconds(timeout)
            )

    def _wait_first(self, timeout: Timeout) -> bool:
        with self._cond:
            return self._cond.wait_for(lambda: self._notifications > 0, _seconds(timeout))


class CallbackHandlers:
    """Routes UBX frames to the handlers registered for their class and ID."""

    def __init__(self, debug: int = 1) -> None:
        self._debug = debug
        self._lock = threading.RLock()
        self._handlers: dict[tuple[int, int], list[CallbackHandler[Any]]] = {}
        self._nmea_callback: Optional[Callable[[str], None]] = None

    def insert(
        self,
        class_id: int,
        message_id: int,
        decoder: Decoder,
        callback: Optional[Callable[[Any], None]] = None,
    ) -> CallbackHandler[Any]:
        """Register a handler for the given class and message ID."""
        handler: CallbackHandler[Any] = CallbackHandler(decoder, callback, self._debug)
        with self._lock:
            self._handlers.setdefault((class_id, message_id), []).append(handler)
        return handler

    def _remove(self, key: tuple[int, int], handler: CallbackHandler[Any]) -> None:
        with self._lock:
            handlers = self._handlers.get(key)
            if handlers is None:
                return
            if handler in handlers:
                handlers.remove(handler)
            if not handlers:
                del self._handlers[key]

    def set_nmea_callback(self, callback: Optional[Callable[[str], None]]) -> None:
        """Set the function that receives each complete NMEA sentence."""
        with self._lock:
            self._nmea_callback = callback

    def handle(self, frame: UbxFrame) -> None:
        """Pass ``frame`` to every handler registered for its key."""
        with self._lock:
            for handler in list(self._handlers.get(frame.key, ())):
                handler.handle(frame)

    def handle_nmea(self, extra: Union[bytes, str]) -> None:
        """Extract sentences from ``$`` to newline and pass each to the callback."""
        with self._lock:
            if self._nmea_callback is None:
                return
            text = extra.decode("latin-1") if isinstance(extra, (bytes, bytearray)) else extra
            start = text.find("$")
            while start != -1:
                end = text.find("\n", start)
                if end == -1:
                    break
                self._nmea_callback(text[start : end + 1])
                start = text.find("$", end + 1)

    def read(
        self,
        class_id: int,
        message_id: int,
        decoder: Decoder,
        timeout: Timeout = DEFAULT_TIMEOUT,
    ) -> Optional[Any]:
        """Wait for one message of the given type and return it, or None."""
        key = (class_id, message_id)
        handler = self.insert(class_id, message_id, decoder)
        try:
            if handler._wait_first(timeout):
                return handler.get()
            return None
        finally:
            self._remove(key, handler)

    def read_callback(self, data: bytes) -> int:
        """Dispatch every complete frame in ``data``; return bytes consumed."""
        result = scan(data)
        for frame in result.frames:
            if self._debug >= 3:
                raw = frame.to_bytes()
                _log.debug(
                    "Reading %d bytes\n%s",
                    frame.length + FRAME_OVERHEAD,
                    " ".join(f"{byte:x}" for byte in raw),
                )
            self.handle(frame)
        self.handle_nmea(result.extra)
        return result.consumed