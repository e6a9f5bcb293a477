import queue
import threading

import pytest

from gnsslink.worker import AsyncWorker, Worker

TIMEOUT = 2.0
FEED_DELAY = 0.05


class FakeStream:
    """A stream fed from a queue; read blocks until data or close."""

    def __init__(self):
        self._incoming = queue.Queue()
        self._pending = b""
        self.closed = False
        self.written = []
        self.write_event = threading.Event()

    def feed(self, item):
        self._incoming.put(item)

    def read(self, size):
        if not self._pending:
            item = self._incoming.get()
            if item is None:
                return b""
            if isinstance(item, Exception):
                raise item
            self._pending = item
        chunk, self._pending = self._pending[:size], self._pending[size:]
        return chunk

    def write(self, data):
        self.written.append(bytes(data))
        self.write_event.set()
        return len(data)

    def close(self):
        self.closed = True
        self._incoming.put(None)


def _feed_later(stream, data):
    timer = threading.Timer(FEED_DELAY, stream.feed, args=(data,))
    timer.start()
    return timer


@pytest.fixture
def stream():
    return FakeStream()


@pytest.fixture
def worker(stream):
    w = AsyncWorker(stream, buffer_size=64, debug=4)
    yield w
    w.close()


def test_worker_is_abstract():
    with pytest.raises(TypeError):
        Worker()


def test_invalid_buffer_size(stream):
    with pytest.raises(ValueError):
        AsyncWorker(stream, buffer_size=0)


def test_raw_callback_receives_chunks(stream, worker):
    received = queue.Queue()
    worker.set_raw_data_callback(received.put)
    stream.feed(b"\xb5\x62\x01")
    stream.feed(b"\x07")
    assert received.get(timeout=TIMEOUT) == b"\xb5\x62\x01"
    assert received.get(timeout=TIMEOUT) == b"\x07"


def test_unconsumed_input_accumulates(stream, worker):
    seen = queue.Queue()

    def callback(buf):
        seen.put(buf)
        return 0

    worker.set_callback(callback)
    _feed_later(stream, b"abc").join()
    assert seen.get(timeout=TIMEOUT) == b"abc"
    timer = _feed_later(stream, b"de")
    assert worker.wait(TIMEOUT) is True
    timer.join()
    assert seen.get(timeout=TIMEOUT) == b"abcde"


def test_consumed_prefix_is_removed(stream, worker):
    seen = queue.Queue()

    def callback(buf):
        seen.put(buf)
        return 2

    worker.set_callback(callback)
    _feed_later(stream, b"wxyz").join()
    assert seen.get(timeout=TIMEOUT) == b"wxyz"
    timer = _feed_later(stream, b"!")
    assert worker.wait(TIMEOUT) is True
    timer.join()
    assert seen.get(timeout=TIMEOUT) == b"yz!"


def test_full_buffer_is_discarded(stream):
    seen = queue.Queue()
    with AsyncWorker(stream, buffer_size=4) as w:
        w.set_callback(lambda buf: seen.put(buf) or 0)
        stream.feed(b"1234")
        assert seen.get(timeout=TIMEOUT) == b"1234"
        stream.feed(b"56")
        assert seen.get(timeout=TIMEOUT) == b"56"


def test_read_error_does_not_stop_reading(stream, worker):
    received = queue.Queue()
    worker.set_raw_data_callback(received.put)
    stream.feed(OSError("transient"))
    stream.feed(b"ok")
    assert received.get(timeout=TIMEOUT) == b"ok"


def test_send_writes_to_stream(stream, worker):
    assert worker.send(b"\xb5\x62\x06\x01") is True
    assert stream.write_event.wait(TIMEOUT)
    assert b"".join(stream.written) == b"\xb5\x62\x06\x01"


def test_send_empty_is_accepted_but_not_written(stream, worker):
    assert worker.send(b"") is True
    assert worker.send(b"x") is True
    assert stream.write_event.wait(TIMEOUT)
    assert stream.written == [b"x"]


def test_send_larger_than_buffer_is_rejected(stream, worker):
    assert worker.send(bytes(65)) is False
    assert worker.send(bytes(64)) is True


def test_wait_returns_true_when_data_arrives(stream, worker):
    timer = _feed_later(stream, b"data")
    assert worker.wait(TIMEOUT) is True
    timer.join()


def test_wait_times_out_without_data(worker):
    assert worker.wait(0.05) is False


def test_is_open_follows_stream(stream):
    w = AsyncWorker(stream, buffer_size=16)
    assert w.is_open() is True
    w.close()
    assert w.is_open() is False
    assert stream.closed is True


def test_close_is_idempotent(stream):
    w = AsyncWorker(stream, buffer_size=16)
    w.close()
    w.close()
    assert stream.closed is True


def test_is_open_uses_is_open_attribute():
    class SerialLike(FakeStream):
        is_open = True

    s = SerialLike()
    with AsyncWorker(s, buffer_size=8) as w:
        assert w.is_open() is True
        s.is_open = False
        assert w.is_open() is False


def test_context_manager_closes_stream(stream):
    with AsyncWorker(stream, buffer_size=16) as w:
        assert w.is_open() is True
    assert stream.closed is True