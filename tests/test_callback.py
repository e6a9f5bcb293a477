import struct
import threading

from gnsslink.callback import CallbackHandler, CallbackHandlers
from gnsslink.ubx import UbxFrame, encode_frame


def _decode_u16(payload):
    (value,) = struct.unpack("<H", payload)
    return value


def test_handler_decodes_and_calls_back():
    received = []
    handler = CallbackHandler(_decode_u16, received.append)
    handler.handle(UbxFrame(1, 2, struct.pack("<H", 513)))
    assert received == [513]
    assert handler.get() == 513


def test_handler_decode_failure_keeps_previous():
    handler = CallbackHandler(_decode_u16)
    handler.handle(UbxFrame(1, 2, struct.pack("<H", 7)))
    handler.handle(UbxFrame(1, 2, b"\x01"))
    assert handler.get() == 7


def test_handler_wait_times_out():
    handler = CallbackHandler(_decode_u16)
    assert handler.wait(0.01) is False


def test_handler_wait_woken_by_failed_decode():
    handler = CallbackHandler(_decode_u16)
    timer = threading.Timer(0.05, handler.handle, args=(UbxFrame(1, 2, b""),))
    timer.start()
    try:
        assert handler.wait(2.0) is True
    finally:
        timer.join()
    assert handler.get() is None


def test_read_callback_dispatches_by_key():
    handlers = CallbackHandlers(debug=1)
    first, second = [], []
    handlers.insert(1, 2, _decode_u16, first.append)
    handlers.insert(1, 3, _decode_u16, second.append)
    data = encode_frame(1, 2, struct.pack("<H", 10)) + encode_frame(1, 3, struct.pack("<H", 20))
    assert handlers.read_callback(data) == len(data)
    assert first == [10]
    assert second == [20]


def test_multiple_handlers_same_key():
    handlers = CallbackHandlers(debug=1)
    seen = []
    handlers.insert(5, 1, _decode_u16, lambda v: seen.append(("a", v)))
    handlers.insert(5, 1, _decode_u16, lambda v: seen.append(("b", v)))
    handlers.read_callback(encode_frame(5, 1, struct.pack("<H", 3)))
    assert seen == [("a", 3), ("b", 3)]


def test_read_callback_leaves_partial_frame():
    handlers = CallbackHandlers(debug=3)
    frame = encode_frame(1, 2, struct.pack("<H", 1))
    data = frame + frame[:5]
    assert handlers.read_callback(data) == len(frame)


def test_handle_nmea_splits_sentences():
    handlers = CallbackHandlers(debug=1)
    sentences = []
    handlers.set_nmea_callback(sentences.append)
    handlers.handle_nmea(b"junk$GPGGA,a*00\r\n$GPRMC,b*11\r\n$GPVTG,partial")
    assert sentences == ["$GPGGA,a*00\r\n", "$GPRMC,b*11\r\n"]


def test_read_callback_passes_nmea_between_frames():
    handlers = CallbackHandlers(debug=1)
    sentences = []
    handlers.set_nmea_callback(sentences.append)
    data = encode_frame(1, 2) + b"$GPGSA,x\n" + encode_frame(1, 2)
    handlers.read_callback(data)
    assert sentences == ["$GPGSA,x\n"]


def test_read_times_out_without_message():
    handlers = CallbackHandlers(debug=1)
    assert handlers.read(1, 2, _decode_u16, timeout=0.01) is None


def test_read_returns_message_from_stream():
    handlers = CallbackHandlers(debug=1)
    stop = threading.Event()
    data = encode_frame(1, 2, struct.pack("<H", 42))

    def feed():
        while not stop.wait(0.01):
            handlers.read_callback(data)

    thread = threading.Thread(target=feed)
    thread.start()
    try:
        result = handlers.read(1, 2, _decode_u16, timeout=2.0)
    finally:
        stop.set()
        thread.join()
    assert result == 42


def test_read_removes_its_handler():
    handlers = CallbackHandlers(debug=1)
    handlers.read(1, 2, _decode_u16, timeout=0.01)
    seen = []
    handlers.insert(1, 2, _decode_u16, seen.append)
    handlers.read_callback(encode_frame(1, 2, struct.pack("<H", 9)))
    assert seen == [9]