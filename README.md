# gnsslink

Building blocks for talking to u-blox GNSS receivers and feeding them RTK
corrections. It needs Python 3.10 or later and nothing outside the standard
library.

## What is in it

- `gnsslink.ubx`: UBX binary framing. `ubx_checksum` computes the two Fletcher
  checksum bytes, `encode_frame` builds a complete frame, and `scan` finds every
  complete `UbxFrame` in a byte buffer. `scan` returns a named tuple of
  `frames`, `extra` (bytes that were not part of any frame, such as NMEA text)
  and `consumed` (how many leading bytes were used up; an incomplete frame at
  the end is left for later input).
- `gnsslink.callback`: `CallbackHandlers` routes frames to handlers registered
  with `insert(class_id, message_id, decoder, callback)`, waits for a single
  message with `read`, passes NMEA sentences (from `$` to newline) to the
  function given to `set_nmea_callback`, and `read_callback(data)` does all of
  this for a raw buffer and returns the number of bytes consumed.
  `CallbackHandler` is the per-message handler it uses.
- `gnsslink.worker`: `Worker` is the abstract I/O interface; `AsyncWorker`
  reads from and writes to a stream you supply on background threads. The
  stream needs `read(size)`, `write(data)` and `close()`. Received bytes go to
  the functions set with `set_callback` (which returns how many bytes it
  consumed) and `set_raw_data_callback`. `send` queues output and returns
  `False` when the output buffer is too full; `wait` blocks until input is
  processed or the timeout passes; `close` stops the threads. It is also a
  context manager.
- `gnsslink.navpvt`: `NavPvt` decodes and encodes NAV-PVT payloads (84 or 92
  bytes). `nav_pvt_to_fix` builds a `NavSatFix` (with a `FixStatus`),
  `nav_pvt_to_velocity` a `TwistWithCovariance` in east-north-up axes, and
  `fix_diagnostic` returns a `DiagnosticLevel`, a message and a dictionary of
  reported values.
- `gnsslink.diagnostics`: `target_frequency`, `FixDiagnostic` and
  `UbloxTopicDiagnostic` (built with `from_rates` or `from_bounds`) describe the
  frequency and timestamp bounds expected of published topics.
- `gnsslink.utils`: `check_min`, `check_range`, `check_range_all` and
  `check_uint` raise `InvalidSettingsError` (a `ValueError`) on bad settings;
  `to_utc_seconds` converts a UTC calendar date and time to seconds since the
  epoch.
- `gnsslink.gnss`: `Gnss` records which constellations a receiver supports.
- `gnsslink.rtcm`: `Rtcm`, an RTCM message ID and output rate, each checked to
  lie in `[0, 255]`.
- `gnsslink.components`: `ComponentInterface`, the abstract interface for
  device-specific components (`get_params`, `configure`,
  `initialize_diagnostics`, `subscribe`), and `FtsProduct`, whose `configure`
  always returns `False`.
- `gnsslink.ntrip`: `NtripClient` connects to an NTRIP caster once a position
  is known, sends the request built by `build_request` and a GGA sentence from
  `generate_gga`, and passes every chunk of data received to a callback.
  `base64_encode` and `Fix` are helpers it uses.

## Installing

```
pip install .
```

## Examples

Build a UBX frame and find it again in a byte stream:

```python
from gnsslink.ubx import encode_frame, scan

frame = encode_frame(0x0A, 0x04, b"")
result = scan(b"noise" + frame)
print(result.frames)     # [UbxFrame(class_id=10, message_id=4, payload=b'')]
print(result.extra)      # b'noise'
print(result.consumed)   # 13
```

Dispatch frames to a callback:

```python
from gnsslink.callback import CallbackHandlers
from gnsslink.navpvt import NavPvt, nav_pvt_to_fix

handlers = CallbackHandlers()
handlers.insert(
    NavPvt.CLASS_ID, NavPvt.MESSAGE_ID, NavPvt.from_payload,
    lambda m: print(nav_pvt_to_fix(m, frame_id="gps")),
)
handlers.set_nmea_callback(print)
consumed = handlers.read_callback(received_bytes)
```

Track which constellations a receiver supports:

```python
from gnsslink.gnss import Gnss

gnss = Gnss()
gnss.add("GPS")
gnss.is_supported("GPS")   # True
gnss.is_supported("GAL")   # False
```

Validate a setting:

```python
from gnsslink.utils import check_range, InvalidSettingsError

try:
    check_range(300, 0, 255, "rtcm rate")
except InvalidSettingsError as err:
    print(err)   # Invalid settings: rtcm rate must be in range [0, 255].
```

Stream corrections from an NTRIP caster:

```python
from gnsslink.ntrip import Fix, NtripClient

password = "password"
client = NtripClient(
    "caster.example.com", 2101, "MOUNT", "user", password,
    on_rtcm=lambda data: print(len(data), "bytes of RTCM"),
)
client.start()
client.update_fix(Fix(48.1, 11.5, 520.0))
# the connection is opened once the first fix has arrived
client.stop()
```

## Command line

The NTRIP client can be run directly for a fixed position:

```
gnsslink-ntrip --host caster.example.com --port 2101 --mountpoint MOUNT \
    --username user --password password --lat 48.1 --lon 11.5 --alt 520 \
    --output corrections.rtcm
```

`--host`, `--port`, `--lat` and `--lon` are required. `--output` defaults to
`-`, standard output. The command exits with status 1 if the connection fails.
See `gnsslink-ntrip --help`.

## What it does not do

gnsslink does not open serial ports or sockets to a receiver itself: you pass
an already open stream to `AsyncWorker`. It does not encode configuration
messages or drive a receiver's setup, and it has no running node that ties the
pieces together. The only device component provided is `FtsProduct`; other
firmware versions and product categories have no components here. Of the
receiver's message types only NAV-PVT is decoded; for others you supply your
own decoder to `CallbackHandlers.insert`.

## Running the tests

```
pip install .[test]
pytest
```