# roamshell

`roamshell` holds the building blocks of a roaming remote shell that keeps two
sides in step over UDP. These are the wire formats for packets and
instruction fragments, zlib compression of payloads, 16-bit wrapping
timestamps, a round-trip-time estimator, port-range parsing, and helpers a
server needs to set up a login session.

The package uses only the standard library and needs Python 3.10 or later.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

| Module | Contents |
| --- | --- |
| `roamshell.timing` | `timestamp()` (monotonic milliseconds), `timestamp16()` (modulo 65536, never `0xFFFF`), `timestamp_diff(tsnew, tsold)` |
| `roamshell.compressor` | `compress(data)`, `uncompress(data)`; both raise `ValueError` past `BUFFER_SIZE` (2048 × 2048 bytes), and `uncompress` also on malformed input |
| `roamshell.packet` | `Direction`, `Packet`, `next_sequence()`, `packet_from_message(nonce, text)` |
| `roamshell.ports` | `parse_port_range(spec)` for `PORT` or `LOW:HIGH`, raising `PortRangeError` |
| `roamshell.rtt` | `RttEstimator` with `update(sample)` and `timeout()` |
| `roamshell.state` | `TimestampedState(timestamp, num, state)` with `copy()` |
| `roamshell.fragment` | `Instruction`, `Fragment`, `FragmentAssembly`, `Fragmenter` |
| `roamshell.server_env` | `parse_timeout`, `ServerTimeouts`, `login_shell`, `child_environment`, `initial_window_size` |
| `roamshell.server_session` | `UtmpEntry`, `print_motd`, `motd_hushed`, `utmp_entry_name`, `find_unattached`, `unattached_warning`, `connect_message`, `chdir_homedir` |

## Examples

Timestamps are 16-bit and wrap:

```python
from roamshell.timing import timestamp_diff

assert timestamp_diff(5, 65530) == 11
```

A packet turns into a nonce and plaintext and back. The top bit of the nonce
gives the direction, and two big-endian 16-bit timestamps come before the
payload:

```python
from roamshell.packet import Direction, Packet, packet_from_message

pkt = Packet(Direction.TO_CLIENT, timestamp=100, timestamp_reply=0xFFFF, payload=b"hi")
nonce, text = pkt.to_message()
back = packet_from_message(nonce, text)
assert back.payload == b"hi" and back.direction is Direction.TO_CLIENT
```

An instruction is compressed and split into fragments that fit an MTU. Each
fragment has a 10-byte header: a 64-bit instruction id, then a 16-bit fragment
number whose high bit marks the last fragment. The fragments are then put back
together:

```python
from roamshell.fragment import FragmentAssembly, Fragmenter, Instruction

inst = Instruction(protocol_version=2, old_num=0, new_num=1, diff=b"x" * 5000)
fragments = Fragmenter().make_fragments(inst, 100)
assembly = FragmentAssembly()
done = [assembly.add_fragment(f) for f in fragments]
assert done[-1] and assembly.get_assembly() == inst
```

Port specifications:

```python
from roamshell.ports import PortRangeError, parse_port_range

assert parse_port_range("60001:60999") == (60001, 60999)
assert parse_port_range("60001") == (60001, 60001)
try:
    parse_port_range("70000")
except PortRangeError as exc:
    print(exc)  # (Low) port number 70000 outside valid range [0..65535]
```

Round-trip time: the first sample sets SRTT to the sample and RTTVAR to half
of it. Later samples are smoothed with weights 1/8 and 1/4, and samples of
5000 ms or more are ignored. The timeout is `ceil(SRTT + 4 * RTTVAR)`,
limited to the range 50–1000 ms:

```python
from roamshell.rtt import RttEstimator

rtt = RttEstimator()
rtt.update(20)
assert rtt.timeout() == 60
```

## Server helpers

- `ServerTimeouts.from_environ()` reads `ROAMSHELL_SERVER_NETWORK_TMOUT`,
  `ROAMSHELL_SERVER_SIGNAL_TMOUT` (both default 0, meaning disabled) and
  `ROAMSHELL_SERVER_NO_CLIENT_TMOUT` (default 60), in seconds. An invalid or
  negative value prints a warning and the default is used.
- `login_shell()` returns the user's shell from `SHELL` or the password
  database (`/bin/sh` if that is empty), with an argv of `-name` so that the
  shell starts as a login shell.
- `child_environment(environ, colors)` sets `TERM` to `xterm-256color` when
  `colors == 256` and to `xterm` otherwise. It also sets
  `NCURSES_NO_UTF8_ACS=1` and removes `STY`.
- `initial_window_size(fd)` returns `(columns, rows)`, or `(80, 24)` when the
  size is unknown.
- `utmp_entry_name()` gives `roamshell [PID]`. `find_unattached` and
  `unattached_warning` pick out and report this user's detached sessions.
- `connect_message(port, key)` returns `ROAMSHELL CONNECT <port> <key>\n`.

## What this package does not do

The package does not open sockets, encrypt datagrams, or run a send/receive
loop that keeps states synchronised. It provides no command-line programs: no
client, no server, and no terminal emulation or display. It supplies the
formats, the estimators and the session helpers that such programs are built
from.