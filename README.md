# tpzero

A minimal TCP client and server pair that talk a simple binary protocol.
The client reads a configuration file, logs what you type, sends one
message to the server and then sends a package of the lines you enter.
The server accepts one client and logs every message and package it receives.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Running the server

```
tpzero-server [--port PORT] [--log FILE]
```

By default the server listens on TCP port 4444 on all interfaces and logs at
DEBUG level to the console and to `log.log` in the working directory. It
waits for one client and handles its frames until the client disconnects:

- a message frame is logged as `Me llego el mensaje ...`;
- a package frame is logged as `Me llegaron los siguientes valores:` followed
  by one line per value;
- any other operation code is logged as a warning and ignored.

When the client goes away the server logs an error and exits with status 1.

## Running the client

Start the server first, then run the client from a directory holding a
`cliente.config` file of `KEY=VALUE` lines (blank lines and lines starting
with `#` are ignored):

```
IP=127.0.0.1
PUERTO=4444
CLAVE=hello
```

```
tpzero-client [--config FILE] [--log FILE]
```

The client logs at INFO level to the console and to `tp0.log` (or the file
given with `--log`). It then:

1. Logs `Hola! Soy un log` and the value of `CLAVE`.
2. Prompts with `> ` and logs every line you type, up to and including the
   first empty line (or end of input).
3. Connects to `IP`:`PUERTO` and sends the value of `CLAVE` as a message.
4. Prompts again and collects every line you type into a package until an
   empty line or end of input, then sends the package.

If the configuration file cannot be read, or lacks any of `IP`, `PUERTO`
and `CLAVE`, the client logs an error and exits with status 1.

## Wire format

All integers are 32-bit signed, little-endian. Every frame is:

| field      | size         |
|------------|--------------|
| operation  | 4 bytes      |
| size       | 4 bytes      |
| payload    | `size` bytes |

Operation `0` (`OpCode.MESSAGE`) carries one NUL-terminated string.
Operation `1` (`OpCode.PACKAGE`) carries a sequence of values, each stored as
a 4-byte length followed by that many bytes.

## Using the library

```python
from tpzero.protocol import OpCode, Packet, decode_values, encode_message, frame

packet = Packet()
packet.add("first")        # strings get a NUL terminator
packet.add(b"second\0")    # bytes are sent as given
data = packet.serialize()

message = encode_message("hello")
raw = frame(OpCode.MESSAGE, b"hello\0")
values = decode_values(packet.payload)   # [b"first\0", b"second\0"]
```

`decode_values` raises `ValueError` for a truncated or malformed payload.

`tpzero.client` provides `init_logger`, `load_config`, `create_connection`,
`send_message`, `send_packet`, `read_console` and `fill_packet`; the last two
take an optional `reader` callable in place of `input`.

`tpzero.server` provides `start_server`, `wait_client`, `receive_operation`,
`receive_buffer`, `receive_message`, `receive_packet` and `serve`.
`receive_operation` closes the socket and raises `ConnectionError` when the
client has disconnected.

## Limitations

The server handles a single client and stops once it disconnects. The
protocol has no authentication or encryption, and the server sends nothing
back to the client.