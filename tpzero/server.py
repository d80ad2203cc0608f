"""Server: accepts one client and logs the messages and packages it sends."""

from __future__ import annotations

import argparse
import logging
import socket

from .protocol import INT_SIZE, OpCode, decode_values

PORT = 4444
LOG_FILE = "log.log"
LOG_NAME = "Servidor"

log = logging.getLogger(LOG_NAME)

_FORMAT = "[%(levelname)s] %(asctime)s %(name)s/(%(process)d:%(thread)d): %(message)s"


def _recv_exact(sock: socket.socket, size: int) -> bytes:
    data = bytearray()
    while len(data) < size:
        chunk = sock.recv(size - len(data))
        if not chunk:
            raise ConnectionError("the client closed the connection")
        data += chunk
    return bytes(data)


def _recv_int(sock: socket.socket) -> int:
    return int.from_bytes(_recv_exact(sock, INT_SIZE), "little", signed=True)


def _c_string(data: bytes) -> str:
    return data.split(b"\0", 1)[0].decode("utf-8", errors="replace")


def start_server(port: int = PORT) -> socket.socket:
    """Open a listening TCP socket on every interface."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        reuse = getattr(socket, "SO_REUSEPORT", socket.SO_REUSEADDR)
        sock.setsockopt(socket.SOL_SOCKET, reuse, 1)
        sock.bind(("", port))
        sock.listen(socket.SOMAXCONN)
    except OSError:
        sock.close()
        raise
    log.debug("Listo para escuchar a mi cliente")
    return sock


def wait_client(server_sock: socket.socket) -> socket.socket:
    """Accept one client connection."""
    client_sock, _ = server_sock.accept()
    log.info("Se conecto un cliente!")
    return client_sock


def receive_operation(sock: socket.socket) -> int:
    """Read an operation code; close the socket and raise if the client left."""
    try:
        return _recv_int(sock)
    except ConnectionError:
        sock.close()
        raise


def receive_buffer(sock: socket.socket) -> bytes:
    """Read a size-prefixed payload."""
    size = _recv_int(sock)
    if size < 0:
        raise ValueError(f"negative payload size {size}")
    return _recv_exact(sock, size)


def receive_message(sock: socket.socket) -> str:
    """Read and log a MESSAGE payload."""
    message = _c_string(receive_buffer(sock))
    log.info("Me llego el mensaje %s", message)
    return message


def receive_packet(sock: socket.socket) -> list[str]:
    """Read a package payload and return its values as strings."""
    return [_c_string(value) for value in decode_values(receive_buffer(sock))]


def serve(client_sock: socket.socket, logger: logging.Logger | None = None) -> int:
    """Handle frames until the client disconnects; return the exit status."""
    logger = logger or log
    while True:
        try:
            op = receive_operation(client_sock)
            if op == OpCode.MESSAGE:
                receive_message(client_sock)
            elif op == OpCode.PACKAGE:
                values = receive_packet(client_sock)
                logger.info("Me llegaron los siguientes valores:\n")
                for value in values:
                    logger.info("%s", value)
            else:
                logger.warning("Operacion desconocida. No quieras meter la pata")
        except ConnectionError:
            logger.error("el cliente se desconecto. Terminando servidor")
            return 1


def _setup_logging(path: str) -> None:
    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()
    log.setLevel(logging.DEBUG)
    log.propagate = False
    formatter = logging.Formatter(_FORMAT)
    for handler in (logging.FileHandler(path, encoding="utf-8"), logging.StreamHandler()):
        handler.setFormatter(formatter)
        log.addHandler(handler)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="tpzero-server", description="Receive messages from one client.")
    parser.add_argument("--port", type=int, default=PORT, help="port to listen on")
    parser.add_argument("--log", default=LOG_FILE, help="log file")
    args = parser.parse_args(argv)

    _setup_logging(args.log)
    with start_server(args.port) as server_sock:
        log.info("Servidor listo para recibir al cliente")
        with wait_client(server_sock) as client_sock:
            return serve(client_sock, log)


if __name__ == "__main__":
    raise SystemExit(main())