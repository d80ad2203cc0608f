"""Client: logs, reads its configuration and console, and sends to the server."""

from __future__ import annotations

import argparse
import logging
import socket
from collections.abc import Callable, Iterator

from .protocol import Packet, encode_message

LOG_FILE = "tp0.log"
LOG_NAME = "cliente"
CONFIG_FILE = "cliente.config"
PROMPT = "> "

Reader = Callable[[str], str]

_FORMAT = "[%(levelname)s] %(asctime)s %(name)s/(%(process)d:%(thread)d): %(message)s"


def init_logger(path: str = LOG_FILE, name: str = LOG_NAME) -> logging.Logger:
    """Create a logger writing at INFO level to a file and to the console."""
    logger = logging.getLogger(name)
    _close_logger(logger)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    formatter = logging.Formatter(_FORMAT)
    for handler in (logging.FileHandler(path, encoding="utf-8"), logging.StreamHandler()):
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


def _close_logger(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def load_config(path: str = CONFIG_FILE) -> dict[str, str]:
    """Read KEY=VALUE lines; blank lines and lines starting with '#' are ignored."""
    config: dict[str, str] = {}
    with open(path, encoding="utf-8") as handle:
        for raw in handle:
            line = raw.rstrip("\r\n")
            if not line or line.startswith("#"):
                continue
            key, sep, value = line.partition("=")
            if sep:
                config[key] = value
    return config


def create_connection(host: str, port: str | int) -> socket.socket:
    """Open a TCP connection to the server."""
    return socket.create_connection((host, int(port)))


def send_message(message: str, sock: socket.socket) -> None:
    """Send a single string as a MESSAGE frame."""
    sock.sendall(encode_message(message))


def send_packet(packet: Packet, sock: socket.socket) -> None:
    """Send a package frame."""
    sock.sendall(packet.serialize())


def _read(reader: Reader | None) -> Iterator[str]:
    read = reader or input
    while True:
        try:
            yield read(PROMPT)
        except EOFError:
            return


def read_console(logger: logging.Logger, reader: Reader | None = None) -> list[str]:
    """Read and log lines until an empty one; return the non-empty lines."""
    lines: list[str] = []
    for line in _read(reader):
        logger.info("Valor leido: %s", line)
        if not line:
            break
        lines.append(line)
    return lines


def fill_packet(reader: Reader | None = None) -> Packet:
    """Read lines until an empty one and gather them in a package."""
    packet = Packet()
    for line in _read(reader):
        if not line:
            break
        packet.add(line)
    return packet


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="tpzero-client", description="Send console lines to the server.")
    parser.add_argument("--config", default=CONFIG_FILE, help="configuration file")
    parser.add_argument("--log", default=LOG_FILE, help="log file")
    args = parser.parse_args(argv)

    logger = init_logger(args.log)
    try:
        logger.info("Hola! Soy un log")
        try:
            config = load_config(args.config)
        except OSError:
            logger.error("¡No se pudo crear el config!")
            return 1

        missing = [key for key in ("IP", "PUERTO", "CLAVE") if key not in config]
        if missing:
            logger.error("Faltan claves en el config: %s", ", ".join(missing))
            return 1
        ip, port, value = config["IP"], config["PUERTO"], config["CLAVE"]
        logger.info("%s", value)

        read_console(logger)

        with create_connection(ip, port) as sock:
            send_message(value, sock)
            send_packet(fill_packet(), sock)
        return 0
    finally:
        _close_logger(logger)


if __name__ == "__main__":
    raise SystemExit(main())