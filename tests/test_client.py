import logging
import socket
import struct
import threading
from unittest import mock

import pytest

from tpzero.client import (
    create_connection,
    fill_packet,
    init_logger,
    load_config,
    main,
    read_console,
    send_message,
    send_packet,
)
from tpzero.protocol import OpCode, Packet, decode_values, encode_message


def _reader(lines):
    items = iter(lines)

    def read(prompt):
        try:
            return next(items)
        except StopIteration:
            raise EOFError from None

    return read


def _recv_all(sock):
    data = bytearray()
    while chunk := sock.recv(4096):
        data += chunk
    return bytes(data)


def test_init_logger_writes_to_file(tmp_path):
    path = tmp_path / "out.log"
    logger = init_logger(str(path), "test-cliente")
    try:
        logger.info("mensaje de prueba")
        for handler in logger.handlers:
            handler.flush()
        assert "mensaje de prueba" in path.read_text(encoding="utf-8")
        logger.debug("oculto")
        for handler in logger.handlers:
            handler.flush()
        assert "oculto" not in path.read_text(encoding="utf-8")
    finally:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()


def test_load_config_reads_pairs(tmp_path):
    path = tmp_path / "cliente.config"
    path.write_text("# comentario\nIP=127.0.0.1\n\nPUERTO=4444\nCLAVE=a=b\n", encoding="utf-8")
    config = load_config(str(path))
    assert config == {"IP": "127.0.0.1", "PUERTO": "4444", "CLAVE": "a=b"}


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nada.config"))


def test_read_console_stops_at_empty_line(caplog):
    logger = logging.getLogger("test.read_console")
    with caplog.at_level(logging.INFO):
        lines = read_console(logger, _reader(["uno", "dos", "", "tres"]))
    assert lines == ["uno", "dos"]
    assert caplog.messages == ["Valor leido: uno", "Valor leido: dos", "Valor leido: "]


def test_read_console_stops_at_eof():
    logger = logging.getLogger("test.read_console_eof")
    assert read_console(logger, _reader(["solo"])) == ["solo"]


def test_fill_packet_collects_lines():
    packet = fill_packet(_reader(["a", "bc", "", "ignorado"]))
    assert packet.op_code == OpCode.PACKAGE
    assert decode_values(packet.payload) == [b"a\0", b"bc\0"]


def test_send_message_over_socket():
    left, right = socket.socketpair()
    with left, right:
        send_message("hola", left)
        left.shutdown(socket.SHUT_WR)
        assert _recv_all(right) == encode_message("hola")


def test_send_packet_over_socket():
    packet = Packet()
    packet.add("x")
    left, right = socket.socketpair()
    with left, right:
        send_packet(packet, left)
        left.shutdown(socket.SHUT_WR)
        assert _recv_all(right) == packet.serialize()


def test_create_connection_reaches_listener():
    with socket.create_server(("127.0.0.1", 0)) as listener:
        port = listener.getsockname()[1]
        with create_connection("127.0.0.1", str(port)) as sock:
            assert sock.getpeername() == ("127.0.0.1", port)
            conn, _ = listener.accept()
            with conn:
                assert conn.getpeername() == sock.getsockname()
                sock.sendall(b"ping")
                assert conn.recv(4) == b"ping"


def test_main_without_config_fails(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert main([]) == 1
    assert "No se pudo crear el config" in (tmp_path / "tp0.log").read_text(encoding="utf-8")


def test_main_sends_message_and_packet(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    received = bytearray()
    with socket.create_server(("127.0.0.1", 0)) as listener:
        port = listener.getsockname()[1]
        (tmp_path / "cliente.config").write_text(
            f"IP=127.0.0.1\nPUERTO={port}\nCLAVE=hola\n", encoding="utf-8"
        )

        def accept():
            conn, _ = listener.accept()
            with conn:
                received.extend(_recv_all(conn))

        thread = threading.Thread(target=accept)
        thread.start()
        with mock.patch("builtins.input", side_effect=["linea", "", "a", "b", ""]):
            result = main([])
        thread.join(timeout=5)

    expected_packet = Packet()
    expected_packet.add("a")
    expected_packet.add("b")
    assert result == 0
    assert bytes(received) == encode_message("hola") + expected_packet.serialize()
    op, size = struct.unpack_from("<ii", received)
    assert op == OpCode.MESSAGE
    log_text = (tmp_path / "tp0.log").read_text(encoding="utf-8")
    assert "Hola! Soy un log" in log_text
    assert "Valor leido: linea" in log_text