"""SerialTransport against pyserial's built-in loop:// device."""

import pytest

from CRT571.crt571_exchange import read_until_quiet
from CRT571.exceptions import TransportError
from CRT571.serial_transport import SerialTransport


@pytest.fixture
def loop():
    transport = SerialTransport("loop://", 9600, timeout=0.05).open()
    yield transport
    transport.close()


def test_write_then_read_back(loop):
    assert loop.write(b"\x06\xf2\x00") == 3
    assert read_until_quiet(loop) == b"\x06\xf2\x00"


def test_read_on_silent_line_is_end_of_stream(loop):
    assert loop.read_chunk() == b""


def test_configure_updates_open_port(loop):
    loop.configure(0.02)
    assert loop.ser.timeout == 0.02


def test_context_manager_closes():
    with SerialTransport("loop://", timeout=0.01) as transport:
        assert transport.is_open
    assert not transport.is_open


def test_use_before_open_raises():
    transport = SerialTransport("loop://")
    with pytest.raises(TransportError):
        transport.write(b"\x06")
    with pytest.raises(TransportError):
        transport.read_chunk()


def test_open_missing_port_raises_transport_error():
    with pytest.raises(TransportError):
        SerialTransport("/dev/does-not-exist-crt571").open()
