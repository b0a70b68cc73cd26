# CRT571/serial_transport.py
import time
from typing import Optional

import serial

from logger import get_logger, hexdump
from .exceptions import TransportError

logger = get_logger(__name__)


class SerialTransport:
    """
    Thin pyserial wrapper giving the exchange layer the three primitives it needs:
    write(), read_chunk() (b"" means nothing arrived within the timeout window)
    and configure(timeout).

    The port is 8N1 without flow control; the read timeout is the inter-chunk
    silence after which a reply is considered complete.
    """

    WRITE_TIMEOUT_S = 0.5
    SETTLE_S = 0.02
    CHUNK_SIZE = 256

    def __init__(self, port: str, baud: int = 9600, timeout: float = 0.1):
        self.port = port
        self.baud = baud
        self.timeout = timeout
        self.ser: Optional[serial.Serial] = None

    # ---------- lifecycle ----------
    def open(self):
        try:
            # serial_for_url also accepts plain device names, and "loop://" for bench tests
            self.ser = serial.serial_for_url(
                self.port, baudrate=self.baud,
                bytesize=serial.EIGHTBITS, parity=serial.PARITY_NONE, stopbits=serial.STOPBITS_ONE,
                timeout=self.timeout, write_timeout=self.WRITE_TIMEOUT_S,
                rtscts=False, dsrdtr=False, xonxoff=False
            )
        except (serial.SerialException, ValueError) as exc:
            raise TransportError(f"Error opening port {self.port!r}: {exc}") from exc

        # Drop stale bytes left over from a previous session.
        self.reset_input_buffer()
        time.sleep(self.SETTLE_S)
        logger.info(f"Opened {self.port} @ {self.baud} bps, read timeout {self.timeout:.3f}s")
        return self

    def close(self):
        if self.ser:
            self.ser.close()
            self.ser = None
            logger.info(f"Closed {self.port}")

    @property
    def is_open(self) -> bool:
        return bool(self.ser and self.ser.is_open)

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # ---------- primitives ----------
    def configure(self, timeout: float) -> None:
        self.timeout = timeout
        if self.ser:
            self.ser.timeout = timeout

    def write(self, data: bytes) -> int:
        ser = self._require_open()
        try:
            written = ser.write(data)
            ser.flush()
        except serial.SerialException as exc:  # includes SerialTimeoutException
            raise TransportError(f"Write error: {exc}") from exc
        if written is not None and written != len(data):
            raise TransportError(f"Short write: {written} of {len(data)} bytes")
        logger.debug(f"write: [{hexdump(data)}]")
        return len(data)

    def read_chunk(self) -> bytes:
        ser = self._require_open()
        try:
            # Take what is already buffered, otherwise wait up to `timeout` for more.
            chunk = ser.read(ser.in_waiting or self.CHUNK_SIZE)
        except serial.SerialException as exc:
            raise TransportError(f"Read error: {exc}") from exc
        return bytes(chunk)

    def reset_input_buffer(self) -> None:
        ser = self._require_open()
        try:
            ser.reset_input_buffer()
        except serial.SerialException as exc:
            raise TransportError(f"Could not flush input: {exc}") from exc

    def _require_open(self) -> serial.Serial:
        if not self.is_open:
            raise TransportError("Serial port is not open.")
        return self.ser
