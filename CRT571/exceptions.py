# CRT571/exceptions.py
"""
CRT-571 driver exceptions.

Every failure of an exchange surfaces to the caller as one of these; the
driver never retries on its own.
"""
from typing import Optional


class CRT571Error(Exception):
    """Base class for all dispenser driver errors."""


class TransportError(CRT571Error):
    """Serial I/O failed (port missing, write timeout, read error)."""


class NoAck(CRT571Error):
    """The device did not answer a request frame with ACK."""

    def __init__(self, received: bytes = b""):
        self.received = bytes(received)
        if self.received:
            got = f"0x{self.received[0]:02X}"
        else:
            got = "nothing"
        super().__init__(f"ACK is absent (received {got})")


class ChecksumMismatch(CRT571Error):
    """Recomputed BCC disagrees with the trailing byte of a reply frame."""

    def __init__(self, expected: int, actual: int, frame: bytes = b""):
        self.expected = expected
        self.actual = actual
        self.frame = bytes(frame)
        super().__init__(f"BCC check failed: frame carries 0x{actual:02X}, calculated 0x{expected:02X}")


class FrameTooLarge(CRT571Error):
    """A request or an observed reply exceeds the device buffer size."""

    def __init__(self, size: int, limit: int = 1024):
        self.size = size
        self.limit = limit
        super().__init__(f"Frame of {size} bytes exceeds max packet size {limit}")


class FrameError(CRT571Error):
    """A reply buffer does not match either known reply layout."""


class UnknownResponseType(FrameError):
    def __init__(self, type_byte: int, raw: bytes = b""):
        self.type_byte = type_byte
        self.raw = bytes(raw)
        super().__init__(f"Unknown response type 0x{type_byte:02X}")


class TruncatedFrame(FrameError):
    def __init__(self, raw: bytes = b"", needed: Optional[int] = None):
        self.raw = bytes(raw)
        self.needed = needed
        if needed is None:
            msg = f"Truncated frame ({len(self.raw)} bytes)"
        else:
            msg = f"Truncated frame ({len(self.raw)} bytes, need {needed})"
        super().__init__(msg)


class DeviceError(CRT571Error):
    """The device answered with a well-formed negative reply."""

    def __init__(self, code: str, message: str = "", data: bytes = b"", response=None):
        self.code = code
        self.message = message
        self.data = bytes(data)
        self.response = response
        super().__init__(f"{message or 'Unspecified error'} ({code})")
