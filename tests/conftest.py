import os
import struct
import tempfile

# Keep test runs from writing into the project log.
os.environ.setdefault("CRT571_LOG_FILE", os.path.join(tempfile.gettempdir(), "crt571-tests.log"))

import pytest

from CRT571 import bcc
from CRT571.crt571_tables import ACK, ETX, PMT, EMT, STX


class FakeTransport:
    """Scripted stand-in for SerialTransport. b"" in `chunks` means end-of-stream."""

    def __init__(self, chunks=()):
        self.chunks = list(chunks)
        self.written = []
        self.timeout = None
        self.opened = False
        self.write_error = None

    def open(self):
        self.opened = True
        return self

    def close(self):
        self.opened = False

    def configure(self, timeout):
        self.timeout = timeout

    def write(self, data):
        if self.write_error:
            raise self.write_error
        self.written.append(bytes(data))
        return len(data)

    def read_chunk(self):
        return self.chunks.pop(0) if self.chunks else b""

    def script(self, *replies):
        """Queue one ACK + reply cycle per reply frame."""
        for reply in replies:
            self.chunks += [bytes([ACK]), b"", reply, b""]


def with_bcc(body: bytes) -> bytes:
    return body + bytes([bcc.compute(body)])


def positive_reply(cm=0x31, pm=0x30, status=b"\x30\x32\x30", data=b"", addr=0x00) -> bytes:
    body = bytes([STX, addr]) + struct.pack(">H", 6 + len(data))
    body += bytes([PMT, cm, pm]) + status + data + bytes([ETX])
    return with_bcc(body)


def negative_reply(cm=0x32, pm=0x39, code=b"10", data=b"", addr=0x00, marker=EMT) -> bytes:
    body = bytes([STX, addr]) + struct.pack(">H", 5 + len(data))
    body += bytes([marker, cm]) + code + bytes([pm]) + data + bytes([ETX])
    return with_bcc(body)


@pytest.fixture
def transport():
    return FakeTransport()
