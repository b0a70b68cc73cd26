# CRT571/crt571_frames.py
import struct
from dataclasses import dataclass
from typing import Union

from . import bcc
from .crt571_tables import (
    BUFFER_MAX_LENGTH, STX, ETX, CMT, PMT, NEGATIVE_MARKERS,
    error_message, status_name,
)
from .exceptions import DeviceError, FrameError, FrameTooLarge, TruncatedFrame, UnknownResponseType

# Byte offsets shared by both reply layouts: STX ADDR LEN(2) TYPE ...
TYPE_OFFSET = 4
HEADER_LEN = 5

# Positive: ... PMT CM PM ST0 ST1 ST2 DATA ETX BCC
POS_STATUS = slice(7, 10)
POS_DATA_START = 10
POS_MIN_LENGTH = 6

# Negative: ... EMT CM E1 E0 PM DATA ETX BCC
NEG_ERROR_CODE = slice(6, 8)
NEG_DATA_START = 9
NEG_MIN_LENGTH = 5


@dataclass(frozen=True)
class CardStatus:
    st0: int
    st1: int
    st2: int

    @property
    def st0_message(self) -> str:
        return status_name("ST0", self.st0)

    @property
    def st1_message(self) -> str:
        return status_name("ST1", self.st1)

    @property
    def st2_message(self) -> str:
        return status_name("ST2", self.st2)

    @property
    def raw(self) -> bytes:
        return bytes((self.st0, self.st1, self.st2))

    def to_dict(self) -> dict:
        return {
            "st0": self.st0_message,
            "st1": self.st1_message,
            "st2": self.st2_message,
            "raw": self.raw.hex(" ").upper(),
        }


@dataclass(frozen=True)
class PositiveResponse:
    type: int
    length: int
    command: int
    parameter: int
    status: CardStatus
    data: bytes = b""

    ok = True

    def __str__(self) -> str:
        s = self.status
        return (f"CRT-571 positive response: card status:['{s.st0_message}','{s.st1_message}',"
                f"'{s.st2_message}'], data:[{self.data.hex(' ').upper()}]")


@dataclass(frozen=True)
class NegativeResponse:
    type: int
    length: int
    command: int
    parameter: int
    error_code: str
    error_message: str
    data: bytes = b""

    ok = False

    def to_error(self) -> DeviceError:
        return DeviceError(self.error_code, self.error_message, self.data, response=self)

    def __str__(self) -> str:
        return (f"CRT-571 error response: {self.error_message}({self.error_code}), "
                f"data:[{self.data.hex(' ').upper()}]")


Response = Union[PositiveResponse, NegativeResponse]


def encode_request(address: int, command: int, parameter: int, payload: bytes = b"") -> bytes:
    """
    Build one request frame:
        STX ADDR LEN(2, BE) CMT CM PM DATA ETX BCC
    where LEN = len(DATA) + 3 and BCC is the XOR of everything before it.

    Raises FrameTooLarge when LEN would exceed the device buffer size (1024).
    The bound applies to LEN, not to the wire frame: a 1021-byte payload is
    accepted and goes out as 1030 bytes (LEN plus STX, ADDR, LEN itself, ETX, BCC).
    """
    payload = bytes(payload)
    length = len(payload) + 3
    if length > BUFFER_MAX_LENGTH:
        raise FrameTooLarge(length, BUFFER_MAX_LENGTH)

    frame = bytearray([STX, address & 0xFF])
    frame += struct.pack(">H", length)
    frame += bytes([CMT, command & 0xFF, parameter & 0xFF])
    frame += payload
    frame.append(ETX)
    frame.append(bcc.compute(frame))
    return bytes(frame)


def read_length(raw: bytes) -> int:
    """Declared LEN field (bytes 2..3, big-endian)."""
    if len(raw) < 4:
        raise TruncatedFrame(raw, 4)
    return struct.unpack_from(">H", raw, 2)[0]


def _check_frame_end(raw: bytes, data_end: int, frame_end: int) -> None:
    if len(raw) < frame_end:
        raise TruncatedFrame(raw, frame_end)
    if raw[data_end] != ETX:
        raise FrameError(f"Expected ETX at offset {data_end}, got 0x{raw[data_end]:02X}")


def decode_response(raw: bytes) -> Response:
    """
    Interpret a reply buffer (ACK already stripped) as a positive or negative reply.

    The buffer must hold the whole frame the declared length implies, through ETX
    and BCC: a short buffer raises TruncatedFrame, a missing ETX raises FrameError,
    an unknown type byte raises UnknownResponseType. BCC itself is checked by the
    exchange layer.
    """
    raw = bytes(raw)
    if len(raw) > BUFFER_MAX_LENGTH:
        raise FrameTooLarge(len(raw), BUFFER_MAX_LENGTH)
    if len(raw) < HEADER_LEN:
        raise TruncatedFrame(raw, HEADER_LEN)

    length = read_length(raw)
    kind = raw[TYPE_OFFSET]
    # DATA ends at length + 4, then ETX and BCC
    data_end = length + 4
    frame_end = data_end + 2

    if kind == PMT:
        if length < POS_MIN_LENGTH:
            raise TruncatedFrame(raw, POS_DATA_START + 2)
        _check_frame_end(raw, data_end, frame_end)
        st0, st1, st2 = raw[POS_STATUS]
        return PositiveResponse(
            type=kind,
            length=length,
            command=raw[5],
            parameter=raw[6],
            status=CardStatus(st0, st1, st2),
            data=raw[POS_DATA_START:data_end],
        )

    if kind in NEGATIVE_MARKERS:
        if length < NEG_MIN_LENGTH:
            raise TruncatedFrame(raw, NEG_DATA_START + 2)
        _check_frame_end(raw, data_end, frame_end)
        code = raw[NEG_ERROR_CODE].decode("ascii", "replace")
        return NegativeResponse(
            type=kind,
            length=length,
            command=raw[5],
            parameter=raw[8],
            error_code=code,
            error_message=error_message(code),
            data=raw[NEG_DATA_START:data_end],
        )

    raise UnknownResponseType(kind, raw)
