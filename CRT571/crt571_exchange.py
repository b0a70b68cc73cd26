# CRT571/crt571_exchange.py
import threading
from enum import Enum

from logger import get_logger, hexdump
from . import bcc
from .crt571_tables import ACK, BUFFER_MAX_LENGTH
from .exceptions import (
    ChecksumMismatch, FrameError, FrameTooLarge, NoAck, TransportError, TruncatedFrame,
)

logger = get_logger(__name__)


class ExchangeState(Enum):
    IDLE = "idle"
    SENT = "sent"
    AWAITING_ACK = "awaiting_ack"
    ACK_RECEIVED = "ack_received"
    AWAITING_REPLY = "awaiting_reply"
    REPLY_RECEIVED = "reply_received"
    DONE = "done"
    # failure exits
    NO_ACK = "no_ack"
    TRANSPORT_ERROR = "transport_error"
    DECODE_ERROR = "decode_error"


def read_until_quiet(transport, limit: int = BUFFER_MAX_LENGTH) -> bytes:
    """
    Accumulate chunks from `transport.read_chunk()` until it reports end-of-stream
    (an empty chunk after its timeout window). Used for both the ACK and the reply phase.
    """
    buf = bytearray()
    while True:
        chunk = transport.read_chunk()
        if not chunk:
            logger.debug(f"read: EOF after {len(buf)} bytes")
            break
        buf += chunk
        logger.debug(f"read: chunk:[{hexdump(chunk)}] total:{len(buf)}")
        if len(buf) > limit:
            raise FrameTooLarge(len(buf), limit)
    return bytes(buf)


class Exchange:
    """
    One request/reply cycle with the CRT-571:

        write frame -> read ACK (reply may be coalesced) -> read reply
        -> verify BCC -> write ACK -> hand back the raw reply

    strict_checksum
        True: a bad reply BCC raises ChecksumMismatch and the reply is not acknowledged.
        False: the mismatch is logged and the exchange carries on (legacy behaviour).

    The cycle is strictly half-duplex; a second run() while one is in flight is refused.
    """

    def __init__(self, transport, strict_checksum: bool = True):
        self.transport = transport
        self.strict_checksum = strict_checksum
        self.state = ExchangeState.IDLE
        self._lock = threading.Lock()

    def run(self, frame: bytes) -> bytes:
        if not self._lock.acquire(blocking=False):
            raise RuntimeError("CRT-571 exchange already in progress (half-duplex)")
        try:
            self.state = ExchangeState.IDLE
            return self._run(bytes(frame))
        except TransportError:
            self.state = ExchangeState.TRANSPORT_ERROR
            raise
        except NoAck:
            self.state = ExchangeState.NO_ACK
            raise
        except (FrameError, FrameTooLarge, ChecksumMismatch):
            self.state = ExchangeState.DECODE_ERROR
            raise
        finally:
            self._lock.release()

    def _run(self, frame: bytes) -> bytes:
        logger.info(f"exchange: write data:[{hexdump(frame)}] len:{len(frame)}")
        self.transport.write(frame)
        self.state = ExchangeState.SENT

        self.state = ExchangeState.AWAITING_ACK
        # The reply may ride along with the ACK byte, so allow one extra byte here.
        ack = read_until_quiet(self.transport, limit=BUFFER_MAX_LENGTH + 1)
        logger.info(f"exchange: read ACK data:[{hexdump(ack)}]")
        if not ack or ack[0] != ACK:
            logger.error("exchange: ACK is absent")
            raise NoAck(ack)
        self.state = ExchangeState.ACK_RECEIVED

        self.state = ExchangeState.AWAITING_REPLY
        if len(ack) > 1:
            # ACK and reply arrived in the same read.
            reply = ack[1:]
        else:
            reply = read_until_quiet(self.transport)
        logger.info(f"exchange: read response data:[{hexdump(reply)}] len:{len(reply)}")
        if not reply:
            raise TruncatedFrame(reply)

        self._check_bcc(reply)
        self.state = ExchangeState.REPLY_RECEIVED

        self.transport.write(bytes([ACK]))
        logger.info("exchange: wrote ACK")
        self.state = ExchangeState.DONE
        return reply

    def _check_bcc(self, reply: bytes) -> None:
        body, trailer = reply[:-1], reply[-1]
        if bcc.verify(trailer, body):
            logger.info("exchange: BCC response check success")
            return
        err = ChecksumMismatch(bcc.compute(body), trailer, reply)
        if self.strict_checksum:
            logger.error(f"exchange: {err}")
            raise err
        logger.warning(f"exchange: {err} (lenient mode, continuing)")
