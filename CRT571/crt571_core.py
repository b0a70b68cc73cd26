# CRT571/crt571_core.py
from typing import Callable, Optional

from logger import get_logger, hexdump
from . import crt571_tables as T
from .crt571_exchange import Exchange
from .crt571_frames import CardStatus, NegativeResponse, PositiveResponse, decode_response, encode_request
from .exceptions import CRT571Error
from .serial_transport import SerialTransport

logger = get_logger(__name__)


class CRT571Dispenser:
    """
    Synchronous client for the CRT-571 card dispenser / reader.

    Design notes:
    - One instance owns one serial transport; every call blocks until the exchange
      completes or fails. Callers that share a dispenser across threads must
      serialize access themselves (see CRT571Worker).
    - Every operation is encode -> exchange -> decode. Positive replies are returned,
      negative replies raise DeviceError, everything else raises the matching
      CRT571Error subclass. Nothing is retried here.
    - Optional `on_status` / `on_error` callbacks mirror the log for UI/CLI hooks.
    """

    def __init__(self, port: str, baud: int = 9600, *, address: int = 0x00,
                 read_timeout: float = 0.1, strict_checksum: bool = True,
                 transport=None):
        """
        Parameters
        ----------
        port : str
            OS serial device name (e.g. 'COM3' or '/dev/ttyUSB0').
        baud : int, default 9600
            Line speed configured on the dispenser DIP switches.
        address : int, default 0x00
            Protocol address byte placed in every request frame.
        read_timeout : float, default 0.1
            Seconds of line silence after which a read phase is considered complete.
        strict_checksum : bool, default True
            Reject replies with a bad BCC. Set False to only log the mismatch,
            which is how older host software behaved.
        transport : optional
            Anything with open()/close()/write()/read_chunk()/configure(); defaults to SerialTransport.
        """
        self.port = port
        self.baud = baud
        self.address = address & 0xFF
        self.read_timeout = read_timeout

        self.transport = transport or SerialTransport(port, baud, read_timeout)
        self.transport.configure(read_timeout)
        self._exchange = Exchange(self.transport, strict_checksum=strict_checksum)

        self.on_status: Optional[Callable[[str], None]] = None
        self.on_error: Optional[Callable[[str], None]] = None

    @classmethod
    def from_config(cls, cfg, transport=None) -> "CRT571Dispenser":
        return cls(
            cfg.crt571_port_name,
            cfg.crt571_baud_rate,
            address=cfg.crt571_address,
            read_timeout=cfg.crt571_read_timeout,
            strict_checksum=cfg.crt571_strict_checksum,
            transport=transport,
        )

    # ---------- lifecycle ----------
    def connect(self):
        self.transport.open()
        self._status(f"Connected to {self.port} @ {self.baud} bps (address 0x{self.address:02X})")
        return self

    def disconnect(self):
        self.transport.close()
        self._status("Disconnected.")

    def __enter__(self):
        return self.connect()

    def __exit__(self, exc_type, exc, tb):
        self.disconnect()

    @property
    def strict_checksum(self) -> bool:
        return self._exchange.strict_checksum

    @strict_checksum.setter
    def strict_checksum(self, value: bool):
        self._exchange.strict_checksum = bool(value)

    @property
    def state(self):
        """State of the last (or current) exchange."""
        return self._exchange.state

    # ---------- core request ----------
    def request(self, command: int, parameter: int, data: bytes = b"") -> PositiveResponse:
        label = T.describe_command(command, parameter)
        logger.info(f"request: [{label}] CM:{command:02X} PM:{parameter:02X} data:[{hexdump(data)}]")
        try:
            frame = encode_request(self.address, command, parameter, data)
            response = decode_response(self._exchange.run(frame))
        except CRT571Error as exc:
            self._error(f"[{label}] {exc}")
            raise

        if isinstance(response, NegativeResponse):
            logger.error(f"request: [{label}] negative response {response.error_code}: "
                         f"{response.error_message or 'unspecified'} data:[{hexdump(response.data)}]")
            err = response.to_error()
            self._error(f"[{label}] {err}")
            raise err

        st = response.status
        logger.info(f"request: [{label}] card status:[{hexdump(st.raw)}]="
                    f"[{st.st0_message};{st.st1_message};{st.st2_message}] data:[{hexdump(response.data)}]")
        return response

    def command(self, command: int, parameter: int) -> PositiveResponse:
        """Send a data-less command."""
        return self.request(command, parameter)

    # ---------- one operation per command family ----------
    def initialize(self, parameter: int = T.PM_INITIALIZE_MOVE_CARD) -> PositiveResponse:
        return self.request(T.CM_INITIALIZE, parameter)

    def status_request(self, parameter: int = T.PM_STATUS_DEVICE) -> PositiveResponse:
        return self.request(T.CM_STATUS_REQUEST, parameter)

    def card_move(self, parameter: int = T.PM_CARD_MOVE_GATE) -> PositiveResponse:
        return self.request(T.CM_CARD_MOVE, parameter)

    def card_entry(self, parameter: int = T.PM_CARD_ENTRY_DISABLE) -> PositiveResponse:
        return self.request(T.CM_CARD_ENTRY, parameter)

    def card_type(self, parameter: int = T.PM_CARD_TYPE_IC) -> PositiveResponse:
        return self.request(T.CM_CARD_TYPE, parameter)

    def cpu_card(self, parameter: int, data: bytes = b"") -> PositiveResponse:
        return self.request(T.CM_CPUCARD_CONTROL, parameter, data)

    def sam_card(self, parameter: int, data: bytes = b"") -> PositiveResponse:
        return self.request(T.CM_SAMCARD_CONTROL, parameter, data)

    def sle4442_4428_card(self, parameter: int, data: bytes = b"") -> PositiveResponse:
        return self.request(T.CM_SLE4442_4428_CARD_CONTROL, parameter, data)

    def memory_card(self, parameter: int, data: bytes = b"") -> PositiveResponse:
        return self.request(T.CM_IIC_MEMORYCARD, parameter, data)

    def rf_card(self, parameter: int, data: bytes = b"") -> PositiveResponse:
        return self.request(T.CM_RFCARD_CONTROL, parameter, data)

    def card_serial_number(self) -> PositiveResponse:
        return self.request(T.CM_CARD_SERIAL_NUMBER, T.PM_CARD_SERIAL_NUMBER_READ)

    def read_card_config(self) -> PositiveResponse:
        return self.request(T.CM_READ_CARD_CONFIG, T.PM_READ_CARD_CONFIG)

    def read_version(self) -> PositiveResponse:
        return self.request(T.CM_READ_CRT571_VERSION, T.PM_READ_CRT571_VERSION)

    def recycle_bin_counter(self, parameter: int = T.PM_RECYCLEBIN_COUNTER_READ) -> PositiveResponse:
        return self.request(T.CM_RECYCLEBIN_COUNTER, parameter)

    # ---------- high-level one-liners ----------
    def status(self) -> CardStatus:
        return self.status_request(T.PM_STATUS_DEVICE).status

    def dispense(self) -> PositiveResponse:
        """Move the card at the read position (or from the stacker) out to the gate."""
        return self.card_move(T.PM_CARD_MOVE_GATE)

    def capture(self) -> PositiveResponse:
        """Retain the card in the error card bin."""
        return self.card_move(T.PM_CARD_MOVE_ERROR_BIN)

    def version_string(self) -> str:
        return self.read_version().data.decode("ascii", "ignore").strip()

    # --- small helpers ---
    def _status(self, msg: str):
        logger.info(msg)
        if self.on_status:
            self.on_status(msg)

    def _error(self, msg: str):
        if self.on_error:
            self.on_error(msg)
