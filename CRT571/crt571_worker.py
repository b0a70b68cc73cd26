# CRT571/crt571_worker.py
from __future__ import annotations
from typing import Optional

from PySide6.QtCore import QObject, QThread, Signal, Slot, Qt

from logger import get_logger
from .crt571_core import CRT571Dispenser
from .exceptions import CRT571Error, DeviceError

logger = get_logger(__name__)


class CRT571Worker(QObject):
    """
    Qt front end that owns a CRT571Dispenser on its own QThread.

    Requests from any thread go through submit(); they are delivered to _execute()
    over a queued connection, so the worker thread runs exactly one exchange at a
    time, in submission order. The dispenser itself is never touched concurrently.
    """

    # ---- Signals you can wire to your UI ----
    started = Signal()
    stopped = Signal()
    status = Signal(dict)            # CardStatus.to_dict() after start()
    response = Signal(object)        # PositiveResponse
    failed = Signal(str, object)     # (message, exception)
    error = Signal(str)

    _request = Signal(int, int, object)

    def __init__(self, dispenser: CRT571Dispenser, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._dispenser = dispenser
        self._thread: Optional[QThread] = None
        self._running = False
        self._busy = False

        self._dispenser.on_error = self.error.emit
        self._request.connect(self._execute, Qt.ConnectionType.QueuedConnection)

    @property
    def busy(self) -> bool:
        """Best-effort hint only: set on the worker thread and read unsynchronized elsewhere."""
        return self._busy

    @property
    def running(self) -> bool:
        return self._running

    # ----- Public API (thread-safe from main thread) -----
    @Slot()
    def start(self):
        if self._running:
            return
        self._running = True

        self._thread = QThread()
        self.moveToThread(self._thread)
        self._thread.started.connect(self._on_thread_started)
        self._thread.start()

    @Slot()
    def stop(self):
        """Finish the exchange in flight, stop the thread, then close the port."""
        self._running = False
        if self._thread:
            self._thread.quit()
            self._thread.wait()
            self._thread = None
        self._close()
        self.stopped.emit()

    def _close(self):
        try:
            self._dispenser.disconnect()
        except CRT571Error as e:
            self.error.emit(f"CRT571Worker disconnect error: {e}")

    def submit(self, command: int, parameter: int, data: bytes = b"") -> None:
        """Queue one request; the result arrives via `response` or `failed`."""
        if not self._running:
            self.failed.emit("CRT571Worker is not running", None)
            return
        self._request.emit(command, parameter, bytes(data))

    # ----- Private: lives on the worker thread -----
    @Slot()
    def _on_thread_started(self):
        try:
            self._dispenser.connect()
            self.status.emit(self._dispenser.status().to_dict())
            self.started.emit()
        except CRT571Error as e:
            self.error.emit(f"CRT571Worker start failed: {e}")
            # Can't wait() on our own thread here; just let it wind down.
            self._running = False
            self._close()
            if self._thread:
                self._thread.quit()
            self.stopped.emit()

    @Slot(int, int, object)
    def _execute(self, command: int, parameter: int, data: bytes):
        self._busy = True
        try:
            result = self._dispenser.request(command, parameter, data)
        except DeviceError as e:
            logger.warning(f"[CRT571] device error {e.code}: {e.message}")
            self.failed.emit(str(e), e)
        except CRT571Error as e:
            logger.error(f"[CRT571] {type(e).__name__}: {e}")
            self.failed.emit(str(e), e)
        else:
            self.response.emit(result)
        finally:
            self._busy = False
