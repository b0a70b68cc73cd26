import logging
import logging.handlers
import os
import json
from typing import Any, Dict

# Log file lives in the project root unless CRT571_LOG_FILE points elsewhere
LOG_FILE = os.environ.get(
    "CRT571_LOG_FILE",
    os.path.join(os.path.dirname(os.path.abspath(__file__)), 'crt571.log'),
)

MAX_BYTES = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 3

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    handlers=[
        logging.handlers.RotatingFileHandler(
            LOG_FILE, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT, encoding='utf-8'
        ),
        logging.StreamHandler()
    ]
)

# pyserial URL handlers (loop://, socket://) log under "pySerial"
logging.getLogger("pySerial").setLevel(logging.WARNING)

def purge_log() -> None:
    """Truncate the log file."""
    with open(LOG_FILE, "w", encoding="utf-8"):
        pass

def get_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name."""
    return logging.getLogger(name)


def hexdump(data: bytes) -> str:
    """Render bytes the way frames are logged: 'F2 00 00 03 ...'."""
    return bytes(data).hex(" ").upper()


def log_json(logger: logging.Logger, level: int, payload: Dict[str, Any]) -> None:
    """
    Helper to emit one *single-line* JSON object at the chosen log level.
    """
    logger.log(level, json.dumps(payload, separators=(",", ":")))
