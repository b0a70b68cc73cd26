# CRT571/bcc.py
"""Block check character (BCC) used by every CRT-571 frame: a running XOR."""
from functools import reduce
from operator import xor
from typing import Iterable

from logger import get_logger, hexdump

logger = get_logger(__name__)


def compute(data: Iterable[int]) -> int:
    """XOR of every byte in transmission order. Empty input gives 0."""
    return reduce(xor, bytes(data), 0)


def verify(candidate: int, data: bytes) -> bool:
    calculated = compute(data)
    logger.debug(f"bcc verify: data:[{hexdump(data)}] bcc:{candidate:02X} calculated:{calculated:02X}")
    return candidate == calculated
