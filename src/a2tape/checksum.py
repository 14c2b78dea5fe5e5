from __future__ import annotations

from functools import reduce
from operator import xor
from typing import Iterable

from .constants import CHECKSUM_SEED

# The Apple II monitor seeds its running checksum with 0xFF and XORs every
# byte read from tape into it; the transmitted trailer must match.


def update_checksum(checksum: int, data: Iterable[int]) -> int:
    return reduce(xor, data, checksum) & 0xFF


def xor_checksum(data: Iterable[int], seed: int = CHECKSUM_SEED) -> int:
    """Return seed XOR b1 XOR ... XOR bn as a single byte."""
    return update_checksum(seed, data)
