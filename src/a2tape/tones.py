from __future__ import annotations

from enum import Enum
from typing import Iterable, Tuple
import math
import numpy as np
from numpy.typing import NDArray

from .constants import APPLE2, BITS_PER_BYTE, CassetteProfile
from .synth import Tone


class Symbol(Enum):
    ENTRY = "entry"
    TAPE_IN = "tape_in"
    ZERO = "zero"
    ONE = "one"


def byte_to_bits(value: int) -> Tuple[int, ...]:
    """Return the 8 bits of `value`, most significant first."""
    if not 0 <= value <= 0xFF:
        raise ValueError(f"byte value out of range: {value}")
    return tuple((value >> i) & 1 for i in range(BITS_PER_BYTE - 1, -1, -1))


def symbols_for_byte(value: int) -> list[Symbol]:
    return [Symbol.ONE if bit else Symbol.ZERO for bit in byte_to_bits(value)]


class ToneTable:
    """Rendered samples for each protocol symbol of a cassette profile.

    Every bit tone starts at phase 0 and lasts exactly one period, so the
    rendered arrays are position independent and can be rendered once and
    concatenated. The 256 byte patterns are cached the same way.
    """

    def __init__(self, profile: CassetteProfile = APPLE2) -> None:
        self.profile = profile
        self.entry = Tone(profile.entry_period, profile.entry_duration)
        # Sync marker: half a 400 us cycle, then half a 500 us cycle shifted by pi
        self.tape_in = (
            Tone(profile.tape_in_period, profile.tape_in_period // 2),
            Tone(profile.zero_period, profile.zero_period // 2, math.pi),
        )
        self.zero = Tone(profile.zero_period, profile.zero_period)
        self.one = Tone(profile.one_period, profile.one_period)

        self._symbols = {
            Symbol.ENTRY: self.entry.render(),
            Symbol.TAPE_IN: np.concatenate([t.render() for t in self.tape_in]),
            Symbol.ZERO: self.zero.render(),
            Symbol.ONE: self.one.render(),
        }
        self._bytes: dict[int, NDArray[np.uint8]] = {}

    def symbol_samples(self, symbol: Symbol) -> NDArray[np.uint8]:
        return self._symbols[symbol]

    def symbol_duration(self, symbol: Symbol) -> int:
        return int(self._symbols[symbol].size)

    def byte_samples(self, value: int) -> NDArray[np.uint8]:
        """Samples for one byte: 8 bit tones, MSB first, with no gaps."""
        cached = self._bytes.get(value)
        if cached is None:
            cached = np.concatenate([self._symbols[s] for s in symbols_for_byte(value)])
            self._bytes[value] = cached
        return cached

    def bytes_samples(self, data: Iterable[int]) -> NDArray[np.uint8]:
        parts = [self.byte_samples(b) for b in data]
        if not parts:
            return np.zeros(0, dtype=np.uint8)
        return np.concatenate(parts)
