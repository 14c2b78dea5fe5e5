from __future__ import annotations

from enum import Enum
from typing import Iterable, Iterator, List, Optional, Union
import logging
import numpy as np
from numpy.typing import NDArray

from .checksum import update_checksum
from .constants import APPLE2, BITS_PER_BYTE, CassetteProfile
from .errors import EncoderStateError
from .tones import Symbol, ToneTable, symbols_for_byte

logger = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray, memoryview]


class EncoderState(Enum):
    PREAMBLE = "preamble"
    PAYLOAD = "payload"
    TRAILER = "trailer"


class TapeEncoder:
    """Turn a byte stream into cassette samples, one chunk at a time.

    The steps must be called in order: preamble() once, feed() any number of
    times, then finish() once. Each returns the uint8 samples for that part
    of the recording. The trailer byte is the running XOR checksum, so it can
    only be produced after the last payload byte has been fed.

        enc = TapeEncoder()
        out = [enc.preamble()]
        for chunk in chunks:
            out.append(enc.feed(chunk))
        out.append(enc.finish())
    """

    def __init__(self, profile: CassetteProfile = APPLE2, table: ToneTable | None = None) -> None:
        self.profile = profile
        self.table = table if table is not None else ToneTable(profile)
        self._state = EncoderState.PREAMBLE
        self._checksum = profile.checksum_seed
        self._count = 0

    @property
    def state(self) -> EncoderState:
        return self._state

    @property
    def checksum(self) -> int:
        return self._checksum

    @property
    def bytes_encoded(self) -> int:
        return self._count

    def _expect(self, state: EncoderState, step: str) -> None:
        if self._state is not state:
            raise EncoderStateError(f"{step}() called in state {self._state.value}, expected {state.value}")

    def preamble(self) -> NDArray[np.uint8]:
        """Entry tone followed by the tape-in marker."""
        self._expect(EncoderState.PREAMBLE, "preamble")
        self._state = EncoderState.PAYLOAD
        return np.concatenate([
            self.table.symbol_samples(Symbol.ENTRY),
            self.table.symbol_samples(Symbol.TAPE_IN),
        ])

    def feed(self, chunk: BytesLike) -> NDArray[np.uint8]:
        self._expect(EncoderState.PAYLOAD, "feed")
        data = bytes(chunk)
        self._checksum = update_checksum(self._checksum, data)
        self._count += len(data)
        return self.table.bytes_samples(data)

    def finish(self) -> NDArray[np.uint8]:
        """Samples for the checksum byte. TRAILER is terminal; no step is legal afterwards."""
        self._expect(EncoderState.PAYLOAD, "finish")
        self._state = EncoderState.TRAILER
        logger.debug("trailer checksum 0x%02X after %d bytes", self._checksum, self._count)
        return self.table.byte_samples(self._checksum)


def iter_samples(
    chunks: Iterable[BytesLike],
    profile: CassetteProfile = APPLE2,
    encoder: Optional[TapeEncoder] = None,
) -> Iterator[NDArray[np.uint8]]:
    """Lazily yield sample arrays for a recording of `chunks`.

    Input is pulled one chunk at a time and nothing beyond the current chunk
    is buffered. The preamble is yielded before the first chunk is read.
    Pass a fresh `encoder` to inspect its checksum and byte count afterwards;
    `profile` is ignored in that case.
    """
    enc = encoder if encoder is not None else TapeEncoder(profile)
    yield enc.preamble()
    for chunk in chunks:
        if len(chunk) == 0:
            continue
        yield enc.feed(chunk)
    yield enc.finish()


def encode_bytes(data: BytesLike, profile: CassetteProfile = APPLE2) -> bytes:
    """Return the complete recording of `data` as raw unsigned 8-bit samples."""
    return np.concatenate(list(iter_samples([data], profile))).tobytes()


def expected_sample_count(data: BytesLike, profile: CassetteProfile = APPLE2) -> int:
    """Number of samples the recording of `data` will contain, without rendering it."""
    payload = bytes(data)
    checksum = update_checksum(profile.checksum_seed, payload)
    total = profile.preamble_duration
    for b in list(payload) + [checksum]:
        ones = bin(b).count("1")
        total += ones * profile.one_period + (BITS_PER_BYTE - ones) * profile.zero_period
    return total


def symbol_sequence(data: BytesLike, profile: CassetteProfile = APPLE2) -> List[Symbol]:
    """Symbols transmitted for `data`: preamble, payload bits, checksum bits."""
    payload = bytes(data)
    seq = [Symbol.ENTRY, Symbol.TAPE_IN]
    for b in payload:
        seq.extend(symbols_for_byte(b))
    seq.extend(symbols_for_byte(update_checksum(profile.checksum_seed, payload)))
    return seq
