"""Apple II cassette audio encoder.

Public API:
- encode_bytes(data) -> bytes of unsigned 8-bit samples at 44100 Hz
- iter_samples(chunks) -> lazy sequence of sample arrays
- TapeEncoder for step-by-step encoding
"""
from .constants import APPLE2, CassetteProfile, load_profile
from .encoder import TapeEncoder, encode_bytes, expected_sample_count, iter_samples, symbol_sequence
from .errors import EncoderStateError, TapeError, TapeIOError
from .tones import Symbol, ToneTable

__all__ = [
    "APPLE2",
    "CassetteProfile",
    "load_profile",
    "TapeEncoder",
    "encode_bytes",
    "expected_sample_count",
    "iter_samples",
    "symbol_sequence",
    "EncoderStateError",
    "TapeError",
    "TapeIOError",
    "Symbol",
    "ToneTable",
]
