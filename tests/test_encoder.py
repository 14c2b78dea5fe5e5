import numpy as np
import pytest

from a2tape import (
    APPLE2,
    EncoderStateError,
    Symbol,
    TapeEncoder,
    ToneTable,
    encode_bytes,
    expected_sample_count,
    iter_samples,
    symbol_sequence,
)
from a2tape.constants import profile_from_dict
from a2tape.encoder import EncoderState

PREAMBLE = 46746 + 9 + 11


def as_array(raw: bytes) -> np.ndarray:
    return np.frombuffer(raw, dtype=np.uint8)


@pytest.fixture(scope="module")
def table():
    return ToneTable(APPLE2)


def test_single_zero_byte_scenario(table):
    x = as_array(encode_bytes(b"\x00"))
    assert x.size == 47294
    assert symbol_sequence(b"\x00") == [Symbol.ENTRY, Symbol.TAPE_IN] + [Symbol.ZERO] * 8 + [Symbol.ONE] * 8
    payload = x[PREAMBLE:]
    assert np.array_equal(payload[:8 * 22], np.tile(table.symbol_samples(Symbol.ZERO), 8))
    assert np.array_equal(payload[8 * 22:], np.tile(table.symbol_samples(Symbol.ONE), 8))


def test_single_ff_byte_scenario(table):
    x = as_array(encode_bytes(b"\xff"))
    assert x.size == 47294
    assert symbol_sequence(b"\xff") == [Symbol.ENTRY, Symbol.TAPE_IN] + [Symbol.ONE] * 8 + [Symbol.ZERO] * 8
    payload = x[PREAMBLE:]
    assert np.array_equal(payload[:8 * 44], np.tile(table.symbol_samples(Symbol.ONE), 8))
    assert np.array_equal(payload[8 * 44:], np.tile(table.symbol_samples(Symbol.ZERO), 8))


def test_empty_input_sends_preamble_and_ff_trailer(table):
    x = as_array(encode_bytes(b""))
    assert x.size == PREAMBLE + 8 * 44
    assert symbol_sequence(b"") == [Symbol.ENTRY, Symbol.TAPE_IN] + [Symbol.ONE] * 8
    assert np.array_equal(x[PREAMBLE:], table.byte_samples(0xFF))


def test_preamble_is_entry_then_tape_in(table):
    enc = TapeEncoder()
    x = enc.preamble()
    assert np.array_equal(x[:46746], table.symbol_samples(Symbol.ENTRY))
    assert np.array_equal(x[46746:], table.symbol_samples(Symbol.TAPE_IN))


def test_trailer_is_xor_checksum(table):
    data = bytes([0x12, 0x34, 0x56, 0x78, 0x9A])
    checksum = 0xFF ^ 0x12 ^ 0x34 ^ 0x56 ^ 0x78 ^ 0x9A
    x = as_array(encode_bytes(data))
    trailer = table.byte_samples(checksum)
    assert np.array_equal(x[-trailer.size:], trailer)


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_sample_count_matches_formula(seed):
    rng = np.random.default_rng(seed)
    data = rng.integers(0, 256, size=int(rng.integers(0, 300)), dtype=np.uint8).tobytes()
    checksum = 0xFF
    for b in data:
        checksum ^= b
    bits = [(b >> i) & 1 for b in list(data) + [checksum] for i in range(8)]
    formula = PREAMBLE + sum(44 if bit else 22 for bit in bits)
    assert len(encode_bytes(data)) == formula
    assert expected_sample_count(data) == formula


def test_encoding_is_deterministic():
    data = bytes(range(256)) * 2
    assert encode_bytes(data) == encode_bytes(data)


def test_samples_never_reach_255():
    x = as_array(encode_bytes(bytes(range(256))))
    assert int(x.max()) <= 254
    assert not np.any(x == 255)


def test_chunked_input_matches_whole():
    data = bytes(range(200))
    chunks = [data[:1], b"", data[1:77], data[77:]]
    streamed = np.concatenate(list(iter_samples(chunks))).tobytes()
    assert streamed == encode_bytes(data)


def test_iter_samples_is_lazy():
    pulled = []

    def source():
        for b in (b"\x01", b"\x02"):
            pulled.append(b)
            yield b

    it = iter_samples(source())
    first = next(it)
    assert first.size == PREAMBLE
    assert pulled == []
    next(it)
    assert pulled == [b"\x01"]


def test_encoder_tracks_checksum_and_count():
    enc = TapeEncoder()
    assert enc.state is EncoderState.PREAMBLE
    enc.preamble()
    assert enc.state is EncoderState.PAYLOAD
    enc.feed(b"\x0f")
    enc.feed(bytearray(b"\xf0\xaa"))
    assert enc.checksum == 0xFF ^ 0x0F ^ 0xF0 ^ 0xAA
    assert enc.bytes_encoded == 3
    enc.finish()
    assert enc.state is EncoderState.TRAILER


def test_encoder_steps_out_of_order():
    enc = TapeEncoder()
    with pytest.raises(EncoderStateError):
        enc.feed(b"\x00")
    with pytest.raises(EncoderStateError):
        enc.finish()
    enc.preamble()
    with pytest.raises(EncoderStateError):
        enc.preamble()
    enc.finish()
    with pytest.raises(EncoderStateError):
        enc.feed(b"\x00")
    with pytest.raises(EncoderStateError):
        enc.finish()


def test_custom_profile_changes_tones():
    p = profile_from_dict({"sample_rate_hz": 22050, "entry_tone_s": 0.1})
    x = as_array(encode_bytes(b"\x80", profile=p))
    # 0x80 ^ 0xFF = 0x7F: 1 + 7 one-bits, 7 + 1 zero-bits
    assert p.zero_period == 11 and p.one_period == 22
    assert x.size == p.preamble_duration + 8 * 22 + 8 * 11
    assert x.size == expected_sample_count(b"\x80", profile=p)
