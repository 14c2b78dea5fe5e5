from __future__ import annotations

"""
Apple II cassette protocol constants and the profile table they derive from.

Timings follow the Apple II monitor's tape routines: a long 770 Hz header
tone, a short sync cycle, then one full sine cycle per data bit.
"""

from dataclasses import dataclass, fields, replace
from pathlib import Path
from numbers import Real
import json
import math

from .errors import TapeIOError

# Output format
SAMPLE_RATE_HZ = 44100   # samples per second, 8-bit unsigned mono
SAMPLE_MAX = 254         # trunc(127 * 1.0 + 127); 255 is never produced

# Tone timings
ENTRY_TONE_S = 1.06      # header tone duration in seconds
ENTRY_TONE_US = 1300     # header tone period (~770 Hz)
TAPE_IN_US = 400         # first half of the sync cycle
ZERO_US = 500            # bit 0 period, also the second half of the sync cycle
ONE_US = 1000            # bit 1 period

CHECKSUM_SEED = 0xFF
BITS_PER_BYTE = 8


def period_samples(sample_rate_hz: int, period_us: float) -> int:
    """Return the tone period in whole samples for a period given in microseconds."""
    return int(round(sample_rate_hz * period_us * 1e-6))


def duration_samples(sample_rate_hz: int, duration_s: float) -> int:
    return int(round(sample_rate_hz * duration_s))


@dataclass(frozen=True)
class CassetteProfile:
    # Defaults reproduce the Apple II ][+ cassette interface
    sample_rate_hz: int = SAMPLE_RATE_HZ
    entry_tone_s: float = ENTRY_TONE_S
    entry_tone_us: float = ENTRY_TONE_US
    tape_in_us: float = TAPE_IN_US
    zero_us: float = ZERO_US
    one_us: float = ONE_US
    checksum_seed: int = CHECKSUM_SEED

    def __post_init__(self) -> None:
        for name in ("sample_rate_hz", "checksum_seed"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
        for name in ("entry_tone_s", "entry_tone_us", "tape_in_us", "zero_us", "one_us"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Real):
                raise ValueError(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite, got {value!r}")
        if self.sample_rate_hz <= 0:
            raise ValueError(f"sample_rate_hz must be positive, got {self.sample_rate_hz}")
        if not 0 <= self.checksum_seed <= 0xFF:
            raise ValueError(f"checksum_seed must fit in one byte, got {self.checksum_seed}")
        if self.entry_duration < 0:
            raise ValueError("entry_tone_s must not be negative")
        for name in ("entry_period", "tape_in_period", "zero_period", "one_period"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} rounds to zero samples at {self.sample_rate_hz} Hz")

    @property
    def entry_period(self) -> int:
        return period_samples(self.sample_rate_hz, self.entry_tone_us)

    @property
    def entry_duration(self) -> int:
        return duration_samples(self.sample_rate_hz, self.entry_tone_s)

    @property
    def tape_in_period(self) -> int:
        return period_samples(self.sample_rate_hz, self.tape_in_us)

    @property
    def zero_period(self) -> int:
        return period_samples(self.sample_rate_hz, self.zero_us)

    @property
    def one_period(self) -> int:
        return period_samples(self.sample_rate_hz, self.one_us)

    @property
    def tape_in_duration(self) -> int:
        """Samples in the sync marker: half a TAPE_IN cycle plus half a ZERO cycle."""
        return self.tape_in_period // 2 + self.zero_period // 2

    @property
    def preamble_duration(self) -> int:
        return self.entry_duration + self.tape_in_duration


APPLE2 = CassetteProfile()


def profile_from_dict(data: dict, base: CassetteProfile = APPLE2) -> CassetteProfile:
    """Return `base` with the keys of `data` overridden.

    Unknown keys raise ValueError so that typos in a profile file are not
    silently ignored.
    """
    known = {f.name for f in fields(CassetteProfile)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown profile keys: {', '.join(unknown)}")
    return replace(base, **data)


def load_profile(path: str | Path) -> CassetteProfile:
    p = Path(path)
    try:
        with p.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise TapeIOError("open", str(p), e) from e
    if not isinstance(data, dict):
        raise ValueError(f"Profile file {p} must contain a JSON object")
    return profile_from_dict(data)
