from __future__ import annotations

from dataclasses import dataclass
import math
import numpy as np
from numpy.typing import NDArray


def sine_wave(samples: int, delta_theta: float, theta0: float = 0.0) -> NDArray[np.uint8]:
    """Synthesize `samples` unsigned 8-bit sine samples.

    Sample i is trunc(127 * sin(theta0 + i * delta_theta) + 127). The value is
    truncated rather than rounded, so the output range is [0, 254].
    """
    if samples < 0:
        raise ValueError(f"samples must be non-negative, got {samples}")
    theta = theta0 + np.arange(samples, dtype=np.float64) * delta_theta
    x = 127.0 * np.sin(theta) + 127.0
    return np.trunc(x).astype(np.uint8)


@dataclass(frozen=True)
class Tone:
    """A sine segment: `duration` samples of a wave whose cycle is `period` samples."""

    period: int
    duration: int
    phase: float = 0.0

    @property
    def delta_theta(self) -> float:
        return 2.0 * math.pi / float(self.period)

    def render(self) -> NDArray[np.uint8]:
        return sine_wave(self.duration, self.delta_theta, self.phase)
