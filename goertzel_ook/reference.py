"""
goertzel_ook.reference
Floating-point Goertzel model used to check the fixed-point path.

Per-channel state lives in a FloatGoertzelState that the caller owns and
passes to every call; FloatGoertzel itself only holds the coefficients, so
one instance can serve any number of channels.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

import numpy as np

from .config import BlockConfig
from .errors import StateError


@dataclass
class FloatGoertzelState:
    s1:    float = 0.0
    s2:    float = 0.0
    count: int   = 0


class FloatGoertzel:

    def __init__(self, config: BlockConfig):
        self.config = config
        omega       = config.omega
        self.coeff  = 2.0 * math.cos(omega)
        self.cosine = math.cos(omega)
        self.sine   = math.sin(omega)

    def reset(self, state: FloatGoertzelState) -> None:
        state.s1 = 0.0
        state.s2 = 0.0
        state.count = 0

    def advance(self, state: FloatGoertzelState, sample: float) -> None:
        if state.count >= self.config.block_length:
            raise StateError("block complete; reset() before advancing")
        s0 = float(sample) + self.coeff * state.s1 - state.s2
        state.s2 = state.s1
        state.s1 = s0
        state.count += 1

    def finalize(self, state: FloatGoertzelState) -> complex:
        if state.count != self.config.block_length:
            raise StateError(
                f"finalize after {state.count} of {self.config.block_length} samples")
        return complex(state.s1 - state.s2 * self.cosine, state.s2 * self.sine)

    def magnitude_squared(self, state: FloatGoertzelState) -> float:
        return abs(self.finalize(state)) ** 2


def reference_block(samples: Iterable[float], config: BlockConfig) -> complex:
    """Goertzel output for exactly one block of samples."""
    samples = np.asarray(list(samples), dtype=np.float64)
    if len(samples) != config.block_length:
        raise ValueError(
            f"expected {config.block_length} samples, got {len(samples)}")
    g     = FloatGoertzel(config)
    state = FloatGoertzelState()
    for x in samples:
        g.advance(state, x)
    return g.finalize(state)
