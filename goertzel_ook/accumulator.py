"""
goertzel_ook.accumulator
Fixed-point Goertzel recursion over one block.

Per accepted sample:

    scaled = (recursion_coeff_fixed * s1) >> (coeff_width - 2)
    s0'    = sample + scaled - s2
    s2'    = s1
    s1'    = s0'

Python's >> on negative ints is an arithmetic (floor) shift, the same as a
signed hardware shift_right.

Construction refuses coefficients derived for a different BlockConfig and
register widths the worst-case block can outgrow.

next_state() computes without mutating and commit() stores, so the
demodulator can evaluate a whole tick before anything changes.
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass, replace
from typing import Tuple

from .coefficients import Coefficients, check_register_width
from .config import BlockConfig
from .errors import ConfigError, RegisterOverflowError, SampleRangeError, StateError


@dataclass(frozen=True)
class AccumulatorState:
    s0:           int = 0
    s1:           int = 0
    s2:           int = 0
    sample_count: int = 0


def check_sample(sample, config: BlockConfig) -> int:
    """Return sample as a plain int, or raise SampleRangeError."""
    if not isinstance(sample, numbers.Integral) or isinstance(sample, bool):
        raise SampleRangeError(f"sample must be an integer, got {sample!r}")
    value = int(sample)
    if not config.sample_min <= value <= config.sample_max:
        raise SampleRangeError(
            f"sample {value} outside signed {config.data_width}-bit range "
            f"[{config.sample_min}, {config.sample_max}]")
    return value


# ---------------------------------------------------------------------------
class GoertzelAccumulator:

    def __init__(self, config: BlockConfig, coefficients: Coefficients):
        if coefficients.config != config:
            raise ConfigError(
                f"coefficients derived for N={coefficients.config.block_length} "
                f"{coefficients.config.target_frequency} Hz @ {coefficients.config.sample_rate} Hz "
                f"Q{coefficients.config.coeff_width}, config is N={config.block_length} "
                f"{config.target_frequency} Hz @ {config.sample_rate} Hz Q{config.coeff_width}")
        self.register_bits = check_register_width(config)

        self.config       = config
        self.coefficients = coefficients
        self._reg_min     = -(1 << (config.register_width - 1))
        self._reg_max     = (1 << (config.register_width - 1)) - 1
        self._state       = AccumulatorState()

    @property
    def state(self) -> AccumulatorState:
        return self._state

    @property
    def sample_count(self) -> int:
        return self._state.sample_count

    @property
    def block_complete(self) -> bool:
        return self._state.sample_count == self.config.block_length

    # ------------------------------------------------------------------
    def next_state(self, sample) -> AccumulatorState:
        """Registers after accepting sample. Does not modify the accumulator."""
        if self.block_complete:
            raise StateError(
                f"block already holds {self.config.block_length} samples; "
                f"reset_block() before advancing")
        x  = check_sample(sample, self.config)
        st = self._state
        c  = self.coefficients

        scaled = (c.recursion_coeff_fixed * st.s1) >> c.recursion_shift
        s0     = x + scaled - st.s2
        if not self._reg_min <= s0 <= self._reg_max:
            raise RegisterOverflowError(
                f"s0={s0} left the {self.config.register_width}-bit register "
                f"at sample {st.sample_count}")
        return AccumulatorState(s0=s0, s1=s0, s2=st.s1, sample_count=st.sample_count + 1)

    def commit(self, state: AccumulatorState) -> None:
        self._state = state

    def advance(self, sample) -> None:
        self.commit(self.next_state(sample))

    def reset_block(self) -> None:
        # s0 is overwritten by the first advance, so it is left alone
        self._state = replace(self._state, s1=0, s2=0, sample_count=0)

    def clear(self) -> None:
        self._state = AccumulatorState()

    def final_registers(self) -> Tuple[int, int]:
        if not self.block_complete:
            raise StateError(
                f"final registers read after {self._state.sample_count} of "
                f"{self.config.block_length} samples")
        return self._state.s1, self._state.s2
