"""
goertzel_ook.demodulator
Tick-by-tick Goertzel OOK demodulator, modelled on the hardware port list
(data_in, data_valid, rst -> ook_out, magnitude, data_ready).

Interface
---------
    dm  = DemodulatorStateMachine(config, threshold=1000)
    out = dm.tick(sample, valid=True, reset=False)
    if out.ready:
        out.result.magnitude, out.result.ook_decision ...

State machine
-------------
    IDLE ──valid──▶ ACCUMULATE ──N-th sample──▶ COMPUTE_OUTPUT
     ▲                                               │
     └──────────────────── one tick ─────────────────┘

    IDLE:            a valid sample arms the next block (registers and
                     count cleared). That sample is not accumulated.
    ACCUMULATE:      each valid sample runs one recursion step. Ticks with
                     valid low change nothing.
    COMPUTE_OUTPUT:  unconditional, one tick. Finalises the block, updates
                     ook_out / magnitude and pulses ready.

    reset overrides all of the above: back to IDLE, registers and outputs
    zeroed, partial block discarded without a result.

Under a continuous valid stream one block cycle is N + 2 ticks.

Timing
------
Each tick is evaluated in two phases, like a clocked process: every next
value is computed from the current registers, then everything is committed
at once. ook_out and magnitude are registered and hold between blocks;
ready is high only on the COMPUTE_OUTPUT tick.

One instance serves one stream. Coefficients may be shared read-only
between instances built from the same BlockConfig.
"""

from __future__ import annotations

import logging
import numbers
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, Iterator, Optional

from .accumulator import AccumulatorState, GoertzelAccumulator, check_sample
from .coefficients import Coefficients, derive_coefficients
from .config import BlockConfig
from .decision import decide
from .errors import ConfigError
from .finalizer import finalize, magnitude_approx

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------

class State(Enum):
    IDLE           = auto()
    ACCUMULATE     = auto()
    COMPUTE_OUTPUT = auto()


@dataclass(frozen=True)
class BlockResult:
    real_part:         int
    imag_part:         int
    magnitude_squared: int
    magnitude:         int
    ook_decision:      bool
    tick:              int      # tick index (0-based) of the COMPUTE_OUTPUT tick
    ready:             bool = True


@dataclass(frozen=True)
class TickOutput:
    ook_out:   bool
    magnitude: int
    ready:     bool
    result:    Optional[BlockResult] = None    # set only when ready


def _check_threshold(threshold) -> int:
    if not isinstance(threshold, numbers.Integral) or isinstance(threshold, bool) \
            or threshold < 0:
        raise ConfigError(f"threshold must be a non-negative integer, got {threshold!r}")
    return int(threshold)


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------

class DemodulatorStateMachine:

    def __init__(self, config: BlockConfig, threshold: int,
                 coefficients: Optional[Coefficients] = None):
        if coefficients is None:
            coefficients = derive_coefficients(config)

        self.config       = config
        self.coefficients = coefficients
        self.accumulator  = GoertzelAccumulator(config, coefficients)
        reg_bits          = self.accumulator.register_bits
        self._threshold   = _check_threshold(threshold)

        self._state:     State = State.IDLE
        self._ook_out:   bool  = False
        self._magnitude: int   = 0
        self._ready:     bool  = False
        self._ticks:     int   = 0
        self._blocks:    int   = 0

        log.info("Goertzel OOK: N=%d k=%.3f (%.1f Hz @ %.1f Hz) "
                 "coeff=%d cos=%d sin=%d Q%d, registers %d/%d bits, threshold=%d",
                 config.block_length, config.bin_index, config.target_frequency,
                 config.sample_rate, coefficients.recursion_coeff_fixed,
                 coefficients.cos_final_fixed, coefficients.sin_final_fixed,
                 config.coeff_width, reg_bits, config.register_width, self._threshold)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def state(self) -> State:
        return self._state

    @property
    def threshold(self) -> int:
        return self._threshold

    @threshold.setter
    def threshold(self, value: int) -> None:
        # takes effect at the next COMPUTE_OUTPUT; the block in progress is kept
        self._threshold = _check_threshold(value)

    @property
    def ticks(self) -> int:
        return self._ticks

    @property
    def blocks(self) -> int:
        return self._blocks

    @property
    def output(self) -> TickOutput:
        return TickOutput(self._ook_out, self._magnitude, self._ready)

    def tick(self, sample=0, valid: bool = False, reset: bool = False) -> TickOutput:
        """
        Advance one tick. sample is read only when valid is true.
        Returns the outputs as they stand after this tick.
        """
        tick_index = self._ticks
        self._ticks += 1

        if reset:
            self._do_reset()
            return self.output

        if valid:
            sample = check_sample(sample, self.config)

        # --- phase 1: next values from current registers ---
        nxt_state:  State                      = self._state
        nxt_acc:    Optional[AccumulatorState] = None
        arm_block:  bool                       = False
        nxt_ook:    bool                       = self._ook_out
        nxt_mag:    int                        = self._magnitude
        result:     Optional[BlockResult]      = None

        if self._state == State.IDLE:
            if valid:
                arm_block = True
                nxt_state = State.ACCUMULATE

        elif self._state == State.ACCUMULATE:
            if valid:
                last    = self.accumulator.sample_count == self.config.block_length - 1
                nxt_acc = self.accumulator.next_state(sample)
                if last:
                    nxt_state = State.COMPUTE_OUTPUT

        elif self._state == State.COMPUTE_OUTPUT:
            result    = self._compute_block(tick_index)
            nxt_ook   = result.ook_decision
            nxt_mag   = result.magnitude
            nxt_state = State.IDLE

        # --- phase 2: commit ---
        if arm_block:
            self.accumulator.reset_block()
        if nxt_acc is not None:
            self.accumulator.commit(nxt_acc)
        self._state     = nxt_state
        self._ook_out   = nxt_ook
        self._magnitude = nxt_mag
        self._ready     = result is not None
        if result is not None:
            self._blocks += 1

        return TickOutput(self._ook_out, self._magnitude, self._ready, result)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _compute_block(self, tick_index: int) -> BlockResult:
        s1, s2 = self.accumulator.final_registers()
        comp   = finalize(s1, s2, self.coefficients)
        mag    = magnitude_approx(comp.magnitude_squared, self.config)
        bit    = decide(mag, self._threshold)
        log.debug("block %d: re=%d im=%d |X|^2=%d mag=%d -> %d",
                  self._blocks, comp.real_part, comp.imag_part,
                  comp.magnitude_squared, mag, int(bit))
        return BlockResult(
            real_part         = comp.real_part,
            imag_part         = comp.imag_part,
            magnitude_squared = comp.magnitude_squared,
            magnitude         = mag,
            ook_decision      = bit,
            tick              = tick_index,
        )

    def _do_reset(self):
        self.accumulator.clear()
        self._state     = State.IDLE
        self._ook_out   = False
        self._magnitude = 0
        self._ready     = False


# ---------------------------------------------------------------------------
# Stream driver
# ---------------------------------------------------------------------------

def demodulate(samples: Iterable, config: BlockConfig, threshold: int,
               coefficients: Optional[Coefficients] = None) -> Iterator[BlockResult]:
    """
    Present samples one per tick with valid high and yield each BlockResult.

    Samples arriving on the arming (IDLE) and COMPUTE_OUTPUT ticks are not
    accumulated, as on the hardware. A block whose last sample was the end
    of the stream is flushed with one extra idle tick.
    """
    dm = DemodulatorStateMachine(config, threshold, coefficients)
    for sample in samples:
        out = dm.tick(sample, valid=True)
        if out.ready:
            yield out.result
    if dm.state == State.COMPUTE_OUTPUT:
        out = dm.tick(valid=False)
        yield out.result
