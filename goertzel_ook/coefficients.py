"""
goertzel_ook.coefficients
Goertzel coefficient derivation and fixed-point quantisation.

    omega          = 2*pi*k/N
    recursion      = 2*cos(omega)   Q(cw-2)  (needs headroom up to 2.0)
    cos_final      = cos(omega)     Q(cw-1)
    sin_final      = sin(omega)     Q(cw-1)

The two different fractional widths are deliberate: the recursion
coefficient can reach 2.0, the terminal rotation never exceeds 1.0.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

from .config import BlockConfig
from .errors import RegisterOverflowError

log = logging.getLogger(__name__)

GUARD_BITS = 1   # margin for coefficient quantisation error in the growth bound


def quantize(value: float, width: int, frac_bits: int) -> int:
    """Quantise a float to a signed fixed-point integer, with saturation."""
    lo = -(1 << (width - 1))
    hi = (1 << (width - 1)) - 1
    fixed = int(np.round(value * (1 << frac_bits)))
    return max(lo, min(hi, fixed))


# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Coefficients:
    recursion_coeff:       float
    cos_final:             float
    sin_final:             float
    recursion_coeff_fixed: int
    cos_final_fixed:       int
    sin_final_fixed:       int
    config:                BlockConfig   # the BlockConfig these were derived for

    @property
    def coeff_width(self) -> int:
        return self.config.coeff_width

    @property
    def recursion_shift(self) -> int:
        return self.coeff_width - 2

    @property
    def terminal_shift(self) -> int:
        return self.coeff_width - 1


def derive_coefficients(config: BlockConfig) -> Coefficients:
    omega = config.omega
    cw    = config.coeff_width

    recursion = 2.0 * math.cos(omega)
    cos_final = math.cos(omega)
    sin_final = math.sin(omega)

    coeffs = Coefficients(
        recursion_coeff       = recursion,
        cos_final             = cos_final,
        sin_final             = sin_final,
        recursion_coeff_fixed = quantize(recursion, cw, cw - 2),
        cos_final_fixed       = quantize(cos_final, cw, cw - 1),
        sin_final_fixed       = quantize(sin_final, cw, cw - 1),
        config                = config,
    )

    for name, real, fixed, frac in (
        ("recursion", recursion, coeffs.recursion_coeff_fixed, cw - 2),
        ("cos_final", cos_final, coeffs.cos_final_fixed,       cw - 1),
        ("sin_final", sin_final, coeffs.sin_final_fixed,       cw - 1),
    ):
        if fixed != int(np.round(real * (1 << frac))):
            log.warning("%s coefficient %.6f saturated to %d at %d bits",
                        name, real, fixed, cw)

    return coeffs


# ---------------------------------------------------------------------------
# Register sizing
# ---------------------------------------------------------------------------

def recursion_growth(config: BlockConfig) -> float:
    """
    Worst-case gain from |x| to |s| over one block.

    The recursion is an IIR filter with impulse response
    h[m] = sin((m+1)*omega) / sin(omega), so the largest register value a
    block can produce is max|x| * sum(|h[m]|) for m < N.
    """
    n     = config.block_length
    m     = np.arange(1, n + 1, dtype=np.float64)
    sin_w = math.sin(config.omega)
    if abs(sin_w) < 1e-12:
        return float(m.sum())
    return float(np.sum(np.abs(np.sin(m * config.omega) / sin_w)))


def required_register_bits(config: BlockConfig) -> int:
    growth = max(1.0, recursion_growth(config))
    return (config.data_width - 1) + math.ceil(math.log2(growth)) + 1 + GUARD_BITS


def check_register_width(config: BlockConfig) -> int:
    """Raise RegisterOverflowError if the recursion can outgrow register_width."""
    needed = required_register_bits(config)
    if needed > config.register_width:
        raise RegisterOverflowError(
            f"block_length={config.block_length} at {config.target_frequency} Hz needs "
            f"{needed}-bit registers, only {config.register_width} available "
            f"(data_width + coeff_width)")
    return needed
