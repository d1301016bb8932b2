"""
goertzel_ook.finalizer
Terminal rotation of the last two recursion registers into a DFT bin.

    real = s1 - ((s2 * cos_final_fixed) >> (coeff_width - 1))
    imag =       (s2 * sin_final_fixed) >> (coeff_width - 1)
    |X|^2 = real^2 + imag^2

No square root is taken. Threshold decisions work on |X|^2 shifted down to
data_width (see magnitude_approx), an inexpensive stand-in for |X|.
"""

from __future__ import annotations

from typing import NamedTuple

from .coefficients import Coefficients
from .config import BlockConfig


class SpectralComponents(NamedTuple):
    real_part:         int
    imag_part:         int
    magnitude_squared: int


def finalize(s1: int, s2: int, coefficients: Coefficients) -> SpectralComponents:
    shift = coefficients.terminal_shift
    real  = s1 - ((s2 * coefficients.cos_final_fixed) >> shift)
    imag  = (s2 * coefficients.sin_final_fixed) >> shift
    return SpectralComponents(real, imag, real * real + imag * imag)


def magnitude_approx(magnitude_squared: int, config: BlockConfig) -> int:
    """|X|^2 right-shifted into the unsigned data_width output range, saturating."""
    return min(magnitude_squared >> config.magnitude_shift, config.magnitude_max)
