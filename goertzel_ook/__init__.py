"""
goertzel_ook
Block-synchronous fixed-point Goertzel detector driving an on/off-keying
decision, one sample per tick.
"""

from .accumulator import AccumulatorState, GoertzelAccumulator
from .coefficients import Coefficients, derive_coefficients, quantize
from .config import BlockConfig, load_config
from .decision import decide
from .demodulator import (BlockResult, DemodulatorStateMachine, State, TickOutput,
                          demodulate)
from .errors import (ConfigError, GoertzelOokError, RegisterOverflowError,
                     SampleRangeError, StateError)
from .finalizer import SpectralComponents, finalize, magnitude_approx
from .reference import FloatGoertzel, FloatGoertzelState, reference_block

__version__ = "1.0.0"

__all__ = [
    "AccumulatorState", "BlockConfig", "BlockResult", "Coefficients",
    "ConfigError", "DemodulatorStateMachine", "FloatGoertzel",
    "FloatGoertzelState", "GoertzelAccumulator", "GoertzelOokError",
    "RegisterOverflowError", "SampleRangeError", "SpectralComponents",
    "State", "StateError", "TickOutput", "decide", "demodulate",
    "derive_coefficients", "finalize", "load_config", "magnitude_approx",
    "quantize", "reference_block",
]
