"""
Exception hierarchy for the Goertzel OOK demodulator.

Configuration faults are raised while building an instance; everything
else is a programming error at the tick boundary. Nothing here is
recoverable mid-block: reset is the only way to abandon a block.
"""


class GoertzelOokError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(GoertzelOokError, ValueError):
    """Invalid block configuration, rejected at construction."""


class SampleRangeError(GoertzelOokError, ValueError):
    """Input sample is not an integer or does not fit the signed data width."""


class StateError(GoertzelOokError, RuntimeError):
    """Operation invoked outside the state it belongs to."""


class RegisterOverflowError(GoertzelOokError, OverflowError):
    """Recursion register cannot be held in the configured register width."""
