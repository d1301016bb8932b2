"""
goertzel_ook.config
Block configuration for the demodulator, and the JSON loader used by the
command-line tool.

Every option must be supplied explicitly; nothing here has a default.
A BlockConfig validates itself when it is built, so holding one means the
parameters are usable.

JSON layout (all keys required):

    {
      "block_length":     8,
      "sample_rate":      1000000,
      "target_frequency": 100000,
      "data_width":       16,
      "coeff_width":      16,
      "threshold":        1000
    }
"""

from __future__ import annotations

import json
import math
import numbers
from dataclasses import dataclass
from typing import Tuple

from .errors import ConfigError

CONFIG_KEYS = (
    "block_length",
    "sample_rate",
    "target_frequency",
    "data_width",
    "coeff_width",
    "threshold",
)

MIN_BLOCK_LENGTH = 2
MIN_DATA_WIDTH   = 2
MIN_COEFF_WIDTH  = 3    # keeps both quantisation shifts (cw-2, cw-1) at >= 1


def _is_int(value) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def _is_real(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class BlockConfig:
    block_length:     int
    sample_rate:      float
    target_frequency: float
    data_width:       int
    coeff_width:      int

    def __post_init__(self):
        if not _is_int(self.block_length) or self.block_length < MIN_BLOCK_LENGTH:
            raise ConfigError(
                f"block_length must be an integer >= {MIN_BLOCK_LENGTH}, "
                f"got {self.block_length!r}")
        if not _is_real(self.sample_rate) or not math.isfinite(self.sample_rate) \
                or not self.sample_rate > 0:
            raise ConfigError(f"sample_rate must be positive and finite, got {self.sample_rate!r}")
        if not _is_real(self.target_frequency) or not math.isfinite(self.target_frequency):
            raise ConfigError(
                f"target_frequency must be a finite number, got {self.target_frequency!r}")
        if self.target_frequency < 0:
            raise ConfigError(
                f"target_frequency must not be negative, got {self.target_frequency}")
        nyquist = self.sample_rate / 2.0
        if self.target_frequency >= nyquist:
            raise ConfigError(
                f"target_frequency {self.target_frequency} Hz is at or above "
                f"Nyquist ({nyquist} Hz)")
        if not _is_int(self.data_width) or self.data_width < MIN_DATA_WIDTH:
            raise ConfigError(
                f"data_width must be an integer >= {MIN_DATA_WIDTH}, got {self.data_width!r}")
        if not _is_int(self.coeff_width) or self.coeff_width < MIN_COEFF_WIDTH:
            raise ConfigError(
                f"coeff_width must be an integer >= {MIN_COEFF_WIDTH}, "
                f"got {self.coeff_width!r}")

    # ------------------------------------------------------------------
    @property
    def bin_index(self) -> float:
        """Target bin k in cycles per block (not necessarily an integer)."""
        return self.target_frequency * self.block_length / self.sample_rate

    @property
    def omega(self) -> float:
        return 2.0 * math.pi * self.bin_index / self.block_length

    @property
    def register_width(self) -> int:
        return self.data_width + self.coeff_width

    @property
    def sample_min(self) -> int:
        return -(1 << (self.data_width - 1))

    @property
    def sample_max(self) -> int:
        return (1 << (self.data_width - 1)) - 1

    @property
    def magnitude_max(self) -> int:
        return (1 << self.data_width) - 1

    @property
    def magnitude_shift(self) -> int:
        """Right shift taking |X|^2 back to data_width (full-scale on-bin tone -> full scale)."""
        log2_n = (self.block_length - 1).bit_length()
        return max(0, self.data_width - 4 + 2 * log2_n)


# ---------------------------------------------------------------------------
def config_from_dict(raw: dict) -> Tuple[BlockConfig, int]:
    """Build (BlockConfig, threshold) from a mapping holding exactly CONFIG_KEYS."""
    if not isinstance(raw, dict):
        raise ConfigError(f"configuration must be a JSON object, got {type(raw).__name__}")
    missing = [k for k in CONFIG_KEYS if k not in raw]
    if missing:
        raise ConfigError(f"missing configuration keys: {', '.join(missing)}")
    unknown = sorted(set(raw) - set(CONFIG_KEYS))
    if unknown:
        raise ConfigError(f"unknown configuration keys: {', '.join(unknown)}")

    threshold = raw["threshold"]
    if not _is_int(threshold) or threshold < 0:
        raise ConfigError(f"threshold must be a non-negative integer, got {threshold!r}")

    cfg = BlockConfig(
        block_length     = raw["block_length"],
        sample_rate      = raw["sample_rate"],
        target_frequency = raw["target_frequency"],
        data_width       = raw["data_width"],
        coeff_width      = raw["coeff_width"],
    )
    return cfg, int(threshold)


def load_config(path) -> Tuple[BlockConfig, int]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except OSError as e:
        raise ConfigError(f"could not read config {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid JSON in {path}: {e}") from e
    return config_from_dict(raw)
