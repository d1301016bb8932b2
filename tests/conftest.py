"""Shared fixtures: the 8-sample / 100 kHz scenario and block-feeding helpers."""

import math

import pytest

from goertzel_ook.config import BlockConfig

SCENARIO_N         = 8
SCENARIO_FS        = 1_000_000
SCENARIO_F         = 100_000
SCENARIO_AMPLITUDE = 10000
SCENARIO_THRESHOLD = 1000


def tone(n, amplitude=SCENARIO_AMPLITUDE, freq=SCENARIO_F, fs=SCENARIO_FS):
    return [int(round(amplitude * math.sin(2 * math.pi * freq * i / fs))) for i in range(n)]


def feed_block(dm, samples):
    """Arming tick, one tick per sample, then the compute tick. Returns all outputs."""
    outs = [dm.tick(0, valid=True)]
    for x in samples:
        outs.append(dm.tick(x, valid=True))
    outs.append(dm.tick(valid=False))
    return outs


@pytest.fixture
def scenario_config():
    return BlockConfig(
        block_length     = SCENARIO_N,
        sample_rate      = SCENARIO_FS,
        target_frequency = SCENARIO_F,
        data_width       = 16,
        coeff_width      = 16,
    )


@pytest.fixture
def sine_block():
    return tone(SCENARIO_N)


@pytest.fixture
def zero_block():
    return [0] * SCENARIO_N
