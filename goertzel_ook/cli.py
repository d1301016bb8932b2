#!/usr/bin/env python3
"""
ook-goertzel
Run the fixed-point Goertzel OOK demodulator over a WAV file and print the
per-block decisions.

The WAV is streamed one sample per tick with data_valid held high, exactly
as the hardware would see it, so two samples per block cycle (the arming
tick and the compute tick) are not accumulated.

Usage:
    ook-goertzel config.json input.wav
    ook-goertzel config.json input.wav --channel 1 --threshold 2500
    ook-goertzel config.json input.wav --quiet      # bits and summary only

Requirements: pip install numpy scipy
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

import numpy as np
from scipy.io import wavfile

from .config import BlockConfig, load_config
from .demodulator import BlockResult, demodulate
from .errors import ConfigError, GoertzelOokError, SampleRangeError


def read_samples(path: str, config: BlockConfig, channel: int = 0) -> np.ndarray:
    """Load one channel of an integer WAV and check it against data_width."""
    try:
        sample_rate, data = wavfile.read(path)
    except ValueError as e:
        raise SampleRangeError(f"{path}: not a readable WAV file ({e})") from e

    if sample_rate != config.sample_rate:
        raise ConfigError(
            f"{path} is sampled at {sample_rate} Hz, config expects {config.sample_rate} Hz")

    if data.ndim > 1:
        if not 0 <= channel < data.shape[1]:
            raise ConfigError(f"channel {channel} not present ({data.shape[1]} channels)")
        data = data[:, channel]
    elif channel != 0:
        raise ConfigError(f"channel {channel} requested from a mono file")

    if data.dtype == np.uint8:
        # 8-bit WAV is offset binary
        data = data.astype(np.int16) - 128
    elif data.dtype.kind != "i":
        raise SampleRangeError(f"{path}: sample format {data.dtype} is not integer PCM")

    data = data.astype(np.int64)
    if len(data):
        lo, hi = int(data.min()), int(data.max())
        if lo < config.sample_min or hi > config.sample_max:
            raise SampleRangeError(
                f"{path}: samples span [{lo}, {hi}], outside signed "
                f"{config.data_width}-bit range [{config.sample_min}, {config.sample_max}]")
    return data


def format_block(index: int, result: BlockResult) -> str:
    return (f"  block {index:5d}  tick {result.tick:8d}  "
            f"mag {result.magnitude:7d}  {'ON ' if result.ook_decision else 'off'}")


def run(config_path: str, wav_path: str, channel: int = 0,
        threshold: Optional[int] = None, quiet: bool = False) -> List[BlockResult]:
    config, cfg_threshold = load_config(config_path)
    if threshold is None:
        threshold = cfg_threshold

    samples = read_samples(wav_path, config, channel)

    print(f"Goertzel OOK: N={config.block_length}  k={config.bin_index:.3f}  "
          f"target {config.target_frequency:.1f} Hz @ {config.sample_rate:.0f} Hz  "
          f"threshold {threshold}")
    print("-" * 60)

    results = []
    for i, result in enumerate(demodulate(samples, config, threshold)):
        results.append(result)
        if not quiet:
            print(format_block(i, result))

    bits = "".join("1" if r.ook_decision else "0" for r in results)
    n_on = bits.count("1")
    print(f"Bits: {bits}")
    print(f"\n{len(samples)} samples  |  {len(results)} blocks  |  "
          f"{n_on} on  {len(results) - n_on} off")
    return results


# ---------------------------------------------------------------------------
def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="ook-goertzel",
        description="Fixed-point Goertzel OOK demodulation of a WAV file")
    parser.add_argument("config", help="JSON block configuration")
    parser.add_argument("wav", help="Input WAV file (integer PCM)")
    parser.add_argument("--channel",   type=int, default=0,
                        help="Channel index for multi-channel files")
    parser.add_argument("--threshold", type=int, default=None,
                        help="Override the threshold from the config file")
    parser.add_argument("--quiet",     action="store_true",
                        help="Only print the bit string and summary")
    parser.add_argument("--verbose",   action="store_true",
                        help="Log coefficient and per-block detail")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s")

    for path in (args.config, args.wav):
        if not os.path.exists(path):
            print(f"Error: {path} not found")
            return 1

    try:
        run(args.config, args.wav, channel=args.channel,
            threshold=args.threshold, quiet=args.quiet)
    except GoertzelOokError as e:
        print(f"Error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
