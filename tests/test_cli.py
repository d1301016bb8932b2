import json

import numpy as np
import pytest
from scipy.io import wavfile

from conftest import SCENARIO_FS, SCENARIO_N, tone
from goertzel_ook.cli import main, read_samples, run
from goertzel_ook.config import BlockConfig
from goertzel_ook.errors import ConfigError, SampleRangeError

BITS = [1, 0, 1, 1, 0, 0, 1]


def _config(tmp_path, **overrides):
    raw = dict(block_length=SCENARIO_N, sample_rate=SCENARIO_FS, target_frequency=100_000,
               data_width=16, coeff_width=16, threshold=1000)
    raw.update(overrides)
    path = tmp_path / "config.json"
    path.write_text(json.dumps(raw))
    return str(path)


def _stream(bits):
    on, off = tone(SCENARIO_N), [0] * SCENARIO_N
    out = []
    for b in bits:
        out += [0] + (on if b else off) + [0]
    return np.array(out, dtype=np.int16)


def _wav(tmp_path, data, rate=SCENARIO_FS, name="in.wav"):
    path = tmp_path / name
    wavfile.write(str(path), rate, data)
    return str(path)


def test_main_prints_bits(tmp_path, capsys):
    rc = main([_config(tmp_path), _wav(tmp_path, _stream(BITS))])
    out = capsys.readouterr().out
    assert rc == 0
    assert "Bits: " + "".join(str(b) for b in BITS) in out
    assert f"{len(BITS)} blocks" in out
    assert out.count(" ON ") == sum(BITS)


def test_threshold_override(tmp_path, capsys):
    results = run(_config(tmp_path), _wav(tmp_path, _stream(BITS)),
                  threshold=10 ** 6, quiet=True)
    assert not any(r.ook_decision for r in results)
    out = capsys.readouterr().out
    assert "  block " not in out
    assert "Bits: 0000000" in out


def test_stereo_channel_select(tmp_path):
    tone_ch = _stream(BITS)
    data = np.column_stack((np.zeros_like(tone_ch), tone_ch))
    cfg = BlockConfig(block_length=SCENARIO_N, sample_rate=SCENARIO_FS,
                      target_frequency=100_000, data_width=16, coeff_width=16)
    path = _wav(tmp_path, data)
    assert np.array_equal(read_samples(path, cfg, channel=1), tone_ch.astype(np.int64))
    with pytest.raises(ConfigError):
        read_samples(path, cfg, channel=2)


def test_samples_wider_than_data_width(tmp_path):
    cfg = BlockConfig(block_length=SCENARIO_N, sample_rate=SCENARIO_FS,
                      target_frequency=100_000, data_width=8, coeff_width=16)
    with pytest.raises(SampleRangeError):
        read_samples(_wav(tmp_path, _stream(BITS)), cfg)


def test_float_wav_rejected(tmp_path):
    cfg = BlockConfig(block_length=SCENARIO_N, sample_rate=SCENARIO_FS,
                      target_frequency=100_000, data_width=16, coeff_width=16)
    path = _wav(tmp_path, np.zeros(20, dtype=np.float32))
    with pytest.raises(SampleRangeError):
        read_samples(path, cfg)


def test_uint8_wav_is_recentred(tmp_path):
    cfg = BlockConfig(block_length=SCENARIO_N, sample_rate=SCENARIO_FS,
                      target_frequency=100_000, data_width=8, coeff_width=16)
    path = _wav(tmp_path, np.array([0, 128, 255], dtype=np.uint8))
    assert list(read_samples(path, cfg)) == [-128, 0, 127]


def test_sample_rate_mismatch(tmp_path, capsys):
    rc = main([_config(tmp_path), _wav(tmp_path, _stream(BITS), rate=48000)])
    assert rc == 1
    assert "Error:" in capsys.readouterr().out


def test_bad_config_exit_code(tmp_path, capsys):
    rc = main([_config(tmp_path, target_frequency=600_000), _wav(tmp_path, _stream(BITS))])
    assert rc == 1
    assert "Nyquist" in capsys.readouterr().out


def test_missing_input(tmp_path, capsys):
    rc = main([_config(tmp_path), str(tmp_path / "missing.wav")])
    assert rc == 1
    assert "not found" in capsys.readouterr().out


def test_unreadable_wav(tmp_path, capsys):
    bogus = tmp_path / "noise.wav"
    bogus.write_bytes(b"this is not a RIFF file at all")
    rc = main([_config(tmp_path), str(bogus)])
    assert rc == 1
    assert "not a readable WAV file" in capsys.readouterr().out
