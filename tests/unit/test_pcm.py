# pylint: disable=missing-module-docstring,missing-function-docstring
import base64
from pathlib import Path

import numpy as np
import pytest
import soundfile as sf

from audio.export import write_wav
from audio.pcm import (
    base64_to_int16,
    empty_samples,
    freeze,
    int16_to_base64,
    merge_int16,
    ms_to_sample_index,
)


def test_base64_decodes_little_endian_int16():
    data = base64.b64encode(bytes([0x01, 0x00, 0xFF, 0xFF, 0x00, 0x80])).decode("ascii")

    samples = base64_to_int16(data)

    assert samples.tolist() == [1, -1, -32768]


def test_base64_drops_trailing_odd_byte():
    data = base64.b64encode(bytes([0x02, 0x00, 0x7F])).decode("ascii")

    assert base64_to_int16(data).tolist() == [2]


def test_base64_of_empty_string_is_empty():
    assert base64_to_int16("").size == 0


def test_int16_to_base64_matches_wire_bytes():
    encoded = int16_to_base64(np.array([1, -1], dtype=np.int16))

    assert base64.b64decode(encoded) == bytes([0x01, 0x00, 0xFF, 0xFF])


def test_merge_keeps_order_and_is_read_only():
    merged = merge_int16(np.array([1, 2], dtype=np.int16), np.array([3], dtype=np.int16))

    assert merged.tolist() == [1, 2, 3]
    assert not merged.flags.writeable


def test_empty_and_frozen_buffers_reject_writes():
    assert empty_samples().size == 0
    assert not empty_samples().flags.writeable

    frozen = freeze(np.zeros(3, dtype=np.int16))
    with pytest.raises(ValueError):
        frozen[0] = 1


@pytest.mark.parametrize(
    "ms, expected",
    [(0, 0), (1, 24), (100, 2_400), (500, 12_000), (1_000, 24_000), (1_001, 24_024)],
)
def test_ms_to_sample_index(ms: int, expected: int):
    assert ms_to_sample_index(ms) == expected


def test_ms_to_sample_index_other_rate_floors():
    assert ms_to_sample_index(3, sample_rate_hz=16_000) == 48
    assert ms_to_sample_index(1, sample_rate_hz=8_000) == 8
    assert ms_to_sample_index(1, sample_rate_hz=22_050) == 22


def test_write_wav_round_trips_through_soundfile(tmp_path: Path):
    samples = np.array([0, 1000, -1000, 32767, -32768], dtype=np.int16)

    out = write_wav(tmp_path / "nested" / "a1.wav", samples)

    data, rate = sf.read(str(out), dtype="int16")
    assert rate == 24_000
    assert data.tolist() == samples.tolist()
    info = sf.info(str(out))
    assert info.channels == 1
    assert info.subtype == "PCM_16"
