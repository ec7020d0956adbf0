"""
Tests for resampling and downmixing to 16 kHz mono int16.
"""

import math

import numpy as np
import pytest

from src.audio import convert
from src.audio.convert import convert_to_target_format, output_frame_count
from src.audio.wav import WavDescriptor
from src.exceptions import MalformedFileError, UnsupportedFormatError


def descriptor_for(data: bytes, sample_rate=16000, channels=1, bits=16) -> WavDescriptor:
    return WavDescriptor(
        sample_rate=sample_rate,
        channel_count=channels,
        bits_per_sample=bits,
        data_offset=44,
        data_size=len(data),
    )


def as_int16(pcm: bytes) -> np.ndarray:
    return np.frombuffer(pcm, dtype="<i2")


class TestResampling:
    """Test nearest-neighbor resampling."""

    def test_8khz_upsample_example(self):
        """Test 800 frames at 8 kHz become 1600 samples (3200 bytes)."""
        source = np.arange(800, dtype="<i2")
        data = source.tobytes()

        pcm = convert_to_target_format(data, descriptor_for(data, sample_rate=8000))

        assert len(pcm) == 3200
        out = as_int16(pcm)
        np.testing.assert_array_equal(out, np.repeat(source, 2))

    def test_identity_at_target_rate(self):
        data = np.array([0, 1, -1, 32767, -32768], dtype="<i2").tobytes()
        assert convert_to_target_format(data, descriptor_for(data)) == data

    def test_downsample_picks_every_other_frame(self):
        source = np.arange(10, dtype="<i2")
        data = source.tobytes()

        out = as_int16(convert_to_target_format(data, descriptor_for(data, sample_rate=32000)))

        np.testing.assert_array_equal(out, [0, 2, 4, 6, 8])

    @pytest.mark.parametrize(
        "sample_rate,frames",
        [(8000, 801), (16000, 1001), (32000, 801), (64000, 1003), (44100, 4410), (22050, 1001)],
    )
    def test_output_length(self, sample_rate, frames):
        """Test output sample count is floor(N * T / R)."""
        data = np.zeros(frames, dtype="<i2").tobytes()

        pcm = convert_to_target_format(data, descriptor_for(data, sample_rate=sample_rate))

        assert len(pcm) // 2 == output_frame_count(frames, sample_rate)
        assert output_frame_count(frames, sample_rate) == math.floor(frames * (16000 / sample_rate))

    def test_exact_ratio_lengths(self):
        assert output_frame_count(801, 32000) == 400
        assert output_frame_count(801, 8000) == 1602
        assert output_frame_count(3, 64000) == 0

    def test_empty_payload(self):
        assert convert_to_target_format(b"", descriptor_for(b"", sample_rate=8000)) == b""

    def test_partial_trailing_frame_is_ignored(self):
        """Test a dangling byte after the last full frame does not add output."""
        data = np.array([5, 6, 7], dtype="<i2").tobytes() + b"\x01"

        out = as_int16(convert_to_target_format(data, descriptor_for(data)))

        np.testing.assert_array_equal(out, [5, 6, 7])

    @pytest.mark.parametrize("sample_rate", [8000, 44100])
    def test_blocked_conversion_matches_single_pass(self, monkeypatch, sample_rate):
        """Test output is identical when split across many small blocks."""
        source = np.arange(-3000, 3000, dtype="<i2")
        data = source.tobytes()
        descriptor = descriptor_for(data, sample_rate=sample_rate, channels=2)

        single_pass = convert_to_target_format(data, descriptor)
        monkeypatch.setattr(convert, "CONVERT_BLOCK_FRAMES", 7)
        blocked = convert_to_target_format(data, descriptor)

        assert blocked == single_pass
        assert len(blocked) // 2 == output_frame_count(3000, sample_rate)

    def test_blocked_upsample_values(self, monkeypatch):
        monkeypatch.setattr(convert, "CONVERT_BLOCK_FRAMES", 5)
        source = np.arange(23, dtype="<i2")
        data = source.tobytes()

        out = as_int16(convert_to_target_format(data, descriptor_for(data, sample_rate=8000)))

        np.testing.assert_array_equal(out, np.repeat(source, 2))


class TestDownmix:
    """Test bit-depth normalization, channel averaging and clamping."""

    def test_stereo_average_rounds_half_up(self):
        """Test .5 averages round toward positive infinity."""
        data = np.array([100, 201, -100, -201, 10, 20], dtype="<i2").tobytes()

        out = as_int16(convert_to_target_format(data, descriptor_for(data, channels=2)))

        np.testing.assert_array_equal(out, [151, -150, 15])

    def test_8bit_unsigned(self):
        data = bytes([0, 128, 255, 129])

        out = as_int16(convert_to_target_format(data, descriptor_for(data, bits=8)))

        np.testing.assert_array_equal(out, [-32768, 0, 32512, 256])

    def test_32bit_scaled_and_clamped(self):
        source = np.array([1000 * 65536, 2147483647, -2147483648, 98304], dtype="<i4")
        data = source.tobytes()

        out = as_int16(convert_to_target_format(data, descriptor_for(data, bits=32)))

        # 32767.99998 rounds to 32768 and clamps; 1.5 rounds up to 2
        np.testing.assert_array_equal(out, [1000, 32767, -32768, 2])

    def test_multichannel_32bit(self):
        source = np.array([65536, 3 * 65536, 5 * 65536, 7 * 65536, 9 * 65536, 11 * 65536], dtype="<i4")
        data = source.tobytes()

        out = as_int16(convert_to_target_format(data, descriptor_for(data, channels=3, bits=32)))

        np.testing.assert_array_equal(out, [3, 9])

    def test_values_stay_in_int16_range(self):
        rng = np.random.default_rng(7)
        source = rng.integers(-(2**31), 2**31 - 1, size=4000, dtype=np.int64).astype("<i4")
        data = source.tobytes()

        pcm = convert_to_target_format(
            data, descriptor_for(data, sample_rate=11025, channels=4, bits=32)
        )
        out = as_int16(pcm)

        assert out.dtype == np.dtype("<i2")
        assert len(out) == output_frame_count(1000, 11025)
        assert out.min() >= -32768
        assert out.max() <= 32767


class TestConversionErrors:
    """Test rejection of unsupported layouts."""

    @pytest.mark.parametrize("bits", [4, 12, 24, 64])
    def test_unsupported_bit_depth(self, bits):
        with pytest.raises(UnsupportedFormatError, match=str(bits)):
            convert_to_target_format(b"\x00" * 12, descriptor_for(b"\x00" * 12, bits=bits))

    def test_zero_channels(self):
        with pytest.raises(MalformedFileError):
            convert_to_target_format(b"\x00\x00", descriptor_for(b"\x00\x00", channels=0))

    def test_zero_sample_rate(self):
        with pytest.raises(MalformedFileError):
            convert_to_target_format(b"\x00\x00", descriptor_for(b"\x00\x00", sample_rate=0))
