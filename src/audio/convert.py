"""
Conversion of source PCM to the live API input format (mono, int16, 16 kHz).

Resampling is nearest-neighbor and multi-channel audio is averaged down to
mono. Neither step filters, so the output is lossy by construction.
"""

import logging
import math
from typing import Dict, Union

import numpy as np

from src.audio.wav import WavDescriptor
from src.exceptions import MalformedFileError, UnsupportedFormatError

logger = logging.getLogger(__name__)

TARGET_SAMPLE_RATE = 16000
TARGET_BITS_PER_SAMPLE = 16
INT16_MIN = -32768
INT16_MAX = 32767

# Output frames converted per pass; bounds the temporary arrays
CONVERT_BLOCK_FRAMES = 65536

# Little-endian source sample types by bit depth (8-bit WAV is unsigned)
SAMPLE_DTYPES: Dict[int, str] = {
    8: "u1",
    16: "<i2",
    32: "<i4",
}


def output_frame_count(source_frames: int, source_rate: int, target_rate: int = TARGET_SAMPLE_RATE) -> int:
    """
    Number of output samples produced for ``source_frames`` input frames.

    Args:
        source_frames (int): Frames in the source payload.
        source_rate (int): Source sample rate in Hz.
        target_rate (int): Target sample rate in Hz.

    Returns:
        int: floor(source_frames * target_rate / source_rate)
    """
    return int(math.floor(source_frames * (target_rate / source_rate)))


def _normalize(frames: np.ndarray, bits_per_sample: int) -> np.ndarray:
    """Scale raw samples to the signed 16-bit range as float64."""
    values = frames.astype(np.float64)
    if bits_per_sample == 8:
        return (values - 128.0) * 256.0
    if bits_per_sample == 32:
        return values / 65536.0
    return values


def convert_to_target_format(
    data: Union[bytes, bytearray, memoryview],
    descriptor: WavDescriptor,
    target_rate: int = TARGET_SAMPLE_RATE,
) -> bytes:
    """
    Convert interleaved source PCM to mono 16-bit little-endian PCM.

    Args:
        data: Raw PCM payload described by ``descriptor``.
        descriptor (WavDescriptor): Format of ``data``.
        target_rate (int): Output sample rate in Hz.

    Returns:
        bytes: Mono int16 little-endian samples at ``target_rate``.

    Raises:
        UnsupportedFormatError: If the bit depth is not 8, 16 or 32.
        MalformedFileError: If the descriptor has no channels or no sample rate.
    """
    bits_per_sample = descriptor.bits_per_sample
    if bits_per_sample not in SAMPLE_DTYPES:
        raise UnsupportedFormatError(f"Unsupported bits per sample: {bits_per_sample}")

    channels = descriptor.channel_count
    if channels == 0 or descriptor.sample_rate == 0:
        raise MalformedFileError(
            f"Invalid WAV format: {descriptor.sample_rate}Hz, {channels}ch"
        )

    frame_size = (bits_per_sample // 8) * channels
    source_frames = len(data) // frame_size
    if len(data) % frame_size:
        logger.debug(f"Ignoring {len(data) % frame_size} trailing bytes of a partial frame")

    resample_ratio = target_rate / descriptor.sample_rate
    output_frames = output_frame_count(source_frames, descriptor.sample_rate, target_rate)
    if output_frames == 0:
        return b""

    samples = np.frombuffer(
        data, dtype=SAMPLE_DTYPES[bits_per_sample], count=source_frames * channels
    ).reshape(source_frames, channels)

    output = np.empty(output_frames, dtype="<i2")
    for start in range(0, output_frames, CONVERT_BLOCK_FRAMES):
        stop = min(start + CONVERT_BLOCK_FRAMES, output_frames)
        # Nearest-neighbor: output index i reads source frame floor(i / ratio)
        source_index = np.floor(
            np.arange(start, stop, dtype=np.float64) / resample_ratio
        ).astype(np.int64)
        np.minimum(source_index, source_frames - 1, out=source_index)

        mixed = _normalize(samples[source_index], bits_per_sample).sum(axis=1) / channels
        # Round half up, then clamp to int16
        output[start:stop] = np.clip(np.floor(mixed + 0.5), INT16_MIN, INT16_MAX)
    return output.tobytes()
