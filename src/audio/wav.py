"""
WAV (RIFF) container parsing.

Only the pieces needed to locate linear PCM samples are read: the ``fmt ``
chunk for the sample layout and the ``data`` chunk for the payload bounds.
"""

import logging
import struct
from dataclasses import dataclass

from src.exceptions import FormatError, MalformedFileError, UnsupportedFormatError

logger = logging.getLogger(__name__)

RIFF_HEADER_SIZE = 12
CHUNK_HEADER_SIZE = 8
FMT_CHUNK_MIN_SIZE = 16
WAVE_FORMAT_PCM = 1


@dataclass(frozen=True)
class WavDescriptor:
    """Sample layout and payload location of a PCM WAV file."""

    sample_rate: int
    channel_count: int
    bits_per_sample: int
    data_offset: int
    data_size: int

    @property
    def frame_size(self) -> int:
        """Bytes per frame (one sample for every channel)."""
        return (self.bits_per_sample // 8) * self.channel_count

    @property
    def frame_count(self) -> int:
        if self.frame_size == 0:
            return 0
        return self.data_size // self.frame_size

    @property
    def duration_seconds(self) -> float:
        if self.sample_rate == 0:
            return 0.0
        return self.frame_count / self.sample_rate


def parse_wav_header(buffer: bytes) -> WavDescriptor:
    """
    Parse a RIFF/WAVE buffer and locate its PCM payload.

    Args:
        buffer (bytes): Complete contents of a WAV file.

    Returns:
        WavDescriptor: Format fields plus the byte range of the data chunk.

    Raises:
        FormatError: If the RIFF or WAVE markers are missing.
        UnsupportedFormatError: If the fmt chunk declares a non-PCM format.
        MalformedFileError: If the data chunk is missing, precedes the fmt
            chunk, or the fmt chunk is truncated.
    """
    if len(buffer) < RIFF_HEADER_SIZE or buffer[0:4] != b"RIFF":
        raise FormatError("Invalid WAV file: missing RIFF header")
    if buffer[8:12] != b"WAVE":
        raise FormatError("Invalid WAV file: missing WAVE format")

    offset = RIFF_HEADER_SIZE
    fmt_found = False
    channel_count = 0
    sample_rate = 0
    bits_per_sample = 0

    while offset + CHUNK_HEADER_SIZE <= len(buffer):
        chunk_id = bytes(buffer[offset : offset + 4])
        (chunk_size,) = struct.unpack_from("<I", buffer, offset + 4)

        if chunk_id == b"fmt ":
            if chunk_size < FMT_CHUNK_MIN_SIZE or offset + 8 + FMT_CHUNK_MIN_SIZE > len(buffer):
                raise MalformedFileError("Invalid WAV file: fmt chunk is truncated")
            audio_format, channel_count, sample_rate = struct.unpack_from(
                "<HHI", buffer, offset + 8
            )
            if audio_format != WAVE_FORMAT_PCM:
                raise UnsupportedFormatError(
                    f"Only PCM WAV files are supported (format tag {audio_format})"
                )
            (bits_per_sample,) = struct.unpack_from("<H", buffer, offset + 22)
            fmt_found = True

        elif chunk_id == b"data":
            if not fmt_found:
                raise MalformedFileError(
                    "Invalid WAV file: fmt chunk must precede data chunk"
                )
            data_offset = offset + CHUNK_HEADER_SIZE
            available = len(buffer) - data_offset
            if chunk_size > available:
                logger.warning(
                    f"Data chunk declares {chunk_size} bytes but only {available} are present; truncating"
                )
                chunk_size = available
            return WavDescriptor(
                sample_rate=sample_rate,
                channel_count=channel_count,
                bits_per_sample=bits_per_sample,
                data_offset=data_offset,
                data_size=chunk_size,
            )

        else:
            logger.debug(f"Skipping {chunk_id!r} chunk ({chunk_size} bytes)")

        offset += CHUNK_HEADER_SIZE + chunk_size

    raise MalformedFileError("Invalid WAV file: data chunk not found")
