"""
Pull-based delivery of converted PCM in fixed-duration chunks.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Union

from src.audio.convert import (
    TARGET_BITS_PER_SAMPLE,
    TARGET_SAMPLE_RATE,
    convert_to_target_format,
)
from src.audio.wav import parse_wav_header

logger = logging.getLogger(__name__)

CHUNK_DURATION_MS = 100
BYTES_PER_SAMPLE = TARGET_BITS_PER_SAMPLE // 8


def chunk_size_bytes(
    sample_rate: int = TARGET_SAMPLE_RATE, chunk_duration_ms: int = CHUNK_DURATION_MS
) -> int:
    """Bytes in one chunk of mono 16-bit audio (3200 for 100 ms at 16 kHz)."""
    samples_per_chunk = (sample_rate * chunk_duration_ms) // 1000
    return samples_per_chunk * BYTES_PER_SAMPLE


class AudioChunkStream:
    """
    Cursor over a target-format PCM buffer that hands out chunks in order.

    Iterate with ``async for`` or call :meth:`next_chunk` directly. With
    ``simulate_realtime`` set, the stream sleeps ``chunk_duration_ms``
    between successive chunks so audio arrives at playback speed.
    """

    def __init__(
        self,
        pcm: bytes,
        sample_rate: int = TARGET_SAMPLE_RATE,
        chunk_duration_ms: int = CHUNK_DURATION_MS,
        simulate_realtime: bool = False,
    ) -> None:
        if chunk_duration_ms <= 0:
            raise ValueError("chunk_duration_ms must be positive")
        self.pcm = pcm
        self.sample_rate = sample_rate
        self.chunk_duration_ms = chunk_duration_ms
        self.simulate_realtime = simulate_realtime
        self.chunk_size = chunk_size_bytes(sample_rate, chunk_duration_ms)
        if self.chunk_size <= 0:
            raise ValueError("Chunk duration is too short for the sample rate")
        self._cursor = 0

    @property
    def total_chunks(self) -> int:
        return -(-len(self.pcm) // self.chunk_size)

    @property
    def chunks_sent(self) -> int:
        return -(-self._cursor // self.chunk_size)

    @property
    def duration_seconds(self) -> float:
        return len(self.pcm) / (self.sample_rate * BYTES_PER_SAMPLE)

    def exhausted(self) -> bool:
        return self._cursor >= len(self.pcm)

    def reset(self) -> None:
        """Restart the stream from the first chunk."""
        self._cursor = 0

    async def next_chunk(self) -> Optional[bytes]:
        """
        Return the next chunk, or None once the buffer is exhausted.

        The final chunk may be shorter than ``chunk_size``; it is never padded.
        """
        if self.exhausted():
            return None
        if self.simulate_realtime and self._cursor > 0:
            await asyncio.sleep(self.chunk_duration_ms / 1000)

        start = self._cursor
        self._cursor = min(start + self.chunk_size, len(self.pcm))
        chunk = self.pcm[start : self._cursor]

        if self.exhausted():
            logger.info("[Audio] Stream complete")
        return chunk

    def __aiter__(self) -> "AudioChunkStream":
        return self

    async def __anext__(self) -> bytes:
        chunk = await self.next_chunk()
        if chunk is None:
            raise StopAsyncIteration
        return chunk


def load_audio_stream(
    file_path: Union[str, Path],
    simulate_realtime: bool = False,
    chunk_duration_ms: int = CHUNK_DURATION_MS,
) -> AudioChunkStream:
    """
    Read a WAV file and prepare it for streaming to the live API.

    Decoding happens eagerly so that format errors surface before any audio
    is sent.

    Args:
        file_path: Path to a PCM WAV file.
        simulate_realtime (bool): Pace chunks at playback speed.
        chunk_duration_ms (int): Duration of each chunk.

    Returns:
        AudioChunkStream: Stream over 16 kHz mono 16-bit PCM.
    """
    buffer = Path(file_path).read_bytes()

    header = parse_wav_header(buffer)
    logger.info(
        f"[Audio] Format: {header.sample_rate}Hz, {header.channel_count}ch, "
        f"{header.bits_per_sample}-bit, {header.duration_seconds:.1f}s"
    )

    audio_data = memoryview(buffer)[header.data_offset : header.data_offset + header.data_size]
    pcm = convert_to_target_format(audio_data, header)
    logger.info(
        f"[Audio] Converted to {TARGET_SAMPLE_RATE}Hz mono {TARGET_BITS_PER_SAMPLE}-bit"
    )

    stream = AudioChunkStream(
        pcm,
        chunk_duration_ms=chunk_duration_ms,
        simulate_realtime=simulate_realtime,
    )
    logger.info(
        f"[Audio] Streaming {stream.total_chunks} chunks ({chunk_duration_ms}ms each)"
    )
    return stream
