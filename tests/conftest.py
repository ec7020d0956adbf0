import struct
from typing import Iterable, Optional, Tuple

import pytest


def build_wav(
    pcm: bytes,
    sample_rate: int = 16000,
    channels: int = 1,
    bits_per_sample: int = 16,
    format_tag: int = 1,
    extra_chunks: Iterable[Tuple[bytes, bytes]] = (),
    data_before_fmt: bool = False,
    declared_data_size: Optional[int] = None,
) -> bytes:
    """Assemble a RIFF/WAVE file around ``pcm``."""
    block_align = channels * bits_per_sample // 8
    fmt_body = struct.pack(
        "<HHIIHH",
        format_tag,
        channels,
        sample_rate,
        sample_rate * block_align,
        block_align,
        bits_per_sample,
    )
    fmt_chunk = b"fmt " + struct.pack("<I", len(fmt_body)) + fmt_body
    data_size = len(pcm) if declared_data_size is None else declared_data_size
    data_chunk = b"data" + struct.pack("<I", data_size) + pcm
    extras = b"".join(
        tag + struct.pack("<I", len(body)) + body for tag, body in extra_chunks
    )
    chunks = data_chunk + fmt_chunk if data_before_fmt else fmt_chunk + data_chunk
    body = b"WAVE" + extras + chunks
    return b"RIFF" + struct.pack("<I", len(body)) + body


@pytest.fixture
def make_wav():
    """Fixture providing the WAV builder."""
    return build_wav
