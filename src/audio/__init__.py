"""
Audio Package

Turns PCM WAV files into the live API input format:
- RIFF/WAVE header parsing
- Nearest-neighbor resampling and mono downmix to 16 kHz int16
- Fixed-duration chunk streaming with optional real-time pacing
"""

from .convert import TARGET_SAMPLE_RATE, convert_to_target_format, output_frame_count
from .stream import CHUNK_DURATION_MS, AudioChunkStream, chunk_size_bytes, load_audio_stream
from .wav import WavDescriptor, parse_wav_header

__all__ = [
    "WavDescriptor",
    "parse_wav_header",
    "convert_to_target_format",
    "output_frame_count",
    "AudioChunkStream",
    "chunk_size_bytes",
    "load_audio_stream",
    "TARGET_SAMPLE_RATE",
    "CHUNK_DURATION_MS",
]
