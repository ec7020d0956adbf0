"""
Verdict command-line entry point.

Streams a WAV file to the Gemini Live API and logs every factual claim the
model flags through the ``check_fact`` tool.

Usage:
    python -m src.main <audio-file.wav> [--no-realtime] [--final-wait SECONDS]
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml
from opentelemetry import trace

from src.audio.stream import load_audio_stream
from src.exceptions import VerdictError
from src.factcheck.research import handle_tool_call
from src.live_client.config import LiveSessionConfig
from src.live_client.session import LiveSession
from utils import settings
from utils.ml_logging import get_logger

logger = get_logger("verdict")
tracer = trace.get_tracer(__name__)


def _log_transcript(text: str) -> None:
    logger.info(f"[Transcript] {text}")


def _log_error(error: Exception) -> None:
    logger.error(f"[Error] {error}")


async def run(
    file_path: str,
    api_key: str,
    config: LiveSessionConfig,
    simulate_realtime: bool = True,
    final_wait: float = 3.0,
) -> None:
    """
    Decode ``file_path``, stream it through a live session, then close.

    The file is decoded before connecting so format errors abort the run
    without opening a session.
    """
    stream = load_audio_stream(file_path, simulate_realtime=simulate_realtime)

    session = LiveSession(
        api_key,
        config,
        on_transcript=_log_transcript,
        on_tool_call=handle_tool_call,
        on_error=_log_error,
    )

    with tracer.start_as_current_span("verdict.run"):
        try:
            logger.info("[Status] Connecting to Gemini Live API...")
            await session.connect()
            logger.info("[Status] Connected, streaming audio...")

            async for chunk in stream:
                await session.send_audio(chunk)

            logger.info(
                "[Status] Audio stream complete, waiting for final responses..."
            )
            await asyncio.sleep(final_wait)
        finally:
            await session.close()
            logger.info("[Status] Session closed")


def build_config(config_path: Optional[str], model: Optional[str]) -> LiveSessionConfig:
    """Environment settings, overlaid by an optional YAML file, then CLI flags."""
    config = LiveSessionConfig(
        model=settings.GEMINI_LIVE_MODEL, url=settings.GEMINI_LIVE_URL
    )
    if config_path:
        config = LiveSessionConfig.from_yaml(config_path, base=config)
    if model:
        config.model = model
    return config


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Verdict - real-time fact checker for WAV audio"
    )
    parser.add_argument("file", nargs="?", help="Path to a PCM WAV file")
    parser.add_argument(
        "--no-realtime",
        dest="simulate_realtime",
        action="store_false",
        default=settings.SIMULATE_REALTIME,
        help="Send chunks back-to-back instead of at playback speed",
    )
    parser.add_argument(
        "--final-wait",
        type=float,
        default=settings.FINAL_RESPONSE_WAIT_S,
        help="Seconds to wait for trailing responses after the last chunk",
    )
    parser.add_argument(
        "--config",
        default=settings.LIVE_SESSION_CONFIG_PATH or None,
        help="YAML file overriding the live session configuration",
    )
    parser.add_argument("--model", default=None, help="Gemini Live model name")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL)
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    level = logging.getLevelName(args.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logger.setLevel(level)
    # Library modules log under the ``src`` package logger
    get_logger("src", level=level)

    if not args.file:
        logger.error("Usage: python -m src.main <audio-file.wav>")
        return 1

    if not Path(args.file).is_file():
        logger.error(f"Error: File not found: {args.file}")
        return 1

    api_key = settings.GOOGLE_API_KEY
    if not api_key:
        logger.error("Error: GOOGLE_API_KEY environment variable is required")
        logger.error("Set it in your .env file or export it in your shell")
        return 1

    try:
        config = build_config(args.config, args.model)
    except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
        logger.error(f"Error: invalid session config {args.config}: {e}")
        return 1

    logger.keyinfo("Verdict v0.1 - Real-time Fact Checker")
    logger.info(f"Processing: {args.file}")

    try:
        asyncio.run(
            run(
                args.file,
                api_key,
                config,
                simulate_realtime=args.simulate_realtime,
                final_wait=args.final_wait,
            )
        )
    except VerdictError as e:
        logger.error(f"[Fatal Error] {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
