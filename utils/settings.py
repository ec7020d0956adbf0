"""
utils/settings.py
=================
Central place for every environment variable and constant
used by the Verdict streamer.
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

from utils.ml_logging import get_logger

# Load environment variables from .env file
load_dotenv(override=False)
logger = get_logger("settings")


# ------------------------------------------------------------------------------
# Gemini Live API
# ------------------------------------------------------------------------------
GOOGLE_API_KEY: str = os.getenv("GOOGLE_API_KEY", "")
GEMINI_LIVE_URL: str = os.getenv(
    "GEMINI_LIVE_URL",
    "wss://generativelanguage.googleapis.com/ws/"
    "google.ai.generativelanguage.v1beta.GenerativeService.BidiGenerateContent",
)
GEMINI_LIVE_MODEL: str = os.getenv(
    "GEMINI_LIVE_MODEL", "gemini-2.5-flash-preview-native-audio-dialog"
)

# Optional YAML overlay for LiveSessionConfig (model, instructions, timeouts)
LIVE_SESSION_CONFIG_PATH: str = os.getenv("LIVE_SESSION_CONFIG_PATH", "")

# ------------------------------------------------------------------------------
# Streaming
# ------------------------------------------------------------------------------
SIMULATE_REALTIME: bool = os.getenv("SIMULATE_REALTIME", "true").lower() in (
    "1",
    "true",
    "yes",
)
# Seconds to keep the session open after the last chunk for trailing tool calls
FINAL_RESPONSE_WAIT_S: float = float(os.getenv("FINAL_RESPONSE_WAIT_S", "3.0"))

# ------------------------------------------------------------------------------
# Logging
# ------------------------------------------------------------------------------
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
