"""
Live Client Package

Provides classes and utilities for:
- Gemini Live WebSocket transport
- Session setup, audio ingestion and tool-call acknowledgment
- Wire message building and parsing
- Event dispatching and handling
"""

from .api import LiveAPI
from .config import LiveSessionConfig
from .event_handler import LiveEventHandler
from .messages import (
    AUDIO_MIME_TYPE,
    SetupComplete,
    ToolCall,
    ToolInvocation,
    TranscriptText,
    TurnComplete,
    build_audio_message,
    build_setup_message,
    build_tool_response,
    parse_server_message,
)
from .session import LiveSession
from .tools import CHECK_FACT_TOOL_NAME, SYSTEM_PROMPT, check_fact_def

__all__ = [
    "LiveSession",
    "LiveSessionConfig",
    "LiveAPI",
    "LiveEventHandler",
    "ToolInvocation",
    "SetupComplete",
    "TranscriptText",
    "ToolCall",
    "TurnComplete",
    "build_setup_message",
    "build_audio_message",
    "build_tool_response",
    "parse_server_message",
    "AUDIO_MIME_TYPE",
    "CHECK_FACT_TOOL_NAME",
    "SYSTEM_PROMPT",
    "check_fact_def",
]
