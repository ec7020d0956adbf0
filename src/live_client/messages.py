"""
Gemini Live wire messages.

Outbound messages are built as plain dicts ready for ``json.dumps``. Inbound
payloads are parsed into a list of typed events, one per field present in
the message, so callers can react to co-occurring fields independently.
"""

import base64
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from src.exceptions import MessageParseError

logger = logging.getLogger(__name__)

AUDIO_MIME_TYPE = "audio/pcm;rate=16000"


# -----------------------------------------------------------
# Outbound
# -----------------------------------------------------------


def build_setup_message(
    model: str,
    system_instruction: str,
    function_declarations: Sequence[dict],
    response_modalities: Sequence[str] = ("TEXT",),
) -> dict:
    """Session setup request sent once the socket is open."""
    return {
        "setup": {
            "model": model,
            "generationConfig": {
                "responseModalities": list(response_modalities),
            },
            "systemInstruction": {
                "parts": [{"text": system_instruction}],
            },
            "tools": [
                {
                    "functionDeclarations": list(function_declarations),
                }
            ],
        }
    }


def build_audio_message(chunk: bytes, mime_type: str = AUDIO_MIME_TYPE) -> dict:
    """Realtime input message carrying one base64-encoded PCM chunk."""
    return {
        "realtimeInput": {
            "mediaChunks": [
                {
                    "mimeType": mime_type,
                    "data": base64.b64encode(chunk).decode("utf-8"),
                }
            ]
        }
    }


def build_tool_response(
    name: str, response: Dict[str, Any], call_id: Optional[str] = None
) -> dict:
    """Acknowledgment for a single function call."""
    function_response: Dict[str, Any] = {"name": name, "response": response}
    if call_id:
        function_response["id"] = call_id
    return {"toolResponse": {"functionResponses": [function_response]}}


# -----------------------------------------------------------
# Inbound
# -----------------------------------------------------------


@dataclass(frozen=True)
class ToolInvocation:
    """A function call requested by the model."""

    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)
    correlation_id: Optional[str] = None


@dataclass(frozen=True)
class SetupComplete:
    """The server accepted the session setup."""


@dataclass(frozen=True)
class TranscriptText:
    """One text part of a model turn."""

    text: str


@dataclass(frozen=True)
class ToolCall:
    """One or more function calls issued in a single message."""

    invocations: Tuple[ToolInvocation, ...]


@dataclass(frozen=True)
class TurnComplete:
    """The model finished its current turn."""


ServerEvent = Union[SetupComplete, TranscriptText, ToolCall, TurnComplete]


def _expect(value: Any, kind: type, path: str) -> Any:
    if not isinstance(value, kind):
        raise MessageParseError(
            f"Expected {kind.__name__} at '{path}', got {type(value).__name__}"
        )
    return value


def _parse_function_call(call: Any, index: int) -> ToolInvocation:
    path = f"toolCall.functionCalls[{index}]"
    call = _expect(call, dict, path)
    name = _expect(call.get("name"), str, f"{path}.name")
    args = call.get("args")
    if args is None:
        args = {}
    _expect(args, dict, f"{path}.args")
    call_id = call.get("id")
    if call_id is not None:
        _expect(call_id, str, f"{path}.id")
    return ToolInvocation(name=name, arguments=args, correlation_id=call_id or None)


def _parse_text_parts(server_content: dict) -> List[TranscriptText]:
    model_turn = server_content.get("modelTurn")
    if model_turn is None:
        return []
    _expect(model_turn, dict, "serverContent.modelTurn")
    parts = model_turn.get("parts") or []
    _expect(parts, list, "serverContent.modelTurn.parts")

    texts: List[TranscriptText] = []
    for i, part in enumerate(parts):
        path = f"serverContent.modelTurn.parts[{i}]"
        try:
            _expect(part, dict, path)
            text = part.get("text")
            if text:
                texts.append(TranscriptText(_expect(text, str, f"{path}.text")))
        except MessageParseError as e:
            logger.warning(f"Skipping malformed content part: {e}")
    return texts


def _parse_tool_call(tool_call: Any) -> Optional[ToolCall]:
    _expect(tool_call, dict, "toolCall")
    calls = tool_call.get("functionCalls") or []
    _expect(calls, list, "toolCall.functionCalls")

    invocations: List[ToolInvocation] = []
    for i, call in enumerate(calls):
        try:
            invocations.append(_parse_function_call(call, i))
        except MessageParseError as e:
            logger.warning(f"Skipping malformed function call: {e}")
    if not invocations:
        return None
    return ToolCall(tuple(invocations))


def parse_server_message(raw: Union[str, bytes, bytearray]) -> List[ServerEvent]:
    """
    Parse one inbound frame into the events it carries.

    Events are returned in a fixed order: setup acknowledgment, transcript
    parts (in message order), tool calls, then turn completion. Fields are
    independent: a malformed content part, function call or field block is
    logged and skipped while the rest of the frame is still returned.

    Raises:
        MessageParseError: If the frame is not a JSON object.
    """
    try:
        if isinstance(raw, (bytes, bytearray)):
            raw = raw.decode("utf-8")
        message = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MessageParseError(f"Invalid JSON payload: {e}") from e

    _expect(message, dict, "$")
    events: List[ServerEvent] = []

    if message.get("setupComplete") is not None:
        events.append(SetupComplete())

    turn_complete = False
    server_content = message.get("serverContent")
    if server_content is not None:
        try:
            _expect(server_content, dict, "serverContent")
            turn_complete = bool(server_content.get("turnComplete"))
            events.extend(_parse_text_parts(server_content))
        except MessageParseError as e:
            logger.warning(f"Skipping malformed serverContent: {e}")

    tool_call = message.get("toolCall")
    if tool_call is not None:
        try:
            parsed = _parse_tool_call(tool_call)
        except MessageParseError as e:
            logger.warning(f"Skipping malformed toolCall: {e}")
        else:
            if parsed is not None:
                events.append(parsed)

    if turn_complete:
        events.append(TurnComplete())

    return events
