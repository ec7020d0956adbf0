# session.py drives one Gemini Live session: setup negotiation, audio
# ingestion, and dispatch of transcript and tool-call events to listeners.

import asyncio
import logging
import uuid
from typing import Any, Callable, Dict, Optional

from src.enums.session_state import SessionState
from src.exceptions import (
    LiveSessionError,
    MessageParseError,
    SessionNotReadyError,
    TransportError,
)
from src.live_client.api import LiveAPI
from src.live_client.config import LiveSessionConfig
from src.live_client.event_handler import LiveEventHandler
from src.live_client.messages import (
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

logger = logging.getLogger(__name__)

TOOL_ACK_RESPONSE = {"success": True}


class LiveSession(LiveEventHandler):
    """
    Client for a single bidirectional Gemini Live session.

    Listeners are registered with :meth:`on` or passed to the constructor:

    - ``ready()``: setup was acknowledged, audio may be sent.
    - ``transcript(text)``: once per text part of a model turn.
    - ``tool_call(name, arguments)``: once per function call.
    - ``turn_complete()``: the model finished a turn.
    - ``error(TransportError)``: connection-level failure.
    - ``close()``: the session reached CLOSED.
    """

    def __init__(
        self,
        api_key: str,
        config: Optional[LiveSessionConfig] = None,
        *,
        transport: Optional[LiveAPI] = None,
        on_transcript: Optional[Callable[[str], Any]] = None,
        on_tool_call: Optional[Callable[[str, Dict[str, Any]], Any]] = None,
        on_error: Optional[Callable[[Exception], Any]] = None,
        on_close: Optional[Callable[[], Any]] = None,
    ) -> None:
        super().__init__()
        if not api_key and transport is None:
            raise ValueError("An API key is required to open a live session")

        self.config = config or LiveSessionConfig()
        self.transport = transport or LiveAPI(
            self.config.url, api_key, open_timeout=self.config.open_timeout
        )
        self.state = SessionState.CONNECTING
        self.pending_tool_calls: Dict[str, str] = {}
        self._setup_future: Optional[asyncio.Future] = None

        for event_name, handler in (
            ("transcript", on_transcript),
            ("tool_call", on_tool_call),
            ("error", on_error),
            ("close", on_close),
        ):
            if handler is not None:
                self.on(event_name, handler)

        self._add_transport_handlers()

    def _add_transport_handlers(self) -> None:
        self.transport.on("open", self._on_transport_open)
        self.transport.on("message", self._on_transport_message)
        self.transport.on("error", self._on_transport_error)
        self.transport.on("close", self._on_transport_close)

    def is_ready(self) -> bool:
        return self.state is SessionState.READY

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """
        Open the transport, send the setup request and wait for its ack.

        Raises:
            LiveSessionError: If the session was already connected or closed.
            TransportError: If the connection fails, closes before the ack,
                or the ack does not arrive within ``setup_timeout``.
        """
        if self.state is not SessionState.CONNECTING or self.transport.is_connected():
            raise LiveSessionError(f"Cannot connect a session in state {self.state}")

        self._setup_future = asyncio.get_running_loop().create_future()
        try:
            await self.transport.connect()
        except TransportError:
            self._discard_setup_future()
            self._mark_closed()
            raise

        try:
            await asyncio.wait_for(self._setup_future, timeout=self.config.setup_timeout)
        except asyncio.TimeoutError as e:
            logger.error(
                f"Setup not acknowledged within {self.config.setup_timeout}s; closing"
            )
            await self.transport.disconnect()
            self._mark_closed()
            raise TransportError("Timed out waiting for setupComplete") from e

    async def close(self) -> None:
        """
        Close the session after a short grace period for in-flight messages.

        Closing a session that is already closing or closed is a no-op.
        """
        if self.state.is_terminal:
            logger.debug(f"close() ignored in state {self.state}")
            return

        self.state = SessionState.CLOSING
        if self.transport.is_connected():
            await asyncio.sleep(self.config.close_grace_seconds)
            await self.transport.disconnect()
        self._mark_closed()

    def _mark_closed(self) -> None:
        if self.state is SessionState.CLOSED:
            return
        self.state = SessionState.CLOSED
        self._fail_setup(TransportError("Connection closed before setup completed"))
        self.dispatch("close")

    def _fail_setup(self, error: Exception) -> None:
        if self._setup_future is not None and not self._setup_future.done():
            self._setup_future.set_exception(error)

    def _discard_setup_future(self) -> None:
        future, self._setup_future = self._setup_future, None
        if future is None:
            return
        if future.done():
            if not future.cancelled():
                # mark the exception as retrieved
                future.exception()
        else:
            future.cancel()

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    async def send_audio(self, chunk: bytes) -> None:
        """
        Send one PCM chunk (16 kHz mono int16) as realtime input.

        Does not wait for any acknowledgment from the server.

        Raises:
            SessionNotReadyError: If setup has not completed or the session closed.
            TransportError: If the transport is not open.
        """
        if not self.state.accepts_audio:
            raise SessionNotReadyError(f"Session setup not complete (state: {self.state})")
        if not self.transport.is_connected():
            raise TransportError("WebSocket is not connected")
        if not chunk:
            return
        await self.transport.send(build_audio_message(chunk))

    async def _send_setup(self) -> None:
        await self.transport.send(
            build_setup_message(
                model=self.config.model,
                system_instruction=self.config.system_instruction,
                function_declarations=self.config.function_declarations,
                response_modalities=self.config.response_modalities,
            )
        )
        logger.info("[Gemini] Setup message sent")

    # ------------------------------------------------------------------
    # Transport events
    # ------------------------------------------------------------------

    async def _on_transport_open(self) -> None:
        self.state = SessionState.AWAITING_SETUP_ACK
        try:
            await self._send_setup()
        except TransportError as e:
            logger.error(f"Failed to send setup message: {e}")
            self._fail_setup(e)

    def _on_transport_error(self, error: Exception) -> None:
        logger.error(f"[Gemini] WebSocket error: {error}")
        self._fail_setup(error)
        self.dispatch("error", error)

    def _on_transport_close(self) -> None:
        self._mark_closed()

    async def _on_transport_message(self, raw: Any) -> None:
        try:
            events = parse_server_message(raw)
        except MessageParseError as e:
            logger.error(f"[Gemini] Failed to parse message: {e}")
            return

        for event in events:
            if isinstance(event, SetupComplete):
                self._on_setup_complete()
            elif isinstance(event, TranscriptText):
                self.dispatch("transcript", event.text)
            elif isinstance(event, ToolCall):
                for invocation in event.invocations:
                    await self._on_tool_invocation(invocation)
            elif isinstance(event, TurnComplete):
                logger.debug("Model turn complete")
                self.dispatch("turn_complete")

    def _on_setup_complete(self) -> None:
        if self.state is not SessionState.AWAITING_SETUP_ACK:
            logger.debug(f"Ignoring setupComplete in state {self.state}")
            return

        self.state = SessionState.READY
        logger.info("[Gemini] Setup complete")
        if self._setup_future is not None and not self._setup_future.done():
            self._setup_future.set_result(None)
        self.dispatch("ready")

    async def _on_tool_invocation(self, invocation: ToolInvocation) -> None:
        call_id = invocation.correlation_id or str(uuid.uuid4())
        self.pending_tool_calls[call_id] = invocation.name
        logger.info(f"Tool call: {invocation.name}({invocation.arguments})")

        self.dispatch("tool_call", invocation.name, invocation.arguments)

        try:
            await self.transport.send(
                build_tool_response(
                    invocation.name, dict(TOOL_ACK_RESPONSE), invocation.correlation_id
                )
            )
        except TransportError as e:
            logger.error(f"Failed to acknowledge tool call {invocation.name}: {e}")
            return
        self.pending_tool_calls.pop(call_id, None)
