import asyncio
import json
import logging
from typing import Optional, Union

import websockets
from websockets.exceptions import ConnectionClosed, ConnectionClosedOK, WebSocketException

from src.exceptions import TransportError
from src.live_client.event_handler import LiveEventHandler

logger = logging.getLogger(__name__)


class LiveAPI(LiveEventHandler):
    """
    Handles the WebSocket connection to the Gemini Live API.

    Events:
        open: the socket is connected (awaited before receiving starts).
        message: one raw inbound frame, awaited in delivery order.
        error: a TransportError describing a connection-level failure.
        close: the socket is gone, whichever side closed it.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        open_timeout: Optional[float] = 10.0,
    ) -> None:
        super().__init__()
        self.url = url
        self.api_key = api_key
        self.open_timeout = open_timeout
        self.ws = None
        self._receive_task: Optional[asyncio.Task] = None

    def is_connected(self) -> bool:
        """
        Check if WebSocket connection is active.

        Returns:
            bool: True if connected, False otherwise.
        """
        return self.ws is not None

    def _connection_url(self) -> str:
        return f"{self.url}?key={self.api_key}"

    async def connect(self) -> None:
        """
        Connect to the Live API WebSocket endpoint and start receiving.

        Raises:
            TransportError: If already connected or the connection fails.
        """
        if self.is_connected():
            raise TransportError("Already connected")

        logger.info(f"Connecting to Live API at {self.url}")
        try:
            self.ws = await websockets.connect(
                self._connection_url(),
                open_timeout=self.open_timeout,
                max_size=None,
            )
        except (OSError, asyncio.TimeoutError, WebSocketException) as e:
            error = TransportError(f"Failed to connect to Live API: {e}")
            logger.error(str(error))
            self.dispatch("error", error)
            raise error from e

        logger.info("[Gemini] WebSocket connected")
        await self.dispatch_async("open")
        self._receive_task = asyncio.create_task(self._receive_messages())

    async def _receive_messages(self) -> None:
        """
        Listen for frames from the WebSocket and dispatch them in order.
        """
        try:
            async for message in self.ws:
                await self.dispatch_async("message", message)
        except ConnectionClosedOK:
            pass
        except ConnectionClosed as e:
            error = TransportError(f"WebSocket closed with error: {e}")
            logger.error(str(error))
            self.dispatch("error", error)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            error = TransportError(f"WebSocket connection error: {e}")
            logger.error(str(error))
            self.dispatch("error", error)
        finally:
            self.ws = None
            logger.info("[Gemini] WebSocket closed")
            self.dispatch("close")

    async def send(self, message: Union[dict, str]) -> None:
        """
        Send a JSON message over the WebSocket connection.

        Args:
            message: A JSON-serializable dict or a pre-encoded string.

        Raises:
            TransportError: If not connected or the socket is closed mid-send.
        """
        if not self.is_connected():
            raise TransportError("WebSocket is not connected")

        payload = message if isinstance(message, str) else json.dumps(message)
        try:
            await self.ws.send(payload)
        except ConnectionClosed as e:
            raise TransportError(f"Error sending WebSocket message: {e}") from e

    async def disconnect(self) -> None:
        """
        Close the WebSocket and wait for the receive loop to finish.
        """
        ws = self.ws
        if ws is not None:
            try:
                await ws.close()
            except WebSocketException as e:
                logger.error(f"Error during WebSocket disconnect: {e}")

        task = self._receive_task
        self._receive_task = None
        if task is not None and task is not asyncio.current_task():
            await task
        self.ws = None
