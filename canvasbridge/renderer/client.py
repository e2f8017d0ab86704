# canvasbridge/renderer/client.py
import asyncio
import json
import logging

from pydantic import ValidationError
from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed

from canvasbridge.nucleus.protocol import CommandEnvelope
from canvasbridge.renderer.executor import CommandExecutor

logger = logging.getLogger(__name__)


class RendererClient:
    """
    Connects a command executor to the bridge and keeps it connected.

    The bridge only ever talks to the most recent renderer connection, so a
    dropped connection is simply retried after `reconnect_delay` seconds.
    """

    def __init__(self, url: str, executor: CommandExecutor, reconnect_delay: float = 2.0):
        self._url = url
        self._executor = executor
        self._reconnect_delay = reconnect_delay

    async def run(self) -> None:
        """An infinite loop that connects, serves commands, and reconnects until cancelled."""
        while True:
            try:
                async with connect(self._url) as websocket:
                    logger.info(f"Connected to bridge at {self._url}.")
                    await self.serve(websocket)
                logger.info(f"Disconnected, reconnecting in {self._reconnect_delay}s...")
            except asyncio.CancelledError:
                logger.info("Renderer client is being cancelled.")
                raise
            except (ConnectionClosed, OSError) as e:
                logger.warning(f"Connection error: {type(e).__name__}. Retrying in {self._reconnect_delay} seconds.")
            except Exception as e:
                logger.error(f"Unexpected error in connection loop: {e}", exc_info=True)
            await asyncio.sleep(self._reconnect_delay)

    async def serve(self, websocket: ClientConnection) -> None:
        """Answers every command envelope received on `websocket` until it closes."""
        async for message in websocket:
            try:
                envelope = CommandEnvelope.model_validate(json.loads(message))
            except (json.JSONDecodeError, ValidationError) as e:
                logger.error(f"Error parsing command: {e}")
                continue
            logger.info(f"Received command: {envelope.command}")
            reply = self._executor.execute(envelope)
            await websocket.send(reply.model_dump_json())
