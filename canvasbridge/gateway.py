# canvasbridge/gateway.py
import asyncio
import logging
from typing import Optional

from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.exceptions import ConnectionClosed

from canvasbridge.engine import PipelineEngine
from canvasbridge.nucleus.bridge import CanvasBridge

logger = logging.getLogger(__name__)


class RendererGateway:
    """
    The entry point for the renderer. It listens for the renderer's websocket,
    hands the connection to the bridge and funnels replies into the pipeline
    engine.

    Every new connection becomes "the" renderer; an older one is not closed
    but no longer receives commands.
    """

    def __init__(self, bridge: CanvasBridge, pipeline: PipelineEngine, host: str, port: int):
        self._bridge = bridge
        self._pipeline = pipeline
        self._host = host
        self._port = port
        self._server: Optional[Server] = None
        logger.info("RendererGateway initialized.")

    @property
    def port(self) -> Optional[int]:
        """The bound port, useful when listening on port 0."""
        if self._server is None:
            return None
        for sock in self._server.sockets:
            return sock.getsockname()[1]
        return None

    async def listen(self) -> Server:
        """Starts the websocket server without waiting for it to finish."""
        self._server = await serve(self.handle_connection, self._host, self._port, max_size=None)
        logger.info(f"RendererGateway listening on ws://{self._host}:{self.port}")
        return self._server

    async def start(self) -> None:
        """Starts the websocket server and runs until cancelled."""
        await self.listen()
        try:
            await asyncio.Future()  # Run forever
        finally:
            await self.close()

    async def close(self) -> None:
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
            self._server = None

    async def handle_connection(self, websocket: ServerConnection) -> None:
        """Manages a single renderer connection for as long as it stays open."""
        logger.info(f"Renderer connection from {websocket.remote_address}")
        self._bridge.renderer_connected(websocket)
        try:
            async for message in websocket:
                try:
                    await self._pipeline.process_message(message, websocket)
                except Exception as e:
                    logger.error(f"Error processing renderer message: {e}", exc_info=True)
        except ConnectionClosed as e:
            logger.info(f"Renderer connection closed: {websocket.remote_address} (reason: {e})")
        finally:
            self._bridge.renderer_disconnected(websocket)
