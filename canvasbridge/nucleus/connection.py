# canvasbridge/nucleus/connection.py
import logging
from typing import Any, Optional

from websockets.exceptions import ConnectionClosed

from canvasbridge.nucleus.errors import RendererUnavailableError

logger = logging.getLogger(__name__)


class RendererConnection:
    """
    The single slot holding the live renderer websocket.

    Attaching always replaces whatever was there before (the previous socket
    is left open, it simply stops receiving commands). Detaching only clears
    the slot when the socket being detached is the one currently stored.
    """

    def __init__(self):
        self._websocket: Optional[Any] = None

    @property
    def is_connected(self) -> bool:
        return self._websocket is not None

    @property
    def websocket(self) -> Optional[Any]:
        return self._websocket

    def attach(self, websocket: Any) -> Optional[Any]:
        """Stores `websocket` as the renderer and returns the handle it replaced, if any."""
        previous = self._websocket
        self._websocket = websocket
        return previous

    def detach(self, websocket: Any) -> bool:
        # Make sure we are cleaning up the correct websocket instance
        if self._websocket is not websocket:
            return False
        self._websocket = None
        return True

    async def send(self, message: str) -> None:
        websocket = self._websocket
        if websocket is None:
            raise RendererUnavailableError()
        try:
            await websocket.send(message)
        except ConnectionClosed as e:
            logger.warning(f"Renderer connection closed while sending: {e}")
            raise RendererUnavailableError() from e
