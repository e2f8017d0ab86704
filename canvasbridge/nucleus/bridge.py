# canvasbridge/nucleus/bridge.py
import asyncio
import logging
from typing import Any, Dict, Optional

from canvasbridge.nucleus.commands import prepare_command
from canvasbridge.nucleus.connection import RendererConnection
from canvasbridge.nucleus.correlation import CorrelationTable, PendingRequest
from canvasbridge.nucleus.errors import (
    RendererDisconnectedError,
    RendererUnavailableError,
    RequestTimeoutError,
)
from canvasbridge.nucleus.protocol import CommandEnvelope, ReplyEnvelope

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class CanvasBridge:
    """
    The Bridge Core.

    Owns the renderer slot, the request id counter and the table of pending
    requests. One instance is built per process and handed to both the
    renderer gateway (which reports connects, disconnects and replies) and
    the inbound adapters (which call `submit`).
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, fail_pending_on_disconnect: bool = False):
        self.renderer = RendererConnection()
        self._pending = CorrelationTable()
        self._last_id = 0
        self._timeout = timeout
        self._fail_pending_on_disconnect = fail_pending_on_disconnect
        logger.info(
            f"CanvasBridge initialized (timeout: {timeout}s, "
            f"fail pending on disconnect: {fail_pending_on_disconnect})."
        )

    @property
    def connected(self) -> bool:
        return self.renderer.is_connected

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def last_request_id(self) -> int:
        return self._last_id

    # --- Inbound side ---

    async def submit(self, command: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Runs `command` on the renderer and returns its result payload.

        Raises RendererUnavailableError straight away when no renderer is
        connected, RequestTimeoutError when the renderer does not answer in
        time. Everything else, including drawing errors, comes back as the
        result payload.
        """
        if not self.renderer.is_connected:
            logger.warning(f"Rejecting '{command}': no renderer connected.")
            raise RendererUnavailableError()

        prepared = prepare_command(command, params)
        if not prepared.needs_renderer:
            return prepared.local_result

        result = await self._request(prepared.command, prepared.params)
        return prepared.complete(result)

    async def _request(self, command: str, params: Dict[str, Any]) -> Any:
        if not self.renderer.is_connected:
            raise RendererUnavailableError()

        loop = asyncio.get_running_loop()
        self._last_id += 1
        request_id = self._last_id
        now = loop.time()
        pending = PendingRequest(
            id=request_id,
            command=command,
            created_at=now,
            deadline=now + self._timeout,
            future=loop.create_future(),
        )
        self._pending.add(pending)
        pending.timeout_task = asyncio.create_task(self._timeout_watcher(request_id, self._timeout))

        envelope = CommandEnvelope(id=request_id, command=command, params=params)
        try:
            await self.renderer.send(envelope.model_dump_json())
        except RendererUnavailableError:
            self._forget(request_id)
            raise
        logger.debug(f"Sent request {request_id} ('{command}').")

        try:
            return await pending.future
        except asyncio.CancelledError:
            self._forget(request_id)
            raise

    def _forget(self, request_id: int) -> None:
        pending = self._pending.pop(request_id)
        if pending is not None and pending.timeout_task is not None:
            pending.timeout_task.cancel()

    async def _timeout_watcher(self, request_id: int, delay: float) -> None:
        """Waits for the request's deadline and rejects it if it is still pending."""
        await asyncio.sleep(delay)
        pending = self._pending.pop(request_id)
        if pending is None:
            return
        logger.warning(f"Request {request_id} ('{pending.command}') timed out after {delay}s.")
        pending.settle(error=RequestTimeoutError(request_id, delay))

    # --- Renderer side ---

    def resolve(self, reply: ReplyEnvelope) -> bool:
        """Settles the pending request `reply` answers. Unknown or settled ids are ignored."""
        pending = self._pending.pop(reply.id)
        if pending is None:
            logger.debug(f"Discarding reply for unknown or already settled request {reply.id}.")
            return False
        pending.settle(reply.payload)
        logger.debug(f"Request {reply.id} ('{pending.command}') resolved.")
        return True

    async def handle_reply(self, reply: ReplyEnvelope, websocket: Any = None) -> None:
        """Final handler of the renderer message pipeline."""
        self.resolve(reply)

    def renderer_connected(self, websocket: Any) -> None:
        previous = self.renderer.attach(websocket)
        if previous is not None and previous is not websocket:
            logger.warning("A new renderer connected; replacing the previous renderer connection.")
        logger.info("Renderer connected.")

    def renderer_disconnected(self, websocket: Any) -> None:
        if not self.renderer.detach(websocket):
            logger.info("A replaced renderer connection closed.")
            return

        logger.info("Renderer disconnected.")
        if not self._fail_pending_on_disconnect:
            if self._pending:
                logger.info(f"{len(self._pending)} request(s) left to run out their timeouts.")
            return

        for pending in self._pending.drain():
            logger.warning(f"Failing request {pending.id} ('{pending.command}'): renderer disconnected.")
            pending.settle(error=RendererDisconnectedError(pending.id))

    def shutdown(self) -> None:
        """Rejects everything still pending. Used when the process stops."""
        for pending in self._pending.drain():
            pending.settle(error=RendererUnavailableError("Bridge is shutting down"))
