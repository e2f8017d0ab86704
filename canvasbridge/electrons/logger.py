# canvasbridge/electrons/logger.py
import logging
from typing import Any, Awaitable, Callable

from canvasbridge.electrons.base import BaseElectron
from canvasbridge.nucleus.protocol import ReplyEnvelope

logger = logging.getLogger(__name__)


class LoggerElectron(BaseElectron):
    """
    A simple electron that logs key information about each renderer reply.
    """

    async def process(
        self,
        envelope: ReplyEnvelope,
        websocket: Any,
        next_electron: Callable[[], Awaitable[None]],
    ) -> None:
        outcome = "error" if envelope.error is not None or _is_error_result(envelope.result) else "ok"
        logger.debug(
            f"[LoggerElectron] Reply for request {envelope.id} ({outcome}) "
            f"from renderer {getattr(websocket, 'remote_address', None)}"
        )
        await next_electron()


def _is_error_result(result: Any) -> bool:
    return isinstance(result, dict) and "error" in result
