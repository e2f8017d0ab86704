# canvasbridge/engine.py
import json
import logging
from typing import Any, Awaitable, Callable, List

from pydantic import ValidationError

from canvasbridge.nucleus.protocol import ReplyEnvelope
from canvasbridge.electrons.base import BaseElectron

logger = logging.getLogger(__name__)


class PipelineEngine:
    """
    The engine that runs the middleware pipeline for messages coming back
    from the renderer.

    It takes a list of Electrons (middleware) and a final Nucleus handler,
    and chains them together to process incoming reply envelopes.
    """

    def __init__(
        self,
        electrons: List[BaseElectron],
        nucleus_handler: Callable[[ReplyEnvelope, Any], Awaitable[None]],
    ):
        self._electrons = electrons
        self._nucleus_handler = nucleus_handler
        logger.info(f"PipelineEngine initialized with {len(self._electrons)} electrons.")

    async def process_message(self, message: Any, websocket: Any) -> None:
        """
        Parses one raw renderer message and passes it through the pipeline.
        Messages that are not reply envelopes are logged and dropped.
        """
        try:
            data = json.loads(message)
            envelope = ReplyEnvelope.model_validate(data)
        except json.JSONDecodeError:
            logger.warning(f"Received non-JSON message from renderer {getattr(websocket, 'remote_address', None)}")
            return
        except ValidationError as e:
            logger.warning(f"Received a message that is not a reply envelope: {e.error_count()} validation error(s)")
            return

        await self._execute_pipeline(envelope, websocket)

    async def _execute_pipeline(self, envelope: ReplyEnvelope, websocket: Any) -> None:
        """
        Constructs and executes the chain of electron calls for a single envelope.
        """
        # Start with the nucleus handler as the final step in the chain.
        async def nucleus():
            await self._nucleus_handler(envelope, websocket)

        next_handler = nucleus

        # Wrap the handlers in reverse order. Each electron gets the *next*
        # handler in the chain as an argument.
        for electron in reversed(self._electrons):
            def create_closure(current_electron, next_step):
                async def closure():
                    await current_electron.process(envelope, websocket, next_step)
                return closure

            next_handler = create_closure(electron, next_handler)

        await next_handler()
