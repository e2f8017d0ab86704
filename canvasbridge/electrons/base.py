# canvasbridge/electrons/base.py
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable

from canvasbridge.nucleus.protocol import ReplyEnvelope


class BaseElectron(ABC):
    """
    Abstract base class for all "Electrons" (middleware components).

    An Electron is a processing unit in the pipeline that can inspect or halt
    a renderer reply before it reaches the Nucleus (the bridge core).
    """

    @abstractmethod
    async def process(
        self,
        envelope: ReplyEnvelope,
        websocket: Any,
        next_electron: Callable[[], Awaitable[None]],
    ) -> None:
        """
        Processes an incoming reply envelope.

        Args:
            envelope: The reply envelope to be processed.
            websocket: The renderer connection the reply arrived on.
            next_electron: An awaitable callable that invokes the next electron
                           in the pipeline. If it is not called, the chain is
                           halted and the reply never reaches the bridge.
        """
        pass
