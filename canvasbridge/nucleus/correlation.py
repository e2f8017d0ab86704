# canvasbridge/nucleus/correlation.py
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional

logger = logging.getLogger(__name__)


@dataclass
class PendingRequest:
    id: int
    command: str
    created_at: float
    deadline: float
    future: asyncio.Future
    timeout_task: Optional[asyncio.Task] = field(default=None, repr=False)

    def settle(self, result=None, error: Optional[BaseException] = None) -> bool:
        """Resolve or reject the waiting caller. Returns False if it was already settled."""
        if self.timeout_task is not None and self.timeout_task is not asyncio.current_task():
            self.timeout_task.cancel()
        if self.future.done():
            return False
        if error is not None:
            self.future.set_exception(error)
        else:
            self.future.set_result(result)
        return True


class CorrelationTable:
    """
    Outstanding requests keyed by request id.

    An entry is removed exactly once: `pop` hands it to whoever gets there
    first (a reply, a timeout, a disconnect) and returns None to everyone
    after that.
    """

    def __init__(self):
        self._pending: Dict[int, PendingRequest] = {}

    def add(self, request: PendingRequest) -> None:
        if request.id in self._pending:
            raise KeyError(f"Request id {request.id} is already pending")
        self._pending[request.id] = request

    def pop(self, request_id: int) -> Optional[PendingRequest]:
        return self._pending.pop(request_id, None)

    def drain(self) -> Iterator[PendingRequest]:
        """Removes and yields every pending request."""
        while self._pending:
            _, request = self._pending.popitem()
            yield request

    def __contains__(self, request_id: int) -> bool:
        return request_id in self._pending

    def __len__(self) -> int:
        return len(self._pending)
