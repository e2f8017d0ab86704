# canvasbridge/renderer/executor.py
import logging
from typing import Any, Callable, Dict

from canvasbridge.nucleus.protocol import CommandEnvelope, ReplyEnvelope
from canvasbridge.renderer.canvas import HeadlessCanvas

logger = logging.getLogger(__name__)


class CommandExecutor:
    """
    Runs command envelopes against a canvas.

    Every envelope produces exactly one reply carrying the same id. Drawing
    problems, unknown commands and unexpected exceptions all become error
    payloads, never a missing reply.
    """

    def __init__(self, canvas: HeadlessCanvas):
        self.canvas = canvas
        self._handlers: Dict[str, Callable[[Dict[str, Any]], Any]] = {
            "create_shape": self._create_shape,
            "create_shapes": self._create_shapes,
            "clear": self._clear,
            "get_shapes": self._get_shapes,
            "undo": self._undo,
            "redo": self._redo,
            "zoom_to_fit": self._zoom_to_fit,
            "delete_selected": self._delete_selected,
        }

    def execute(self, envelope: CommandEnvelope) -> ReplyEnvelope:
        handler = self._handlers.get(envelope.command)
        if handler is None:
            return ReplyEnvelope(id=envelope.id, result={"error": f"Unknown command: {envelope.command}"})
        try:
            result = handler(envelope.params)
        except Exception as e:
            logger.error(f"Command '{envelope.command}' ({envelope.id}) failed: {e}", exc_info=True)
            return ReplyEnvelope(id=envelope.id, error=str(e))
        return ReplyEnvelope(id=envelope.id, result=result)

    def _create_one(self, record: Any) -> Dict[str, Any]:
        if not isinstance(record, dict) or "type" not in record:
            return {"error": "Malformed shape record"}
        shape_id = self.canvas.create(record)
        return {"success": True, "shapeId": shape_id}

    def _create_shape(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return self._create_one(params.get("shape"))

    def _create_shapes(self, params: Dict[str, Any]) -> Dict[str, Any]:
        records = params.get("shapes") or []
        results = [self._create_one(record) for record in records]
        return {"success": True, "count": len(records), "results": results}

    def _clear(self, params: Dict[str, Any]) -> Dict[str, Any]:
        deleted = self.canvas.delete([shape["id"] for shape in self.canvas.shapes()])
        return {"success": True, "deletedCount": deleted}

    def _get_shapes(self, params: Dict[str, Any]) -> Any:
        return self.canvas.shapes()

    def _undo(self, params: Dict[str, Any]) -> Dict[str, Any]:
        self.canvas.undo()
        return {"success": True}

    def _redo(self, params: Dict[str, Any]) -> Dict[str, Any]:
        self.canvas.redo()
        return {"success": True}

    def _zoom_to_fit(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {"success": True, "camera": self.canvas.zoom_to_fit()}

    def _delete_selected(self, params: Dict[str, Any]) -> Dict[str, Any]:
        deleted = self.canvas.delete(self.canvas.selected())
        return {"success": True, "deletedCount": deleted}
