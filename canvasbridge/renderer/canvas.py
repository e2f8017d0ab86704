# canvasbridge/renderer/canvas.py
import copy
import logging
import uuid
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)


def new_shape_id() -> str:
    """Generates a new unique shape ID in the format 'shape:hex'."""
    return f"shape:{uuid.uuid4().hex}"


class HeadlessCanvas:
    """
    An in-memory canvas that stores renderer-native shape records.

    It keeps just enough state to honor the renderer contract: shapes in
    creation order, a selection, and undo/redo snapshots taken before every
    change.
    """

    def __init__(self):
        self._shapes: Dict[str, Dict[str, Any]] = {}
        self._selected: List[str] = []
        self._undo: List[Dict[str, Dict[str, Any]]] = []
        self._redo: List[Dict[str, Dict[str, Any]]] = []
        self.camera: Dict[str, float] = {"x": 0.0, "y": 0.0, "w": 0.0, "h": 0.0}

    def _checkpoint(self) -> None:
        self._undo.append(copy.deepcopy(self._shapes))
        self._redo.clear()

    def create(self, record: Dict[str, Any]) -> str:
        shape_id = new_shape_id()
        self._checkpoint()
        self._shapes[shape_id] = {
            "id": shape_id,
            "type": record["type"],
            "x": record["x"],
            "y": record["y"],
            "props": copy.deepcopy(record.get("props", {})),
        }
        return shape_id

    def shapes(self) -> List[Dict[str, Any]]:
        return [copy.deepcopy(shape) for shape in self._shapes.values()]

    def select(self, shape_ids: Iterable[str]) -> None:
        self._selected = [shape_id for shape_id in shape_ids if shape_id in self._shapes]

    def selected(self) -> List[str]:
        return list(self._selected)

    def delete(self, shape_ids: Iterable[str]) -> int:
        doomed = [shape_id for shape_id in shape_ids if shape_id in self._shapes]
        if not doomed:
            return 0
        self._checkpoint()
        for shape_id in doomed:
            del self._shapes[shape_id]
        self._selected = [shape_id for shape_id in self._selected if shape_id in self._shapes]
        return len(doomed)

    def undo(self) -> bool:
        if not self._undo:
            return False
        self._redo.append(self._shapes)
        self._shapes = self._undo.pop()
        self._selected = [shape_id for shape_id in self._selected if shape_id in self._shapes]
        return True

    def redo(self) -> bool:
        if not self._redo:
            return False
        self._undo.append(self._shapes)
        self._shapes = self._redo.pop()
        self._selected = [shape_id for shape_id in self._selected if shape_id in self._shapes]
        return True

    def bounds(self) -> Optional[Dict[str, float]]:
        """The box around every shape's anchor and extent, or None when empty."""
        if not self._shapes:
            return None
        xs: List[float] = []
        ys: List[float] = []
        for shape in self._shapes.values():
            props = shape["props"]
            xs.append(shape["x"])
            ys.append(shape["y"])
            xs.append(shape["x"] + props.get("w", 0))
            ys.append(shape["y"] + props.get("h", 0))
        return {"x": min(xs), "y": min(ys), "w": max(xs) - min(xs), "h": max(ys) - min(ys)}

    def zoom_to_fit(self) -> Dict[str, float]:
        fitted = self.bounds()
        if fitted is not None:
            self.camera = fitted
        return dict(self.camera)
