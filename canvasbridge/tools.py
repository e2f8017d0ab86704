# canvasbridge/tools.py
import json
import logging
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from canvasbridge.nucleus.bridge import CanvasBridge
from canvasbridge.nucleus.shapes import SHAPE_RULES

logger = logging.getLogger(__name__)

SHAPE_KINDS = ", ".join(SHAPE_RULES)


def format_result(result: Any) -> str:
    if isinstance(result, str):
        return result
    return json.dumps(result, indent=2)


class CanvasTools:
    """
    The canvas commands exposed as MCP tools.

    Each tool submits one command through the bridge and returns the result
    as text. Bridge failures (no renderer, timeout) propagate as exceptions,
    which the MCP server reports as tool errors.
    """

    def __init__(self, bridge: CanvasBridge):
        self._bridge = bridge

    async def _run(self, command: str, params: Optional[Dict[str, Any]] = None) -> str:
        return format_result(await self._bridge.submit(command, params or {}))

    async def create_shape(
        self,
        kind: str,
        x: float,
        y: float,
        width: Optional[float] = None,
        height: Optional[float] = None,
        text: Optional[str] = None,
        end_x: Optional[float] = None,
        end_y: Optional[float] = None,
        points: Optional[List[Dict[str, float]]] = None,
        segments: Optional[List[Dict[str, Any]]] = None,
        color: Optional[str] = None,
        size: Optional[str] = None,
        is_closed: Optional[bool] = None,
        fill: Optional[str] = None,
    ) -> str:
        """
        Create a shape on the canvas. Shapes are positioned by center coordinates
        (the canvas is about 1200x800, its center is 600,400). Text, arrows, lines
        and draw shapes use x/y as their start point instead. end_x/end_y are
        offsets from the start. 'draw' and 'freehand' take a list of {x, y, z?}
        points relative to the start; z is pen pressure (0-1, default 0.5). For
        several strokes pass segments instead, each {type: free|straight, points}.
        """
        descriptor = {
            "kind": kind,
            "x": x,
            "y": y,
            "width": width,
            "height": height,
            "text": text,
            "endX": end_x,
            "endY": end_y,
            "points": points,
            "segments": segments,
            "color": color,
            "size": size,
            "isClosed": is_closed,
            "fill": fill,
        }
        return await self._run("create_shape", {k: v for k, v in descriptor.items() if v is not None})

    async def create_shapes(self, shapes: List[Dict[str, Any]]) -> str:
        """
        Create multiple shapes at once. Each entry takes the same fields as a single
        shape (kind, x, y, width, height, text, endX, endY, points, segments, color,
        size, isClosed, fill). Invalid entries are reported individually.
        """
        return await self._run("create_shapes", {"shapes": shapes})

    async def clear(self) -> str:
        """Clear all shapes from the canvas."""
        return await self._run("clear")

    async def get_shapes(self) -> str:
        """Get all shapes currently on the canvas with their properties."""
        return await self._run("get_shapes")

    async def undo(self) -> str:
        """Undo the last action on the canvas."""
        return await self._run("undo")

    async def redo(self) -> str:
        """Redo the last undone action on the canvas."""
        return await self._run("redo")

    async def zoom_to_fit(self) -> str:
        """Zoom the canvas to fit all shapes in view."""
        return await self._run("zoom_to_fit")

    async def delete_selected(self) -> str:
        """Delete the currently selected shapes."""
        return await self._run("delete_selected")


def build_mcp_server(bridge: CanvasBridge) -> FastMCP:
    tools = CanvasTools(bridge)
    server = FastMCP("tldraw-canvas")
    server.add_tool(
        tools.create_shape,
        name="canvas_create_shape",
        description=f"{tools.create_shape.__doc__.strip()} Kinds: {SHAPE_KINDS}.",
    )
    server.add_tool(tools.create_shapes, name="canvas_create_shapes")
    server.add_tool(tools.clear, name="canvas_clear")
    server.add_tool(tools.get_shapes, name="canvas_get_shapes")
    server.add_tool(tools.undo, name="canvas_undo")
    server.add_tool(tools.redo, name="canvas_redo")
    server.add_tool(tools.zoom_to_fit, name="canvas_zoom_to_fit")
    server.add_tool(tools.delete_selected, name="canvas_delete_selected")
    logger.info("MCP canvas tools registered.")
    return server
