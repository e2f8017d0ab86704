# canvasbridge/nucleus/commands.py
"""
Per-command parameter handling.

Each known command has a parameter model. Before a command is forwarded its
params are checked against that model and, for the shape-creating commands,
expanded by the shape normalizer. The outcome is a `PreparedCommand`: either
params ready to forward, or a payload to hand straight back to the caller
because there is nothing worth sending to the renderer.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, get_args

from pydantic import BaseModel, ConfigDict, ValidationError

from canvasbridge.nucleus.protocol import CommandName
from canvasbridge.nucleus.shapes import ShapeError, ShapeRecord, normalize, normalize_many

logger = logging.getLogger(__name__)

KNOWN_COMMANDS = frozenset(get_args(CommandName))


class EmptyParams(BaseModel):
    model_config = ConfigDict(extra="allow")


class CreateShapesParams(BaseModel):
    model_config = ConfigDict(extra="allow")

    shapes: List[Any]


PARAMS_MODELS: Dict[str, type] = {
    "clear": EmptyParams,
    "get_shapes": EmptyParams,
    "undo": EmptyParams,
    "redo": EmptyParams,
    "zoom_to_fit": EmptyParams,
    "delete_selected": EmptyParams,
}


@dataclass
class PreparedCommand:
    command: str
    params: Dict[str, Any] = field(default_factory=dict)
    # Set when the caller can be answered without a round trip.
    local_result: Optional[Any] = None
    # Applied to the renderer's result before it is returned to the caller.
    finish: Optional[Callable[[Any], Any]] = None

    @property
    def needs_renderer(self) -> bool:
        return self.local_result is None

    def complete(self, result: Any) -> Any:
        return self.finish(result) if self.finish else result


def _prepare_create_shape(params: Dict[str, Any]) -> PreparedCommand:
    outcome = normalize(params)
    if isinstance(outcome, ShapeError):
        logger.info(f"Rejected shape descriptor: {outcome.message}")
        return PreparedCommand("create_shape", local_result=outcome.to_payload())
    return PreparedCommand("create_shape", {"shape": outcome.model_dump()})


def _unmatched_batch(outcomes: List[Any], result: Any) -> Dict[str, Any]:
    """The renderer did not answer per shape. Local errors are kept; the rest carry its answer."""
    error = result.get("error") if isinstance(result, dict) else None
    if not isinstance(error, str):
        error = "Renderer did not report per-shape results"
    logger.warning(f"Unexpected create_shapes answer from the renderer: {error}")
    merged = [o.to_payload() if isinstance(o, ShapeError) else {"error": error} for o in outcomes]
    return {"success": False, "error": error, "count": len(merged), "failed": len(merged), "results": merged}


def _merge_batch(outcomes: List[Any]) -> Callable[[Any], Dict[str, Any]]:
    def finish(result: Any) -> Dict[str, Any]:
        expected = sum(1 for o in outcomes if isinstance(o, ShapeRecord))
        created = result.get("results") if isinstance(result, dict) else None
        if expected and (not isinstance(created, list) or len(created) != expected):
            return _unmatched_batch(outcomes, result)

        created_iter = iter(created or [])
        merged = []
        for outcome in outcomes:
            if isinstance(outcome, ShapeError):
                merged.append(outcome.to_payload())
            else:
                merged.append(next(created_iter))
        failed = sum(1 for entry in merged if isinstance(entry, dict) and "error" in entry)
        return {"success": True, "count": len(merged), "failed": failed, "results": merged}

    return finish


def _prepare_create_shapes(params: Dict[str, Any]) -> PreparedCommand:
    try:
        parsed = CreateShapesParams.model_validate(params)
    except ValidationError:
        return PreparedCommand("create_shapes", local_result={"error": "create_shapes requires a 'shapes' list"})

    outcomes = normalize_many(parsed.shapes)
    records = [o.model_dump() for o in outcomes if isinstance(o, ShapeRecord)]
    finish = _merge_batch(outcomes)
    if not records:
        return PreparedCommand("create_shapes", local_result=finish({"results": []}))
    return PreparedCommand("create_shapes", {"shapes": records}, finish=finish)


_PREPARERS: Dict[str, Callable[[Dict[str, Any]], PreparedCommand]] = {
    "create_shape": _prepare_create_shape,
    "create_shapes": _prepare_create_shapes,
}


def prepare_command(command: str, params: Optional[Dict[str, Any]]) -> PreparedCommand:
    """Validate and expand `params` for `command`. Unknown commands pass through untouched."""
    params = params or {}
    preparer = _PREPARERS.get(command)
    if preparer is not None:
        return preparer(params)

    model = PARAMS_MODELS.get(command)
    if model is None:
        if command not in KNOWN_COMMANDS:
            logger.info(f"Forwarding unrecognized command '{command}' to the renderer.")
        return PreparedCommand(command, params)
    return PreparedCommand(command, model.model_validate(params).model_dump())
