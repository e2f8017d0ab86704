# canvasbridge/nucleus/shapes.py
"""
Shape descriptor normalization.

Callers describe shapes by their logical center (or anchor, depending on the
kind) and a handful of optional fields. This module turns such a descriptor
into the record the renderer stores natively: a `type`, a top-left `x`/`y`
and a `props` dictionary.

Everything a kind needs to know lives in `SHAPE_RULES`; `normalize` is the
only routine that reads it. Normalization never raises, it returns either a
`ShapeRecord` or a `ShapeError` so that batches can report failures per
shape.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_SIZE = 100.0
DEFAULT_END_X = 100.0
DEFAULT_END_Y = 0.0
DEFAULT_PRESSURE = 0.5
DEFAULT_COLOR = "black"
DEFAULT_STROKE_SIZE = "m"
DEFAULT_FILL = "none"


class Anchor(str, Enum):
    CENTER = "center"  # x/y is the middle of a width x height box
    ORIGIN = "origin"  # x/y is used as-is


@dataclass(frozen=True)
class KindRule:
    native_type: str
    anchor: Anchor
    geo: Optional[str] = None
    square: bool = False
    default_text: Optional[str] = None


SHAPE_RULES: Dict[str, KindRule] = {
    "rectangle": KindRule("geo", Anchor.CENTER, geo="rectangle"),
    "ellipse": KindRule("geo", Anchor.CENTER, geo="ellipse"),
    "circle": KindRule("geo", Anchor.CENTER, geo="ellipse", square=True),
    "triangle": KindRule("geo", Anchor.CENTER, geo="triangle"),
    "diamond": KindRule("geo", Anchor.CENTER, geo="diamond"),
    "hexagon": KindRule("geo", Anchor.CENTER, geo="hexagon"),
    "star": KindRule("geo", Anchor.CENTER, geo="star"),
    "cloud": KindRule("geo", Anchor.CENTER, geo="cloud"),
    "text": KindRule("text", Anchor.ORIGIN, default_text="Text"),
    "note": KindRule("note", Anchor.CENTER, default_text="Note"),
    "arrow": KindRule("arrow", Anchor.ORIGIN),
    "line": KindRule("line", Anchor.ORIGIN),
    "draw": KindRule("draw", Anchor.ORIGIN),
    "freehand": KindRule("draw", Anchor.ORIGIN),
}


# --- Descriptor models ---

class PathPoint(BaseModel):
    x: float
    y: float
    z: Optional[float] = None


class PathSegment(BaseModel):
    type: Optional[Literal["free", "straight"]] = None
    points: Optional[List[PathPoint]] = None


class ShapeDescriptor(BaseModel):
    """A caller-supplied shape. Unknown extra fields are ignored."""

    kind: str
    x: float
    y: float
    width: Optional[float] = None
    height: Optional[float] = None
    text: Optional[str] = None
    end_x: Optional[float] = Field(None, alias="endX")
    end_y: Optional[float] = Field(None, alias="endY")
    points: Optional[List[PathPoint]] = None
    segments: Optional[List[PathSegment]] = None
    color: Optional[str] = None
    size: Optional[str] = None
    is_closed: Optional[bool] = Field(None, alias="isClosed")
    fill: Optional[str] = None


# --- Results ---

class ShapeRecord(BaseModel):
    """A shape in the renderer's native representation."""

    type: str
    x: float
    y: float
    props: Dict[str, Any]


class ShapeError(BaseModel):
    kind: Optional[str] = None
    message: str

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.message}


NormalizeResult = Union[ShapeRecord, ShapeError]


class _DescriptorProblem(Exception):
    pass


# --- Props builders, one per native type ---

def _box_size(descriptor: ShapeDescriptor, rule: KindRule) -> tuple:
    width = descriptor.width if descriptor.width is not None else DEFAULT_SIZE
    if rule.square:
        return width, width
    height = descriptor.height if descriptor.height is not None else DEFAULT_SIZE
    return width, height


def _geo_props(descriptor: ShapeDescriptor, rule: KindRule) -> Dict[str, Any]:
    w, h = _box_size(descriptor, rule)
    return {"geo": rule.geo, "w": w, "h": h}


def _text_props(descriptor: ShapeDescriptor, rule: KindRule) -> Dict[str, Any]:
    return {"text": descriptor.text if descriptor.text is not None else rule.default_text}


def _end_point(descriptor: ShapeDescriptor) -> Dict[str, float]:
    return {
        "x": descriptor.end_x if descriptor.end_x is not None else DEFAULT_END_X,
        "y": descriptor.end_y if descriptor.end_y is not None else DEFAULT_END_Y,
    }


def _arrow_props(descriptor: ShapeDescriptor, rule: KindRule) -> Dict[str, Any]:
    return {"start": {"x": 0.0, "y": 0.0}, "end": _end_point(descriptor)}


def _line_props(descriptor: ShapeDescriptor, rule: KindRule) -> Dict[str, Any]:
    end = _end_point(descriptor)
    return {
        "points": {
            "a1": {"id": "a1", "index": "a1", "x": 0.0, "y": 0.0},
            "a2": {"id": "a2", "index": "a2", "x": end["x"], "y": end["y"]},
        }
    }


def _path_points(points: Iterable[PathPoint]) -> List[Dict[str, float]]:
    return [
        {"x": p.x, "y": p.y, "z": p.z if p.z is not None else DEFAULT_PRESSURE}
        for p in points
    ]


def _draw_props(descriptor: ShapeDescriptor, rule: KindRule) -> Dict[str, Any]:
    # Segments without points draw nothing and are left out.
    if descriptor.segments:
        segments = [
            {"type": segment.type or "free", "points": _path_points(segment.points)}
            for segment in descriptor.segments
            if segment.points
        ]
    elif descriptor.points:
        segments = [{"type": "free", "points": _path_points(descriptor.points)}]
    else:
        segments = []
    if not segments:
        raise _DescriptorProblem("Draw shape requires points or segments")

    return {
        "segments": segments,
        "color": descriptor.color if descriptor.color is not None else DEFAULT_COLOR,
        "size": descriptor.size if descriptor.size is not None else DEFAULT_STROKE_SIZE,
        "fill": descriptor.fill if descriptor.fill is not None else DEFAULT_FILL,
        "dash": "draw",
        "isComplete": True,
        "isClosed": bool(descriptor.is_closed),
        "isPen": False,
        "scale": 1,
    }


_PROPS_BUILDERS: Dict[str, Callable[[ShapeDescriptor, KindRule], Dict[str, Any]]] = {
    "geo": _geo_props,
    "text": _text_props,
    "note": _text_props,
    "arrow": _arrow_props,
    "line": _line_props,
    "draw": _draw_props,
}


def _anchor(descriptor: ShapeDescriptor, rule: KindRule) -> tuple:
    if rule.anchor is Anchor.ORIGIN:
        return descriptor.x, descriptor.y
    w, h = _box_size(descriptor, rule)
    return descriptor.x - w / 2, descriptor.y - h / 2


def _describe_validation_error(kind: str, error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "descriptor"
    return f"Invalid '{kind}' shape: {location}: {first.get('msg', 'invalid value')}"


def normalize(descriptor: Mapping[str, Any]) -> NormalizeResult:
    """Map one shape descriptor onto a renderer-native record, or explain why not."""
    if not isinstance(descriptor, Mapping):
        return ShapeError(message=f"Shape descriptor must be an object, got {type(descriptor).__name__}")

    kind = descriptor.get("kind")
    rule = SHAPE_RULES.get(kind) if isinstance(kind, str) else None
    if rule is None:
        return ShapeError(kind=kind if isinstance(kind, str) else None, message=f"Unknown shape kind: {kind}")

    try:
        parsed = ShapeDescriptor.model_validate(descriptor)
    except ValidationError as e:
        return ShapeError(kind=kind, message=_describe_validation_error(kind, e))

    try:
        props = _PROPS_BUILDERS[rule.native_type](parsed, rule)
    except _DescriptorProblem as e:
        return ShapeError(kind=kind, message=str(e))

    x, y = _anchor(parsed, rule)
    return ShapeRecord(type=rule.native_type, x=x, y=y, props=props)


def normalize_many(descriptors: Iterable[Any]) -> List[NormalizeResult]:
    """Normalize every descriptor independently, keeping input order."""
    results = [normalize(d) for d in descriptors]
    failed = sum(1 for r in results if isinstance(r, ShapeError))
    if failed:
        logger.debug(f"{failed} of {len(results)} shape descriptors failed to normalize.")
    return results
