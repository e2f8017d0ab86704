import pytest

from canvasbridge.nucleus.shapes import (
    SHAPE_RULES,
    ShapeError,
    ShapeRecord,
    normalize,
    normalize_many,
)

BOX_KINDS = {
    "rectangle": "rectangle",
    "ellipse": "ellipse",
    "triangle": "triangle",
    "diamond": "diamond",
    "hexagon": "hexagon",
    "star": "star",
    "cloud": "cloud",
}


@pytest.mark.parametrize("kind,geo", sorted(BOX_KINDS.items()))
def test_box_like_shapes_are_anchored_at_top_left(kind, geo):
    record = normalize({"kind": kind, "x": 300, "y": 200, "width": 120, "height": 60})

    assert isinstance(record, ShapeRecord)
    assert record.type == "geo"
    assert (record.x, record.y) == (240, 170)
    assert record.props == {"geo": geo, "w": 120, "h": 60}


@pytest.mark.parametrize("kind", sorted(BOX_KINDS))
def test_box_like_shapes_default_to_100_square(kind):
    record = normalize({"kind": kind, "x": 0, "y": 0})

    assert (record.x, record.y) == (-50, -50)
    assert (record.props["w"], record.props["h"]) == (100, 100)


def test_every_kind_has_a_rule_and_normalizes():
    for kind in SHAPE_RULES:
        descriptor = {"kind": kind, "x": 10, "y": 20, "points": [{"x": 0, "y": 0}]}
        assert isinstance(normalize(descriptor), ShapeRecord), kind


def test_rectangle_example():
    record = normalize({"kind": "rectangle", "x": 600, "y": 400, "width": 200, "height": 100})

    assert (record.x, record.y) == (500, 350)
    assert record.props["w"] == 200
    assert record.props["h"] == 100


def test_circle_ignores_height():
    record = normalize({"kind": "circle", "x": 600, "y": 400, "width": 80, "height": 300})

    assert record.props == {"geo": "ellipse", "w": 80, "h": 80}
    assert (record.x, record.y) == (560, 360)


def test_circle_without_height():
    record = normalize({"kind": "circle", "x": 600, "y": 400, "width": 80})

    assert record.props["geo"] == "ellipse"
    assert (record.props["w"], record.props["h"]) == (80, 80)
    assert (record.x, record.y) == (560, 360)


def test_text_is_anchored_at_its_origin_with_placeholder():
    record = normalize({"kind": "text", "x": 50, "y": 60, "width": 400})

    assert record.type == "text"
    assert (record.x, record.y) == (50, 60)
    assert record.props == {"text": "Text"}


def test_note_is_centered_with_placeholder():
    record = normalize({"kind": "note", "x": 200, "y": 200})

    assert record.type == "note"
    assert (record.x, record.y) == (150, 150)
    assert record.props == {"text": "Note"}


def test_note_keeps_supplied_text():
    record = normalize({"kind": "note", "x": 0, "y": 0, "text": "remember"})

    assert record.props["text"] == "remember"


def test_arrow_defaults_to_offset_100_0():
    record = normalize({"kind": "arrow", "x": 400, "y": 400})

    assert record.type == "arrow"
    assert (record.x, record.y) == (400, 400)
    assert record.props["start"] == {"x": 0, "y": 0}
    assert record.props["end"] == {"x": 100, "y": 0}


def test_line_end_is_an_offset_from_its_anchor():
    record = normalize({"kind": "line", "x": 10, "y": 10, "endX": -30, "endY": 45})

    assert (record.x, record.y) == (10, 10)
    assert record.props["points"]["a1"] == {"id": "a1", "index": "a1", "x": 0, "y": 0}
    assert record.props["points"]["a2"] == {"id": "a2", "index": "a2", "x": -30, "y": 45}


def test_draw_points_become_one_free_segment_with_default_pressure():
    record = normalize({
        "kind": "draw",
        "x": 100,
        "y": 100,
        "points": [{"x": 0, "y": 0}, {"x": 10, "y": 5, "z": 0.9}],
    })

    assert record.type == "draw"
    assert (record.x, record.y) == (100, 100)
    assert record.props["segments"] == [
        {"type": "free", "points": [{"x": 0, "y": 0, "z": 0.5}, {"x": 10, "y": 5, "z": 0.9}]},
    ]
    assert record.props["color"] == "black"
    assert record.props["size"] == "m"
    assert record.props["fill"] == "none"
    assert record.props["isClosed"] is False


def test_closed_freehand_square_stays_a_freehand_path():
    square = [{"x": 0, "y": 0}, {"x": 50, "y": 0}, {"x": 50, "y": 50}, {"x": 0, "y": 50}]
    record = normalize({"kind": "freehand", "x": 0, "y": 0, "points": square, "isClosed": True, "fill": "solid"})

    assert record.type == "draw"
    assert record.props["isClosed"] is True
    assert record.props["fill"] == "solid"
    assert len(record.props["segments"]) == 1
    assert len(record.props["segments"][0]["points"]) == 4


def test_segments_take_precedence_over_points():
    record = normalize({
        "kind": "draw",
        "x": 0,
        "y": 0,
        "points": [{"x": 99, "y": 99}],
        "segments": [
            {"type": "straight", "points": [{"x": 0, "y": 0}, {"x": 20, "y": 0}]},
            {"type": "free", "points": [{"x": 20, "y": 0, "z": 0.2}]},
        ],
        "color": "red",
        "size": "xl",
    })

    segments = record.props["segments"]
    assert [s["type"] for s in segments] == ["straight", "free"]
    assert segments[0]["points"][1] == {"x": 20, "y": 0, "z": 0.5}
    assert segments[1]["points"][0]["z"] == 0.2
    assert record.props["color"] == "red"
    assert record.props["size"] == "xl"


@pytest.mark.parametrize("descriptor", [
    {"kind": "draw", "x": 0, "y": 0},
    {"kind": "freehand", "x": 0, "y": 0, "points": []},
    {"kind": "draw", "x": 0, "y": 0, "segments": []},
    {"kind": "draw", "x": 0, "y": 0, "segments": [{"type": "free", "points": []}]},
    {"kind": "draw", "x": 0, "y": 0, "segments": [{"points": None}]},
])
def test_draw_without_path_data_is_an_error(descriptor):
    outcome = normalize(descriptor)

    assert isinstance(outcome, ShapeError)
    assert outcome.message == "Draw shape requires points or segments"


@pytest.mark.parametrize("field,default", [
    ("color", "black"),
    ("size", "m"),
    ("fill", "none"),
    ("isClosed", False),
])
def test_null_draw_fields_take_their_defaults(field, default):
    record = normalize({"kind": "draw", "x": 0, "y": 0, "points": [{"x": 0, "y": 0}], field: None})

    assert isinstance(record, ShapeRecord)
    assert record.props[field] == default


@pytest.mark.parametrize("field", ["width", "height", "text", "endX", "endY", "points", "segments"])
def test_null_optional_fields_count_as_absent(field):
    kind = "arrow" if field.startswith("end") else "rectangle"
    descriptor = {"kind": kind, "x": 0, "y": 0, field: None}

    assert normalize(descriptor) == normalize({"kind": kind, "x": 0, "y": 0})


def test_segment_type_defaults_to_free():
    record = normalize({"kind": "draw", "x": 0, "y": 0, "segments": [{"type": None, "points": [{"x": 1, "y": 1}]}]})

    assert record.props["segments"][0]["type"] == "free"


def test_empty_segments_are_dropped_from_a_path():
    record = normalize({
        "kind": "draw",
        "x": 0,
        "y": 0,
        "segments": [{"type": "free", "points": []}, {"type": "straight", "points": [{"x": 1, "y": 1}]}],
    })

    assert [s["type"] for s in record.props["segments"]] == ["straight"]


def test_unknown_kind_names_the_value():
    outcome = normalize({"kind": "blob", "x": 0, "y": 0})

    assert isinstance(outcome, ShapeError)
    assert outcome.kind == "blob"
    assert "blob" in outcome.message
    assert outcome.to_payload() == {"error": "Unknown shape kind: blob"}


def test_missing_kind_is_an_error():
    outcome = normalize({"x": 0, "y": 0})

    assert isinstance(outcome, ShapeError)
    assert "Unknown shape kind" in outcome.message


def test_missing_coordinates_are_reported():
    outcome = normalize({"kind": "rectangle", "x": 10})

    assert isinstance(outcome, ShapeError)
    assert "y" in outcome.message


def test_non_mapping_descriptor_is_an_error():
    outcome = normalize(["rectangle", 1, 2])

    assert isinstance(outcome, ShapeError)


def test_normalize_many_keeps_order_and_does_not_abort():
    outcomes = normalize_many([
        {"kind": "rectangle", "x": 0, "y": 0},
        {"kind": "spiral", "x": 0, "y": 0},
        {"kind": "text", "x": 0, "y": 0},
    ])

    assert [type(o) for o in outcomes] == [ShapeRecord, ShapeError, ShapeRecord]
