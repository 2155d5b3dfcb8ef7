import json
import random

from sketchstack.models.diagram_plan import DiagramEdge, DiagramNode, DiagramPlan
from sketchstack.renderers.excalidraw_renderer import build_excalidraw_scene, shape_style


def _plan(edges):
    return DiagramPlan(
        nodes=[
            DiagramNode(id="api", label="API", type="backend"),
            DiagramNode(id="db", label="Postgres", type="database"),
        ],
        edges=edges,
    )


def _scene(edges, seed=7):
    return build_excalidraw_scene(_plan(edges), rng=random.Random(seed), clock=lambda: 42)


def _of_type(scene, kind):
    return [e for e in scene["elements"] if e["type"] == kind]


def test_envelope():
    scene = _scene([])
    assert scene["type"] == "excalidraw"
    assert scene["version"] == 2
    assert scene["source"] == "https://excalidraw.com"
    assert scene["appState"] == {"viewBackgroundColor": "#ffffff", "gridSize": 20}


def test_seeded_output_is_reproducible():
    edges = [DiagramEdge(from_="api", to="db", label="query")]
    assert json.dumps(_scene(edges)) == json.dumps(_scene(edges))
    assert _scene(edges, seed=1)["elements"][0]["id"] != _scene(edges, seed=2)["elements"][0]["id"]


def test_shapes_follow_type_table():
    scene = _scene([])
    assert [e["type"] for e in scene["elements"] if e["type"] != "text"] == ["rectangle", "ellipse"]
    assert shape_style("unknown-thing").shape == "rectangle"


def test_labels_are_bound_to_their_shapes():
    scene = _scene([])
    shapes = {e["id"]: e for e in scene["elements"] if e["type"] in ("rectangle", "ellipse")}
    labels = _of_type(scene, "text")
    assert {label["text"] for label in labels} == {"API", "Postgres"}
    for label in labels:
        container = shapes[label["containerId"]]
        assert {"id": label["id"], "type": "text"} in container["boundElements"]
        assert label["x"] == container["x"] + 10


def test_arrow_binds_both_endpoints():
    scene = _scene([DiagramEdge(from_="api", to="db", label="query")])
    source, target = [e for e in scene["elements"] if e["type"] in ("rectangle", "ellipse")]
    (arrow,) = _of_type(scene, "arrow")
    assert arrow["startBinding"]["elementId"] == source["id"]
    assert arrow["endBinding"]["elementId"] == target["id"]
    assert arrow["x"] == source["x"] + source["width"] / 2
    assert arrow["points"][-1] == [target["x"] - source["x"], target["y"] - source["y"]]
    assert {"id": arrow["id"], "type": "arrow"} in source["boundElements"]
    assert {"id": arrow["id"], "type": "arrow"} in target["boundElements"]

    midpoint = [e for e in _of_type(scene, "text") if e["text"] == "query"]
    assert len(midpoint) == 1
    assert midpoint[0]["containerId"] is None


def test_dangling_edge_is_omitted():
    scene = _scene([DiagramEdge(from_="api", to="missing", label="lost")])
    assert _of_type(scene, "arrow") == []
    assert all(e.get("text") != "lost" for e in scene["elements"])


def test_every_element_carries_metadata():
    scene = _scene([DiagramEdge(from_="api", to="db")])
    for element in scene["elements"]:
        assert len(element["id"]) == 9
        assert element["version"] == 1
        assert element["isDeleted"] is False
        assert element["updated"] == 42
        assert 0 <= element["seed"] <= 99_999
