import xml.etree.ElementTree as ET

from sketchstack.diagram.layout_engine import DEFAULT_LAYOUT, layout
from sketchstack.models.diagram_plan import DiagramEdge, DiagramNode, DiagramPlan
from sketchstack.renderers.drawio_renderer import (
    DOWNWARD,
    ICON_SIZE,
    LOOP_BOTTOM,
    LOOP_TOP,
    SIDE_LEFT,
    SIDE_RIGHT,
    UPWARD,
    build_drawio_xml,
    edge_routing,
    render_drawio_xml,
)


def _plan(edges, nodes=None):
    nodes = nodes or [
        DiagramNode(id="a", label="Web", type="frontend"),
        DiagramNode(id="b", label="Store", type="database"),
    ]
    return DiagramPlan(nodes=nodes, edges=edges)


def _cells(xml):
    root = ET.fromstring(xml)
    return root.findall("./root/mxCell")


def _layers(cells):
    return [c for c in cells if (c.get("style") or "").startswith("swimlane")]


def _connectors(cells):
    return [c for c in cells if c.get("edge") == "1"]


def test_two_layers_and_one_connector():
    xml = build_drawio_xml(_plan([DiagramEdge(from_="a", to="b", protocol="REST")]))
    cells = _cells(xml)
    layers = _layers(cells)
    assert [c.get("value") for c in layers] == ["Application Layer", "Data Layer"]
    connectors = _connectors(cells)
    assert len(connectors) == 1
    assert connectors[0].get("value") == "[REST]"


def test_dangling_edge_emits_no_connector():
    xml = build_drawio_xml(_plan([DiagramEdge(from_="a", to="missing")]))
    assert _connectors(_cells(xml)) == []


def test_ids_are_monotonic_from_two():
    plan = _plan([DiagramEdge(from_="a", to="missing"), DiagramEdge(from_="a", to="b")])
    ids = [int(c.get("id")) for c in _cells(build_drawio_xml(plan))]
    assert ids[:2] == [0, 1]
    assert ids[2:] == list(range(2, 2 + len(ids) - 2))


def test_connector_references_node_cells():
    cells = _cells(build_drawio_xml(_plan([DiagramEdge(from_="a", to="b")])))
    by_value = {c.get("value"): c.get("id") for c in cells if c.get("vertex") == "1"}
    connector = _connectors(cells)[0]
    assert connector.get("source") == by_value["Web"]
    assert connector.get("target") == by_value["Store"]
    assert DOWNWARD in connector.get("style")


def test_nodes_are_positioned_inside_their_layer():
    cells = _cells(build_drawio_xml(_plan([])))
    layer_ids = {c.get("id") for c in _layers(cells)}
    nodes = [c for c in cells if c.get("vertex") == "1" and c.get("id") not in layer_ids]
    for node in nodes:
        assert node.get("parent") in layer_ids
        geometry = node.find("mxGeometry")
        assert geometry.get("x") == "20"
        assert geometry.get("y") == "30"


def test_provider_shapes_get_icon_and_caption():
    xml = build_drawio_xml(_plan([]), cloud_provider="aws")
    cells = _cells(xml)
    icon = next(c for c in cells if "mxgraph.aws4.dynamodb" in (c.get("style") or ""))
    assert icon.find("mxGeometry").get("width") == str(ICON_SIZE)
    caption = cells[cells.index(icon) + 1]
    assert caption.get("value") == "Store"
    assert caption.get("style").startswith("text;")
    assert int(caption.get("id")) == int(icon.get("id")) + 1


def test_neutral_provider_uses_neutral_styles():
    xml = build_drawio_xml(_plan([]), cloud_provider="neutral")
    assert "mxgraph.aws4" not in xml
    assert 'width="160" height="80"' in xml


def test_unknown_provider_falls_back_to_neutral():
    assert build_drawio_xml(_plan([]), cloud_provider="ibm") == build_drawio_xml(_plan([]))


def test_labels_are_escaped():
    nodes = [DiagramNode(id="a", label='R&D <"ops">', type="backend")]
    edges = [DiagramEdge(from_="a", to="a", label="it's", protocol="A&B")]
    xml = build_drawio_xml(_plan(edges, nodes))
    assert "R&amp;D &lt;&quot;ops&quot;&gt;" in xml
    assert "it&apos;s [A&amp;B]" in xml
    values = [c.get("value") for c in _cells(xml)]
    assert 'R&D <"ops">' in values


def test_routing_within_a_layer():
    nodes = [DiagramNode(id=n, label=n, type="backend") for n in ("a", "b", "c")]
    placed = {p.id: p for p in layout(nodes, [])}
    a, b, c = placed["a"], placed["b"], placed["c"]
    assert edge_routing(a, b, DEFAULT_LAYOUT) == SIDE_RIGHT
    assert edge_routing(b, a, DEFAULT_LAYOUT) == SIDE_LEFT
    assert edge_routing(a, c, DEFAULT_LAYOUT) == LOOP_BOTTOM
    assert edge_routing(c, a, DEFAULT_LAYOUT) == LOOP_TOP


def test_routing_across_layers():
    nodes = [DiagramNode(id="web", label="web", type="frontend"), DiagramNode(id="db", label="db", type="database")]
    placed = {p.id: p for p in layout(nodes, [])}
    assert edge_routing(placed["web"], placed["db"], DEFAULT_LAYOUT) == DOWNWARD
    assert edge_routing(placed["db"], placed["web"], DEFAULT_LAYOUT) == UPWARD


def test_empty_plan_renders_reserved_cells_only():
    xml = render_drawio_xml([], [])
    assert [c.get("id") for c in _cells(xml)] == ["0", "1"]
