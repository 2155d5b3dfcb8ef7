"""Layered (Sugiyama-style) layout for diagram plans.

Ranks are the active architectural layers, top to bottom. Inside a rank, nodes
run left to right: first by their longest incoming path over edges that stay
inside the layer, then by barycenter sweeps that reduce crossings between
neighbouring ranks. Coordinates are top-left corners.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import networkx as nx

from sketchstack.diagram.layers import layer_of
from sketchstack.models.diagram_plan import LAYER_ORDER, DiagramEdge, DiagramNode, Layer, PositionedNode


@dataclass(frozen=True)
class LayoutConfig:
    node_width: int = 160
    node_height: int = 80
    horizontal_spacing: int = 140
    layer_gap: int = 140
    start_x: int = 60
    start_y: int = 60
    sweeps: int = 4


DEFAULT_LAYOUT = LayoutConfig()


def _node_layer(node: DiagramNode) -> Layer:
    if node.layer is not None:
        return Layer(node.layer)
    return layer_of(node.type)


def _build_graph(nodes: Sequence[DiagramNode], edges: Sequence[DiagramEdge]) -> nx.DiGraph:
    # Graph vertices are node indices so duplicate ids still get a position.
    index_by_id: Dict[str, int] = {}
    for index, node in enumerate(nodes):
        index_by_id.setdefault(node.id, index)

    graph = nx.DiGraph()
    graph.add_nodes_from(range(len(nodes)))
    for edge in edges:
        source = index_by_id.get(edge.from_)
        target = index_by_id.get(edge.to)
        if source is None or target is None or source == target:
            continue
        graph.add_edge(source, target)
    return graph


def _intra_layer_depth(graph: nx.DiGraph, members: List[int]) -> Dict[int, int]:
    """Longest incoming path per node, counting only edges inside ``members``."""
    condensed = nx.condensation(graph.subgraph(members))
    mapping = condensed.graph["mapping"]
    component_depth: Dict[int, int] = {}
    for component in nx.topological_sort(condensed):
        preds = list(condensed.predecessors(component))
        component_depth[component] = max((component_depth[p] + 1 for p in preds), default=0)
    return {member: component_depth[mapping[member]] for member in members}


def _count_crossings(graph: nx.DiGraph, rows: List[List[int]], rank: Dict[int, int]) -> int:
    position = {node: idx for row in rows for idx, node in enumerate(row)}
    crossings = 0
    for upper in range(len(rows) - 1):
        segments = []
        for u, v in graph.edges():
            if {rank[u], rank[v]} == {upper, upper + 1}:
                top, bottom = (u, v) if rank[u] == upper else (v, u)
                segments.append((position[top], position[bottom]))
        for i in range(len(segments)):
            for j in range(i + 1, len(segments)):
                (a1, b1), (a2, b2) = segments[i], segments[j]
                if (a1 - a2) * (b1 - b2) < 0:
                    crossings += 1
    return crossings


def _sweep(
    graph: nx.DiGraph,
    rows: List[List[int]],
    rank: Dict[int, int],
    depth: Dict[int, int],
    downward: bool,
) -> List[List[int]]:
    rows = [list(row) for row in rows]
    order = range(1, len(rows)) if downward else range(len(rows) - 2, -1, -1)
    for r in order:
        position = {node: idx for row in rows for idx, node in enumerate(row)}

        def key(node: int) -> tuple:
            neighbours = [
                other
                for other in nx.all_neighbors(graph, node)
                if (rank[other] < r if downward else rank[other] > r)
            ]
            if neighbours:
                barycenter = sum(position[other] for other in neighbours) / len(neighbours)
            else:
                barycenter = float(position[node])
            return (depth[node], barycenter, position[node])

        rows[r] = sorted(rows[r], key=key)
    return rows


def layout(
    nodes: Sequence[DiagramNode],
    edges: Sequence[DiagramEdge],
    config: Optional[LayoutConfig] = None,
) -> List[PositionedNode]:
    """Position every node. Deterministic for a given input; never raises on dangling edges."""
    config = config or DEFAULT_LAYOUT
    if not nodes:
        return []

    layers = [_node_layer(node) for node in nodes]
    present = set(layers)
    ranked_layers = [layer for layer in LAYER_ORDER if layer in present]
    rank_of_layer = {layer: r for r, layer in enumerate(ranked_layers)}
    rank = {index: rank_of_layer[layer] for index, layer in enumerate(layers)}

    graph = _build_graph(nodes, edges)

    depth: Dict[int, int] = {}
    rows: List[List[int]] = []
    for r in range(len(ranked_layers)):
        members = [index for index in range(len(nodes)) if rank[index] == r]
        depth.update(_intra_layer_depth(graph, members))
        rows.append(sorted(members, key=lambda index: (depth[index], index)))

    best_rows = rows
    best_crossings = _count_crossings(graph, rows, rank)
    for sweep in range(config.sweeps):
        if best_crossings == 0:
            break
        rows = _sweep(graph, rows, rank, depth, downward=(sweep % 2 == 0))
        crossings = _count_crossings(graph, rows, rank)
        if crossings < best_crossings:
            best_rows, best_crossings = rows, crossings

    order = {index: idx for row in best_rows for idx, index in enumerate(row)}
    positioned: List[PositionedNode] = []
    for index, node in enumerate(nodes):
        positioned.append(
            PositionedNode(
                id=node.id,
                label=node.label,
                type=node.type,
                layer=layers[index],
                x=config.start_x + order[index] * (config.node_width + config.horizontal_spacing),
                y=config.start_y + rank[index] * (config.node_height + config.layer_gap),
                rank=rank[index],
                order=order[index],
            )
        )
    return positioned
