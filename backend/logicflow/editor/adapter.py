"""
Mapping between LogicGraph and the node/edge lists the canvas editor owns.

The editor's records carry 2D positions and handle names; the graph has
no notion of layout, so positions are accepted and dropped.
"""

from typing import List, Optional, Tuple

from pydantic import BaseModel

from logicflow.ir.graph import Branch, LogicEdge, LogicGraph, LogicNode, NodeKind


class Position(BaseModel):
    x: float = 0.0
    y: float = 0.0


class EditorNode(BaseModel):
    id: str
    kind: NodeKind
    title: str
    description: Optional[str] = None
    condition: Optional[str] = None
    position: Optional[Position] = None


class EditorEdge(BaseModel):
    source: str
    target: str
    source_handle: Optional[str] = None  # "yes" | "no" | None


def graph_to_editor(graph: LogicGraph) -> Tuple[List[EditorNode], List[EditorEdge]]:
    nodes = [
        EditorNode(
            id=node.id,
            kind=node.kind,
            title=node.title,
            description=node.description,
            condition=node.decision_condition if node.kind == NodeKind.DECISION else None,
        )
        for node in graph.step_nodes()
    ]
    kept = {node.id for node in nodes}
    edges = [
        EditorEdge(
            source=edge.source,
            target=edge.target,
            source_handle=edge.branch.value if edge.branch else None,
        )
        for edge in graph.edges
        if edge.source in kept and edge.target in kept
    ]
    return nodes, edges


def _branch_from_handle(handle: Optional[str]) -> Optional[Branch]:
    if handle in (Branch.YES.value, Branch.NO.value):
        return Branch(handle)
    return None


def editor_to_graph(
    nodes: List[EditorNode],
    edges: List[EditorEdge],
    title: str = "Untitled Logic",
    description: Optional[str] = None,
) -> LogicGraph:
    return LogicGraph(
        title=title,
        description=description,
        nodes=[
            LogicNode(
                id=node.id,
                kind=node.kind,
                title=node.title.strip() or "Unnamed",
                description=node.description or None,
                condition=node.condition if node.kind == NodeKind.DECISION else None,
            )
            for node in nodes
        ],
        edges=[
            LogicEdge(
                source=edge.source,
                target=edge.target,
                branch=_branch_from_handle(edge.source_handle),
            )
            for edge in edges
        ],
    )
