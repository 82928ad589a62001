"""
Graph analysis utilities used beyond the default validation battery.

All functions are read-only over the graph and terminate on any input,
including self-loops, cycles and edges pointing at unknown node ids.
"""

import math
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Set

from logicflow.ir.graph import LogicEdge, LogicGraph, NodeKind


def step_edges(graph: LogicGraph) -> List[LogicEdge]:
    """Edges between real steps; anything touching a start/end anchor is dropped."""
    anchor_ids = {n.id for n in graph.nodes if n.kind.is_anchor}
    return [
        e for e in graph.edges
        if e.source not in anchor_ids and e.target not in anchor_ids
    ]


def find_unreachable_nodes(graph: LogicGraph) -> List[str]:
    """
    Breadth-first walk from the input nodes (or the first node when there
    is no input). Returns ids never visited, in declaration order.
    """
    adjacency = graph.adjacency()
    queue = deque(node.id for node in graph.start_nodes())
    reachable: Set[str] = set()

    while queue:
        current = queue.popleft()
        if current in reachable:
            continue
        reachable.add(current)
        for target in adjacency.get(current, ()):
            if target not in reachable:
                queue.append(target)

    return [
        node.id for node in graph.nodes
        if node.id not in reachable and not node.kind.is_anchor
    ]


def find_cycle(graph: LogicGraph) -> List[str]:
    """
    Depth-first search from the same start set as find_unreachable_nodes,
    keeping the current path; an edge back into the path is a cycle.

    Returns the first cycle as node ids with the closing id repeated at the
    end, or [] when acyclic. Iterative, so long chains cannot hit the
    recursion limit.
    """
    adjacency = graph.adjacency()
    visited: Set[str] = set()

    for start in graph.start_nodes():
        if start.id in visited:
            continue

        visited.add(start.id)
        path: List[str] = [start.id]
        stack = [iter(adjacency.get(start.id, ()))]

        while stack:
            descended = False
            for target in stack[-1]:
                if target in path:
                    return path[path.index(target):] + [target]
                if target not in visited:
                    visited.add(target)
                    path.append(target)
                    stack.append(iter(adjacency.get(target, ())))
                    descended = True
                    break

            if not descended:
                stack.pop()
                path.pop()

    return []


def has_cycle(graph: LogicGraph) -> bool:
    return bool(find_cycle(graph))


def calculate_complexity(graph: LogicGraph) -> int:
    """
    Rough heuristic: nodes + 2 per decision + 0.5 per edge, rounded half up.
    """
    steps = graph.step_nodes()
    decisions = [n for n in steps if n.kind == NodeKind.DECISION]

    score = len(steps) + len(decisions) * 2 + len(step_edges(graph)) * 0.5
    return int(math.floor(score + 0.5))


@dataclass
class GraphAnalysis:
    inputs: List[str] = field(default_factory=list)
    decisions: List[str] = field(default_factory=list)
    outputs: List[str] = field(default_factory=list)
    has_loops: bool = False
    complexity_score: int = 0
    unreachable_node_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "inputs": self.inputs,
            "decisions": self.decisions,
            "outputs": self.outputs,
            "has_loops": self.has_loops,
            "complexity_score": self.complexity_score,
            "unreachable_node_ids": self.unreachable_node_ids,
        }


def analyze_graph(graph: LogicGraph) -> GraphAnalysis:
    return GraphAnalysis(
        inputs=[n.id for n in graph.nodes_of_kind(NodeKind.INPUT)],
        decisions=[n.id for n in graph.nodes_of_kind(NodeKind.DECISION)],
        outputs=[n.id for n in graph.nodes_of_kind(NodeKind.OUTPUT)],
        has_loops=has_cycle(graph),
        complexity_score=calculate_complexity(graph),
        unreachable_node_ids=find_unreachable_nodes(graph),
    )
