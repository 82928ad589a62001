from typing import List, Set

from logicflow.ir.graph import Branch, LogicGraph, LogicNode, NodeKind

_BRANCH_RANK = {Branch.YES: 0, Branch.NO: 1, None: 2}


def _ordered_targets(graph: LogicGraph, node: LogicNode) -> List[str]:
    edges = graph.outgoing(node.id)
    if node.kind == NodeKind.DECISION:
        # Happy path first: the whole YES subtree before the NO subtree
        edges = sorted(edges, key=lambda e: _BRANCH_RANK[e.branch])
    return [edge.target for edge in edges]


def order_nodes(graph: LogicGraph) -> List[LogicNode]:
    """
    Deterministic reading order for a graph.

    Depth-first from the entry node (first input, else first node). A
    decision descends into its YES branch completely before its NO branch;
    any other node follows its outgoing edges in declaration order. Nodes
    already emitted are skipped, which also breaks cycles. Nodes the walk
    never reaches are appended in declaration order, so every node appears
    exactly once. Synthetic anchors are walked through but never emitted.
    """
    nodes = graph.node_map()
    ordered: List[LogicNode] = []
    visited: Set[str] = set()
    stack = []

    def enter(node_id: str) -> None:
        node = nodes[node_id]
        visited.add(node_id)
        if not node.kind.is_anchor:
            ordered.append(node)
        stack.append(iter(_ordered_targets(graph, node)))

    entry = graph.entry_node()
    if entry is not None:
        enter(entry.id)

    while stack:
        for target in stack[-1]:
            if target in nodes and target not in visited:
                enter(target)
                break
        else:
            stack.pop()

    for node in graph.nodes:
        if node.id not in visited and not node.kind.is_anchor:
            ordered.append(node)

    return ordered
