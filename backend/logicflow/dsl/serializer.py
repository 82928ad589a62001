from typing import List, Optional, Tuple

from logicflow.ir.graph import Branch, LogicGraph, LogicNode, NodeKind


def _node_line(node: LogicNode) -> str:
    line = f"{node.kind.value.upper()}: {node.title}"
    if node.has_distinct_description:
        line += f" | {node.description}"
    return line


def _branch_target_title(graph: LogicGraph, node: LogicNode, branch: Branch) -> Optional[str]:
    edge = graph.branch_edge(node.id, branch)
    if edge is None:
        return None
    target = graph.node_by_id(edge.target)
    if target is None or target.kind.is_anchor:
        return None
    return target.title


def serialize_graph(graph: LogicGraph) -> str:
    """
    LogicGraph -> flow notation, in node declaration order.

    Inverse of parse_logic_text for graphs the parser can produce.
    Synthetic start/end anchors and dangling branches are not written.
    """
    lines: List[str] = []

    for node in graph.step_nodes():
        lines.append(_node_line(node))

        if node.kind != NodeKind.DECISION:
            continue

        for branch in (Branch.YES, Branch.NO):
            target_title = _branch_target_title(graph, node, branch)
            if target_title:
                lines.append(f"  {branch.value.upper()} -> {target_title}")

    return "\n".join(lines)


def structural_signature(graph: LogicGraph) -> List[Tuple]:
    """
    Id-independent view of a graph: (kind, title, description, yes, no) per
    step node. Two graphs with equal signatures are round-trip equivalent.
    """
    signature = []
    for node in graph.step_nodes():
        description = node.description if node.has_distinct_description else None
        yes = no = None
        if node.kind == NodeKind.DECISION:
            yes = _branch_target_title(graph, node, Branch.YES)
            no = _branch_target_title(graph, node, Branch.NO)
        signature.append((node.kind.value, node.title, description, yes, no))
    return signature
