# backend/logicflow/compiler/render_mermaid.py

import logging

from logicflow.compiler.ordering import order_nodes
from logicflow.dsl.mermaid import mermaid_id, mermaid_label
from logicflow.ir.graph import LogicGraph, LogicNode, NodeKind

logger = logging.getLogger(__name__)

SHAPES = {
    NodeKind.INPUT: ('[/"', '"/]'),       # parallelogram
    NodeKind.PROCESS: ('["', '"]'),       # rectangle
    NodeKind.DECISION: ('{"', '"}'),      # diamond
    NodeKind.OUTPUT: ('(["', '"])'),      # rounded terminal
}


def render_node(node: LogicNode) -> str:
    opening, closing = SHAPES[node.kind]
    return f"  {mermaid_id(node.id)}{opening}{mermaid_label(node.title)}{closing}"


def render_mermaid(graph: LogicGraph, direction: str = "TD") -> str:
    """
    Render the graph as a Mermaid flowchart.
    Nodes follow the prompt reading order; edges keep declaration order.
    """
    lines = [f"flowchart {direction}"]

    for node in order_nodes(graph):
        lines.append(render_node(node))

    nodes = graph.node_map()
    for edge in graph.edges:
        source = nodes.get(edge.source)
        target = nodes.get(edge.target)

        if source is None or target is None:
            logger.debug("[GENERATOR] Skipping dangling edge %s -> %s", edge.source, edge.target)
            continue
        if source.kind.is_anchor or target.kind.is_anchor:
            continue

        label = f"|{edge.branch.value.upper()}|" if edge.branch else ""
        lines.append(f"  {mermaid_id(source.id)} -->{label} {mermaid_id(target.id)}")

    return "\n".join(lines)
