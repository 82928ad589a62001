from enum import Enum
from itertools import count
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class NodeKind(str, Enum):
    INPUT = "input"
    PROCESS = "process"
    DECISION = "decision"
    OUTPUT = "output"
    # Synthetic anchors, only produced by the anchor-synthesizing parser mode
    START = "start"
    END = "end"

    @property
    def is_anchor(self) -> bool:
        return self in (NodeKind.START, NodeKind.END)

    @property
    def label(self) -> str:
        return self.value.capitalize()


class Branch(str, Enum):
    YES = "yes"
    NO = "no"


class LogicNode(BaseModel):
    id: str
    kind: NodeKind
    title: str
    description: Optional[str] = None
    condition: Optional[str] = None  # decision only

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be empty")
        return value

    @property
    def display_description(self) -> str:
        return self.description or self.title

    @property
    def decision_condition(self) -> str:
        return self.condition or self.title

    @property
    def has_distinct_description(self) -> bool:
        return bool(self.description) and self.description != self.title


class LogicEdge(BaseModel):
    source: str
    target: str
    branch: Optional[Branch] = None

    @property
    def key(self) -> tuple:
        return (self.source, self.target, self.branch)


class LogicGraph(BaseModel):
    """
    A process described as typed steps plus directed edges.

    Node order is declaration order and is significant: it decides the
    fallback entry node and the order of unreachable nodes in renderings.
    The model does not enforce well-formedness; see the validator.
    """

    title: str = "Untitled Logic"
    description: Optional[str] = None
    nodes: List[LogicNode] = Field(default_factory=list)
    edges: List[LogicEdge] = Field(default_factory=list)

    # ---------- lookups ----------

    def node_map(self) -> Dict[str, LogicNode]:
        return {node.id: node for node in self.nodes}

    def node_by_id(self, node_id: str) -> Optional[LogicNode]:
        return next((n for n in self.nodes if n.id == node_id), None)

    def nodes_of_kind(self, kind: NodeKind) -> List[LogicNode]:
        return [n for n in self.nodes if n.kind == kind]

    def step_nodes(self) -> List[LogicNode]:
        return [n for n in self.nodes if not n.kind.is_anchor]

    def outgoing(self, node_id: str) -> List[LogicEdge]:
        return [e for e in self.edges if e.source == node_id]

    def incoming(self, node_id: str) -> List[LogicEdge]:
        return [e for e in self.edges if e.target == node_id]

    def branch_edge(self, node_id: str, branch: Branch) -> Optional[LogicEdge]:
        return next(
            (e for e in self.edges if e.source == node_id and e.branch == branch),
            None,
        )

    def branch_edges(self) -> List[LogicEdge]:
        return [e for e in self.edges if e.branch is not None]

    def adjacency(self) -> Dict[str, List[str]]:
        """Outgoing targets per source id, in edge declaration order."""
        adjacency: Dict[str, List[str]] = {}
        for edge in self.edges:
            adjacency.setdefault(edge.source, []).append(edge.target)
        return adjacency

    # ---------- traversal anchors ----------

    def start_nodes(self) -> List[LogicNode]:
        """Input nodes, or the first node when the graph has no input."""
        inputs = self.nodes_of_kind(NodeKind.INPUT)
        if inputs:
            return inputs
        return self.nodes[:1]

    def entry_node(self) -> Optional[LogicNode]:
        starts = self.start_nodes()
        return starts[0] if starts else None


class IdFactory:
    """Issues fresh node ids; ids are never handed out twice."""

    def __init__(self, prefix: str = "node"):
        self.prefix = prefix
        self._counter = count(1)

    def next_id(self) -> str:
        return f"{self.prefix}_{next(self._counter)}"
