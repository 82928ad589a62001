"""
Graph Validator - structural checks for logic graphs.

Default battery (always all five, never short-circuited):
- At least one output node
- Decisions have YES and NO branches that point at existing nodes
- Isolated nodes (no edges at all)
- Dead ends (non-output nodes without outgoing edges)
- At least one input node

Deep mode adds reachability and cycle warnings.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set

from logicflow.ir.errors import GraphValidationFailed
from logicflow.ir.graph import Branch, LogicGraph, LogicNode, NodeKind
from logicflow.validation.analysis import find_cycle, find_unreachable_nodes, step_edges

logger = logging.getLogger(__name__)


class ValidationSeverity(Enum):
    ERROR = "error"      # Blocks prompt generation
    WARNING = "warning"  # Flow is usable but suspicious


@dataclass
class ValidationIssue:
    """A single validation issue found in the graph"""
    severity: ValidationSeverity
    code: str           # Machine-readable issue code
    message: str        # Human-readable description
    node_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
            "node_id": self.node_id,
        }


@dataclass
class GraphValidationResult:
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not any(i.severity == ValidationSeverity.ERROR for i in self.issues)

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.ERROR]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.WARNING]

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "issues": [i.to_dict() for i in self.issues],
        }

    def get_summary(self) -> str:
        status = "Valid" if self.is_valid else "Invalid"
        return f"{status} | Errors: {self.error_count}, Warnings: {self.warning_count}"


def _node_name(node: LogicNode) -> str:
    return node.title or node.id


class GraphValidator:
    """
    Validates logic graphs for well-formedness.

    Usage:
        validator = GraphValidator()
        result = validator.validate(graph)

        if not result.is_valid:
            for issue in result.errors:
                ...
    """

    def __init__(self, deep: bool = False):
        self.deep = deep

    def validate(self, graph: LogicGraph) -> GraphValidationResult:
        # Synthetic start/end anchors are never judged, nor do their edges count
        steps = graph.step_nodes()
        node_ids = {node.id for node in graph.nodes}

        issues: List[ValidationIssue] = []
        issues.extend(self._check_output_exists(steps))
        issues.extend(self._check_decision_branches(graph, steps, node_ids))
        issues.extend(self._check_isolated_nodes(graph, steps))
        issues.extend(self._check_dead_ends(graph, steps))
        issues.extend(self._check_input_exists(steps))

        if self.deep:
            issues.extend(self._check_unreachable(graph))
            issues.extend(self._check_cycles(graph))

        result = GraphValidationResult(issues=issues)
        logger.debug("[VALIDATOR] %s", result.get_summary())
        return result

    def _check_output_exists(self, steps: List[LogicNode]) -> List[ValidationIssue]:
        if any(n.kind == NodeKind.OUTPUT for n in steps):
            return []
        return [ValidationIssue(
            severity=ValidationSeverity.ERROR,
            code="MISSING_OUTPUT",
            message="Flow must contain at least one output node",
        )]

    def _check_decision_branches(
        self,
        graph: LogicGraph,
        steps: List[LogicNode],
        node_ids: Set[str],
    ) -> List[ValidationIssue]:
        issues = []
        for decision in (n for n in steps if n.kind == NodeKind.DECISION):
            name = decision.decision_condition
            yes_edge = graph.branch_edge(decision.id, Branch.YES)
            no_edge = graph.branch_edge(decision.id, Branch.NO)

            missing = [
                branch.value.upper()
                for branch, edge in ((Branch.YES, yes_edge), (Branch.NO, no_edge))
                if edge is None
            ]
            if missing:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="MISSING_BRANCH",
                    message=f"Decision '{name}' is missing its {'/'.join(missing)} branch",
                    node_id=decision.id,
                ))

            for branch, edge in ((Branch.YES, yes_edge), (Branch.NO, no_edge)):
                if edge is not None and edge.target not in node_ids:
                    issues.append(ValidationIssue(
                        severity=ValidationSeverity.ERROR,
                        code="DANGLING_BRANCH",
                        message=(
                            f"Decision '{name}' {branch.value.upper()} branch "
                            f"leads to non-existent node '{edge.target}'"
                        ),
                        node_id=decision.id,
                    ))
        return issues

    def _check_isolated_nodes(
        self,
        graph: LogicGraph,
        steps: List[LogicNode],
    ) -> List[ValidationIssue]:
        connected: Set[str] = set()
        for edge in step_edges(graph):
            connected.add(edge.source)
            connected.add(edge.target)

        return [
            ValidationIssue(
                severity=ValidationSeverity.WARNING,
                code="ISOLATED_NODE",
                message=f"Node '{_node_name(node)}' is isolated (no connections)",
                node_id=node.id,
            )
            for node in steps
            if node.id not in connected
        ]

    def _check_dead_ends(
        self,
        graph: LogicGraph,
        steps: List[LogicNode],
    ) -> List[ValidationIssue]:
        with_outgoing = {edge.source for edge in step_edges(graph)}

        # Output nodes are allowed to have no outgoing edges
        return [
            ValidationIssue(
                severity=ValidationSeverity.WARNING,
                code="DEAD_END",
                message=f"Node '{_node_name(node)}' has no outgoing connections",
                node_id=node.id,
            )
            for node in steps
            if node.kind != NodeKind.OUTPUT and node.id not in with_outgoing
        ]

    def _check_input_exists(self, steps: List[LogicNode]) -> List[ValidationIssue]:
        if any(n.kind == NodeKind.INPUT for n in steps):
            return []
        return [ValidationIssue(
            severity=ValidationSeverity.WARNING,
            code="MISSING_INPUT",
            message="Flow has no input nodes",
        )]

    def _check_unreachable(self, graph: LogicGraph) -> List[ValidationIssue]:
        nodes: Dict[str, LogicNode] = graph.node_map()
        return [
            ValidationIssue(
                severity=ValidationSeverity.WARNING,
                code="UNREACHABLE_NODE",
                message=f"Node '{_node_name(nodes[node_id])}' cannot be reached from the entry",
                node_id=node_id,
            )
            for node_id in find_unreachable_nodes(graph)
        ]

    def _check_cycles(self, graph: LogicGraph) -> List[ValidationIssue]:
        cycle = find_cycle(graph)
        if not cycle:
            return []

        nodes = graph.node_map()
        path = " -> ".join(
            nodes[node_id].title if node_id in nodes else node_id
            for node_id in cycle
        )
        return [ValidationIssue(
            severity=ValidationSeverity.WARNING,
            code="CYCLE_DETECTED",
            message=f"Flow contains a loop: {path}",
            node_id=cycle[0],
        )]


def validate_graph(graph: LogicGraph, deep: bool = False) -> GraphValidationResult:
    """Convenience function to validate a graph."""
    return GraphValidator(deep=deep).validate(graph)


def raise_on_errors(graph: LogicGraph) -> GraphValidationResult:
    """Validate the graph and raise if any error-severity issue is found."""
    result = validate_graph(graph)
    if not result.is_valid:
        error_messages = [f"[{i.code}] {i.message}" for i in result.errors]
        raise GraphValidationFailed(
            f"Graph validation failed with {result.error_count} errors:\n"
            + "\n".join(error_messages),
            issues=result.errors,
        )
    return result
