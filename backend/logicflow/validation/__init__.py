"""
Validation module for logic graphs.
"""

from logicflow.validation.graph_validator import (
    GraphValidator,
    GraphValidationResult,
    ValidationIssue,
    ValidationSeverity,
    validate_graph,
    raise_on_errors,
)

from logicflow.validation.analysis import (
    GraphAnalysis,
    analyze_graph,
    calculate_complexity,
    find_cycle,
    find_unreachable_nodes,
    has_cycle,
    step_edges,
)

__all__ = [
    "GraphValidator",
    "GraphValidationResult",
    "ValidationIssue",
    "ValidationSeverity",
    "validate_graph",
    "raise_on_errors",
    "GraphAnalysis",
    "analyze_graph",
    "calculate_complexity",
    "find_cycle",
    "find_unreachable_nodes",
    "has_cycle",
    "step_edges",
]
