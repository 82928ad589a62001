from logicflow.ir.graph import (
    Branch,
    IdFactory,
    LogicEdge,
    LogicGraph,
    LogicNode,
    NodeKind,
)
from logicflow.ir.errors import (
    DiagnosticKind,
    ExternalCallError,
    GraphValidationFailed,
    MalformedResponseError,
    ParseDiagnostic,
    ServiceUnavailableError,
)
