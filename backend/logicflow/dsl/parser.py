"""
Line-based flow notation -> LogicGraph.

Supported syntax (one statement per line, order matters):

    INPUT: Login data | Email and password
    PROCESS: Look up user | DB query
    DECISION: User exists? | Check DB
      YES -> Check password
      NO -> Not found
    OUTPUT: Not found | 404

The parser never fails on odd input. Everything it cannot interpret is
recorded as a ParseDiagnostic and judged later by the validator.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from logicflow import config
from logicflow.ir.errors import DiagnosticKind, ParseDiagnostic
from logicflow.ir.graph import Branch, IdFactory, LogicEdge, LogicGraph, LogicNode, NodeKind

logger = logging.getLogger(__name__)

NODE_LINE_RE = re.compile(r"^(INPUT|PROCESS|DECISION|OUTPUT):\s*(.+)$", re.IGNORECASE)
BRANCH_LINE_RE = re.compile(r"^\s*(YES|NO)\s*->\s*(.+)$", re.IGNORECASE)


@dataclass(frozen=True)
class ParserMode:
    synthesize_anchors: bool = False
    fallback_line_as_process: bool = False

    @classmethod
    def from_config(cls) -> "ParserMode":
        return cls(
            synthesize_anchors=config.PARSER_SYNTHESIZE_ANCHORS,
            fallback_line_as_process=config.PARSER_FALLBACK_AS_PROCESS,
        )


@dataclass
class ParseResult:
    graph: LogicGraph
    diagnostics: List[ParseDiagnostic] = field(default_factory=list)

    def diagnostics_of(self, kind: DiagnosticKind) -> List[ParseDiagnostic]:
        return [d for d in self.diagnostics if d.kind == kind]


# ----------------------------
# Scanner state
# ----------------------------

@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class AwaitingBranches:
    decision_index: int


ScanState = Union[Idle, AwaitingBranches]


@dataclass
class _Declaration:
    kind: NodeKind
    title: str
    description: Optional[str]
    line_number: int
    # branch -> (target title, line number)
    branches: Dict[Branch, Tuple[str, int]] = field(default_factory=dict)


def _split_payload(payload: str) -> Tuple[str, Optional[str]]:
    title, _, description = payload.partition("|")
    return title.strip(), (description.strip() or None)


def _match_declaration(line: str, line_number: int) -> Optional[_Declaration]:
    match = NODE_LINE_RE.match(line)
    if not match:
        return None

    title, description = _split_payload(match.group(2))
    if not title:
        return None

    return _Declaration(
        kind=NodeKind(match.group(1).lower()),
        title=title,
        description=description,
        line_number=line_number,
    )


# ----------------------------
# Scanning
# ----------------------------

def _scan(
    text: str,
    mode: ParserMode,
    diagnostics: List[ParseDiagnostic],
) -> List[_Declaration]:
    declarations: List[_Declaration] = []
    state: ScanState = Idle()

    for line_number, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line:
            continue

        declaration = _match_declaration(line, line_number)
        if declaration:
            declarations.append(declaration)
            if declaration.kind == NodeKind.DECISION:
                state = AwaitingBranches(len(declarations) - 1)
            else:
                state = Idle()
            continue

        branch_match = BRANCH_LINE_RE.match(line)
        if branch_match and isinstance(state, AwaitingBranches):
            branch = Branch(branch_match.group(1).lower())
            target = branch_match.group(2).strip()
            decision = declarations[state.decision_index]

            if branch in decision.branches:
                diagnostics.append(ParseDiagnostic(
                    kind=DiagnosticKind.PARSE_AMBIGUITY,
                    message=(
                        f"Decision '{decision.title}' declares {branch.value.upper()} "
                        f"more than once; keeping '{target}'"
                    ),
                    line_number=line_number,
                    text=line,
                ))
            decision.branches[branch] = (target, line_number)
            continue

        if mode.fallback_line_as_process:
            # Split like a node line; titles never contain "|"
            title, description = _split_payload(line)
            if title:
                declarations.append(_Declaration(
                    kind=NodeKind.PROCESS,
                    title=title,
                    description=description,
                    line_number=line_number,
                ))
                state = Idle()
                continue

        diagnostics.append(ParseDiagnostic(
            kind=DiagnosticKind.PARSE_AMBIGUITY,
            message="Line does not match any statement and was ignored",
            line_number=line_number,
            text=line,
        ))

    return declarations


# ----------------------------
# Graph construction
# ----------------------------

def _build_title_index(
    declarations: List[_Declaration],
    node_ids: List[str],
    diagnostics: List[ParseDiagnostic],
) -> Dict[str, str]:
    index: Dict[str, str] = {}
    for declaration, node_id in zip(declarations, node_ids):
        if declaration.title in index:
            diagnostics.append(ParseDiagnostic(
                kind=DiagnosticKind.DUPLICATE_TITLE,
                message=(
                    f"Title '{declaration.title}' is declared more than once; "
                    "branches naming it resolve to the last declaration"
                ),
                line_number=declaration.line_number,
                text=declaration.title,
            ))
        index[declaration.title] = node_id
    return index


def _build_edges(
    declarations: List[_Declaration],
    node_ids: List[str],
    title_index: Dict[str, str],
    diagnostics: List[ParseDiagnostic],
) -> List[LogicEdge]:
    edges: List[LogicEdge] = []

    for position, declaration in enumerate(declarations):
        source = node_ids[position]

        if declaration.kind == NodeKind.DECISION:
            for branch in (Branch.YES, Branch.NO):
                if branch not in declaration.branches:
                    continue
                target_title, line_number = declaration.branches[branch]
                target = title_index.get(target_title)
                if target is None:
                    diagnostics.append(ParseDiagnostic(
                        kind=DiagnosticKind.DANGLING_BRANCH_TARGET,
                        message=(
                            f"{branch.value.upper()} branch of '{declaration.title}' "
                            f"names unknown node '{target_title}'"
                        ),
                        line_number=line_number,
                        text=target_title,
                    ))
                    continue
                edges.append(LogicEdge(source=source, target=target, branch=branch))
            continue

        # Outputs are terminal and are only reached through explicit branches
        if declaration.kind == NodeKind.OUTPUT:
            continue
        if position + 1 < len(declarations):
            if declarations[position + 1].kind != NodeKind.OUTPUT:
                edges.append(LogicEdge(source=source, target=node_ids[position + 1]))

    return edges


def _add_anchors(
    declarations: List[_Declaration],
    nodes: List[LogicNode],
    edges: List[LogicEdge],
    start_id: str,
    end_id: str,
) -> Tuple[List[LogicNode], List[LogicEdge]]:
    start = LogicNode(id=start_id, kind=NodeKind.START, title="Start")
    end = LogicNode(id=end_id, kind=NodeKind.END, title="End")

    anchor_edges = [LogicEdge(source=start_id, target=nodes[0].id), *edges]
    for node in nodes:
        if node.kind == NodeKind.OUTPUT:
            anchor_edges.append(LogicEdge(source=node.id, target=end_id))

    last = declarations[-1]
    if last.kind in (NodeKind.INPUT, NodeKind.PROCESS):
        anchor_edges.append(LogicEdge(source=nodes[-1].id, target=end_id))

    return [start, *nodes, end], anchor_edges


def parse_logic_text(
    text: str,
    mode: Optional[ParserMode] = None,
    title: Optional[str] = None,
    description: Optional[str] = None,
) -> ParseResult:
    """
    Parse flow notation into a brand-new LogicGraph with fresh node ids.

    Never raises for malformed text. Empty or blank input yields a graph
    with zero nodes and zero edges.
    """
    mode = mode or ParserMode.from_config()
    diagnostics: List[ParseDiagnostic] = []
    graph = LogicGraph(title=title or "Untitled Logic", description=description)

    declarations = _scan(text or "", mode, diagnostics)
    if not declarations:
        logger.debug("[PARSER] No statements found; returning empty graph")
        return ParseResult(graph=graph, diagnostics=diagnostics)

    ids = IdFactory()
    start_id = ids.next_id() if mode.synthesize_anchors else None
    node_ids = [ids.next_id() for _ in declarations]

    title_index = _build_title_index(declarations, node_ids, diagnostics)
    edges = _build_edges(declarations, node_ids, title_index, diagnostics)

    nodes = [
        LogicNode(
            id=node_id,
            kind=declaration.kind,
            title=declaration.title,
            description=declaration.description,
        )
        for declaration, node_id in zip(declarations, node_ids)
    ]

    if mode.synthesize_anchors:
        nodes, edges = _add_anchors(declarations, nodes, edges, start_id, ids.next_id())

    graph.nodes = nodes
    graph.edges = edges

    for diagnostic in diagnostics:
        logger.debug("[PARSER] line %s: %s", diagnostic.line_number, diagnostic.message)
    logger.debug(
        "[PARSER] Parsed %d nodes, %d edges, %d diagnostics",
        len(nodes), len(edges), len(diagnostics),
    )

    return ParseResult(graph=graph, diagnostics=diagnostics)


def parse_graph(text: str, mode: Optional[ParserMode] = None) -> LogicGraph:
    return parse_logic_text(text, mode).graph
