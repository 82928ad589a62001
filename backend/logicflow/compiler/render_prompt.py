"""
LogicGraph -> structured prompt for coding assistants (Copilot, Cursor, ChatGPT).

Deterministic: the same graph and options always give byte-identical text.
The prompt does not require a valid graph.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from logicflow.compiler.ordering import order_nodes
from logicflow.compiler.render_mermaid import render_mermaid
from logicflow.ir.graph import LogicGraph, LogicNode, NodeKind


class PromptTarget(str, Enum):
    CODE = "code"
    ARCHITECTURE = "architecture"
    REFACTOR = "refactor"
    TESTS = "tests"


class Strictness(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class DetailLevel(str, Enum):
    BRIEF = "brief"
    NORMAL = "normal"
    DETAILED = "detailed"


@dataclass(frozen=True)
class PromptOptions:
    target: PromptTarget = PromptTarget.CODE
    strictness: Optional[Strictness] = None
    detail_level: Optional[DetailLevel] = None
    include_presets: bool = False
    include_diagram: bool = False


DEFAULT_TITLE = "Untitled Logic"

GOALS = {
    PromptTarget.CODE: "The goal is to implement the described logic as production-ready code.",
    PromptTarget.ARCHITECTURE: "The goal is to design a clean software architecture for the described logic.",
    PromptTarget.REFACTOR: "The goal is to refactor existing code so it matches the described logic.",
    PromptTarget.TESTS: "The goal is to generate meaningful automated tests for the described logic.",
}

STRICTNESS_RULES = {
    Strictness.HIGH: "Follow the described logic strictly. Do not add features or assumptions.",
    Strictness.MEDIUM: "Follow the logic carefully. Minor improvements are allowed if explicitly justified.",
    Strictness.LOW: "Use the logic as guidance. You may make reasonable design decisions.",
}

DETAIL_REQUIREMENTS = {
    DetailLevel.BRIEF: ["- Provide only the core implementation."],
    DetailLevel.NORMAL: ["- Provide clean, readable code with minimal comments."],
    DetailLevel.DETAILED: [
        "- Provide well-structured code with comments explaining decisions.",
        "- Highlight any edge cases or assumptions explicitly.",
    ],
}

TARGET_PRESETS = {
    PromptTarget.CODE: [
        "Generate production-ready code.",
        "Use clear naming and consistent structure.",
        "Do not include explanations outside of code comments.",
    ],
    PromptTarget.ARCHITECTURE: [
        "Describe the system architecture implied by the logic.",
        "Focus on components, responsibilities, and data flow.",
        "Avoid implementation details unless necessary.",
    ],
    PromptTarget.REFACTOR: [
        "Refactor existing code to better match the described logic.",
        "Preserve external behavior unless explicitly stated otherwise.",
        "Explain structural changes briefly.",
    ],
    PromptTarget.TESTS: [
        "Generate tests that validate the described logic.",
        "Cover happy paths, decision branches, and edge cases.",
        "Use clear, deterministic test cases.",
    ],
}

CONSTRAINTS = [
    "## CONSTRAINTS",
    "- Do not invent additional logic",
    "- Follow the flow exactly as described",
    "- Use clear, descriptive naming",
    "- Implement error handling where appropriate",
]


def format_node(node: LogicNode, number: int) -> List[str]:
    lines = [f"{number}. **{node.kind.label}:** {node.title}"]
    if node.has_distinct_description:
        lines.append(f"   - {node.description}")
    if node.kind == NodeKind.DECISION and node.condition and node.condition != node.title:
        lines.append(f"   - Condition: {node.condition}")
    return lines


def _branch_lines(graph: LogicGraph) -> List[str]:
    titles = {node.id: node.title for node in graph.nodes}
    return [
        f'- **{edge.branch.value.upper()}:** '
        f'"{titles.get(edge.source, edge.source)}" → "{titles.get(edge.target, edge.target)}"'
        for edge in graph.branch_edges()
    ]


def render_prompt(graph: LogicGraph, options: Optional[PromptOptions] = None) -> str:
    options = options or PromptOptions()
    lines: List[str] = []

    # ---------- role & goal ----------
    lines.append("You are a senior software engineer.")
    lines.append("Generate clean, maintainable code based strictly on the following logic.")
    lines.append(GOALS[options.target])
    if options.strictness:
        lines.append(STRICTNESS_RULES[options.strictness])

    # ---------- overview ----------
    if graph.description or (graph.title and graph.title != DEFAULT_TITLE):
        lines.extend(["", "## OVERVIEW", f"Title: {graph.title}"])
        if graph.description:
            lines.append(f"Description: {graph.description}")

    # ---------- steps ----------
    lines.extend(["", "## LOGIC FLOW"])
    for number, node in enumerate(order_nodes(graph), start=1):
        lines.extend(format_node(node, number))

    # ---------- decisions ----------
    branch_lines = _branch_lines(graph)
    if branch_lines:
        lines.extend(["", "## DECISION BRANCHES"])
        lines.extend(branch_lines)

    # ---------- optional sections ----------
    if options.detail_level:
        lines.extend(["", "## OUTPUT REQUIREMENTS"])
        lines.extend(DETAIL_REQUIREMENTS[options.detail_level])

    if options.include_presets:
        lines.extend(["", "## TARGET-SPECIFIC INSTRUCTIONS"])
        lines.extend(TARGET_PRESETS[options.target])

    if options.include_diagram:
        lines.extend(["", "## DIAGRAM", "```mermaid", render_mermaid(graph), "```"])

    lines.append("")
    lines.extend(CONSTRAINTS)

    return "\n".join(lines)
