from typing import Optional

FORMAT_RULES = """
**Node types:**
- **INPUT** = data source, parameter, user input
- **PROCESS** = processing, transformation, calculation, API call
- **DECISION** = one concrete yes/no question
- **OUTPUT** = result, success or error message

**Critical format rules:**
- Every line MUST start with `INPUT:`, `PROCESS:`, `DECISION:` or `OUTPUT:`
- Title and description MUST be separated by ` | `
- Decision branches: exactly 2 spaces, then `YES ->` or `NO ->`
- A branch target is the exact title of another node (case-sensitive!)
- Every DECISION MUST have both branches (YES and NO)

**Important patterns:**
- **Several inputs:** use several INPUT nodes when several data sources are needed
- **Atomic decisions:** one decision = one concrete yes/no question
- **Explicit connections:** every branch must lead to an existing node
- **Completeness:** every path must end in an OUTPUT
- **PROCESS -> OUTPUT is never connected automatically.** After a PROCESS that
  should lead to an OUTPUT, add a DECISION whose branch names the OUTPUT.
""".strip()

EXAMPLE_FLOW = """
INPUT: Login data | Email and password entered by the user
PROCESS: Look up user | Database query by email
DECISION: User exists? | Check whether the user is stored
  YES -> Check password
  NO -> User not found
PROCESS: Check password | Hash comparison (bcrypt/argon2)
DECISION: Password correct? | Compare entered password with stored hash
  YES -> Login successful
  NO -> Wrong password
OUTPUT: Login successful | Issue token and start session
OUTPUT: User not found | Error 404
OUTPUT: Wrong password | Error 401
""".strip()


def build_generation_system_prompt(current_flow: Optional[str] = None) -> str:
    """
    System framing for turning a natural-language description into flow text.
    With current_flow the model is asked to edit that flow instead.
    """
    if current_flow:
        task = (
            "**IMPORTANT:** A flow already exists. The user wants to adjust or refine it. "
            "Modify the existing flow based on the feedback.\n\n"
            f"**Current flow:**\n```\n{current_flow}\n```\n\n"
            "Keep the basic structure unless the user explicitly asks for larger changes."
        )
    else:
        task = "**YOUR TASK:** Create a new flow from the user's description."

    return "\n\n".join([
        "You are a software architecture assistant. The user describes a process or "
        "piece of logic in natural language. Turn it into a structured logic flow "
        "that the flow parser can read.",
        task,
        FORMAT_RULES,
        f"**Example (login):**\n```\n{EXAMPLE_FLOW}\n```",
        "**IMPORTANT:**\n"
        "- Return ONLY the flow, no explanations\n"
        "- Use concrete, concise titles\n"
        "- Descriptions are optional but helpful\n"
        "- Think about error cases and alternative paths",
    ])


def build_optimization_prompt(flow_text: str) -> str:
    """Review framing: ask the model to check the flow and return a corrected version."""
    return "\n\n".join([
        "You are a senior software engineer. The user created the following logic flow.",
        f"**FLOW:**\n```\n{flow_text}\n```",
        "**YOUR TASK:** Ask yourself: is this flow logical and complete?\n"
        "- Does the order make sense?\n"
        "- Are all necessary steps present?\n"
        "- Do all branches lead to sensible targets?\n"
        "- Are connections missing?\n"
        "- Are decision questions clear and atomic?\n"
        "- Do the error outputs match the failure cases?",
        "If the flow is logical, return it unchanged (descriptions may be improved). "
        "If it is not, fix the problems and return the corrected version.",
        FORMAT_RULES,
        "**OUTPUT:** Return the complete revised flow. Only the format, no explanation.",
    ])


ANALYSIS_SYSTEM_PROMPT = (
    "You are an experienced software architect reviewing implementation prompts. "
    "Answer with valid JSON only, no markdown."
)

ANALYSIS_FORMAT = """
{
  "analyzable": true,
  "reason": "only when analyzable is false",
  "completenessScore": 65,
  "clarityScore": 70,
  "strengths": ["[KIND] 'Title' - what is good (only what the prompt says)"],
  "weaknesses": ["[KIND] 'Title' - what is missing"],
  "suggestions": [
    {"type": "edge_case", "priority": "high", "title": "Failure case: ...",
     "description": "...", "suggestedNode": {"role": "decision", "title": "...",
     "description": "...", "condition": "..."}}
  ],
  "improvedPrompt": "the full prompt with [SUGGESTION: ...] markers"
}
""".strip()


def _graph_context(graph) -> str:
    steps = graph.step_nodes()
    names = {}
    lines = [f"## FLOW CONTEXT ({len(steps)} nodes):"]

    for position, node in enumerate(steps, start=1):
        name = f'[{node.kind.value.upper()}] "{node.title}"'
        names[node.id] = name
        line = f"{position}. {name}"
        line += f' → "{node.description}"' if node.description else " → (no description)"
        if node.condition:
            line += f' | Condition: "{node.condition}"'
        lines.append(line)

    lines.append("")
    lines.append("**Connections:**")
    for edge in graph.edges:
        if edge.source not in names or edge.target not in names:
            continue
        branch = f" ({edge.branch.value.upper()})" if edge.branch else ""
        lines.append(f"  {names[edge.source]} → {names[edge.target]}{branch}")

    return "\n".join(lines)


def build_prompt_analysis_prompt(prompt: str, graph=None) -> str:
    """
    Review framing for a generated implementation prompt.

    The model scores completeness and clarity (0-100), lists strengths and
    weaknesses, proposes typed suggestions and may return an improved prompt.
    The optional graph adds a node and connection listing as context.
    """
    sections = [
        "You are an experienced code reviewer. Judge whether this prompt can be "
        "implemented and give helpful improvement suggestions.",
        "**Distinguish carefully:**\n"
        "1. Strengths and weaknesses refer ONLY to what the prompt actually says\n"
        "2. Suggestions may add context-specific ideas (validation rules, error handling)\n"
        "3. improvedPrompt copies the prompt as written and adds [SUGGESTION: concrete idea] markers",
    ]
    if graph is not None and graph.step_nodes():
        sections.append(_graph_context(graph))
    sections.extend([
        f"## PROMPT TO ANALYZE:\n{prompt}",
        "## SCORING RULES:\n"
        "- Generic names (\"Input\", \"Process\"): at most 20\n"
        "- Concrete fields but no validation: 50-70\n"
        "- Complete with error handling: 70 and above\n"
        "- Never list the same point as both strength and weakness",
        "## REQUIRED FIELDS for every suggestion:\n"
        "- title: never empty\n"
        "- type: one of missing_node, unclear_step, edge_case, best_practice\n"
        "- priority: one of high, medium, low\n"
        "- suggestedNode.role: one of input, process, decision, output\n"
        "- Give 2-3 suggestions per priority level",
        "## analyzable:\n"
        "Set analyzable to false (with a reason) when the nodes only carry generic "
        "names or a decision has no real condition.",
        f"## JSON FORMAT:\n{ANALYSIS_FORMAT}",
        "## YOUR JSON ANSWER:",
    ])
    return "\n\n".join(sections)
