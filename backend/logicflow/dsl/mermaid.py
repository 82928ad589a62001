import re

MERMAID_DIRECTIVE_RE = re.compile(r"^flowchart\s+(TD|LR|TB|RL|BT)$", re.IGNORECASE)


def mermaid_id(text: str) -> str:
    """
    Convert any node id into a Mermaid-safe identifier.
    Deterministic; ids that only differ in unsafe characters may collide,
    so callers pass the graph's unique node ids, not titles.
    """
    safe = re.sub(r"[^a-zA-Z0-9_]", "_", text)
    if not safe or safe[0].isdigit():
        safe = f"n_{safe}"
    # "end" is a reserved keyword in flowcharts
    if safe.lower() == "end":
        safe = f"{safe}_node"
    return safe


LABEL_ENTITIES = {
    '"': "#quot;",
    "<": "#lt;",
    ">": "#gt;",
    "`": "#96;",
}


def mermaid_label(text: str) -> str:
    """
    Label text for use inside ["..."] style shapes.
    Quotes, angle brackets and backticks become Mermaid entity codes, so a
    label can never close the shape or trip validate_mermaid.
    """
    text = re.sub(r"\s+", " ", text).strip()
    return "".join(LABEL_ENTITIES.get(char, char) for char in text)


def validate_mermaid(code: str) -> bool:
    if not code:
        return False

    lines = [l for l in code.splitlines() if l.strip()]
    if not lines:
        return False

    # First line must be a valid directive like "flowchart TD"
    if not MERMAID_DIRECTIVE_RE.match(lines[0].strip()):
        return False

    # Basic safety: no script tags or markdown fences
    forbidden = re.search(r"<script|</|```", code, re.IGNORECASE)
    return forbidden is None
