"""
Refinement loop: graph -> flow text -> language model -> flow text -> new graph.

Each round trip yields a brand-new graph with fresh node ids. Failures of
the model call propagate as ExternalCallError; the previous graph is never
returned in place of a failed answer.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

from logicflow import config
from logicflow.dsl.parser import ParseResult, ParserMode, parse_logic_text
from logicflow.dsl.serializer import serialize_graph
from logicflow.ir.graph import LogicGraph
from logicflow.llm.base import ChatClient
from logicflow.llm.client import strip_code_fence
from logicflow.llm.prompts import build_generation_system_prompt, build_optimization_prompt

logger = logging.getLogger(__name__)


@dataclass
class RefinementResult:
    text: str
    parse: ParseResult

    @property
    def graph(self) -> LogicGraph:
        return self.parse.graph


def _parse_flow_text(
    flow_text: str,
    mode: Optional[ParserMode],
    title: Optional[str] = None,
    description: Optional[str] = None,
) -> RefinementResult:
    return RefinementResult(
        text=flow_text,
        parse=parse_logic_text(flow_text, mode, title=title, description=description),
    )


def parse_external_response(
    text: str,
    mode: Optional[ParserMode] = None,
    title: Optional[str] = None,
    description: Optional[str] = None,
) -> RefinementResult:
    """Unwrap a raw model answer and parse it."""
    return _parse_flow_text(strip_code_fence(text), mode, title=title, description=description)


def generate_flow_text(
    user_prompt: str,
    client: ChatClient,
    current_flow: Optional[str] = None,
    history: Sequence[Dict[str, str]] = (),
) -> str:
    messages = [
        {"role": "system", "content": build_generation_system_prompt(current_flow)},
        *history,
        {"role": "user", "content": user_prompt},
    ]
    # Client default temperature (LLM_TEMPERATURE)
    return strip_code_fence(client.chat(messages))


def generate_graph(
    user_prompt: str,
    client: ChatClient,
    history: Sequence[Dict[str, str]] = (),
    mode: Optional[ParserMode] = None,
    current_flow: Optional[str] = None,
) -> RefinementResult:
    """Natural language (plus an optional flow text to edit) -> new graph."""
    flow_text = generate_flow_text(user_prompt, client, current_flow=current_flow, history=history)
    result = _parse_flow_text(flow_text, mode)
    logger.info("[REFINE] Generated flow with %d nodes", len(result.graph.nodes))
    return result


def refine_graph(
    graph: LogicGraph,
    instruction: str,
    client: ChatClient,
    history: Sequence[Dict[str, str]] = (),
    mode: Optional[ParserMode] = None,
) -> RefinementResult:
    current_flow = serialize_graph(graph)
    flow_text = generate_flow_text(instruction, client, current_flow=current_flow, history=history)
    result = _parse_flow_text(flow_text, mode, title=graph.title, description=graph.description)
    logger.info(
        "[REFINE] Refined flow: %d -> %d nodes",
        len(graph.nodes), len(result.graph.nodes),
    )
    return result


def optimize_graph(
    graph: LogicGraph,
    client: ChatClient,
    mode: Optional[ParserMode] = None,
) -> RefinementResult:
    prompt = build_optimization_prompt(serialize_graph(graph))
    raw = client.chat(
        [{"role": "user", "content": prompt}],
        temperature=config.LLM_OPTIMIZE_TEMPERATURE,
    )
    return parse_external_response(raw, mode, title=graph.title, description=graph.description)
