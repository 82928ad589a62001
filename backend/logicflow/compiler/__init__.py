from dataclasses import dataclass
from typing import Optional

from logicflow.compiler.ordering import order_nodes
from logicflow.compiler.render_mermaid import render_mermaid
from logicflow.compiler.render_prompt import PromptOptions, render_prompt
from logicflow.dsl.mermaid import validate_mermaid
from logicflow.ir.graph import LogicGraph


@dataclass
class CompiledGraph:
    prompt: str
    mermaid: str
    valid_mermaid: bool


def compile_graph(graph: LogicGraph, options: Optional[PromptOptions] = None) -> CompiledGraph:
    mermaid = render_mermaid(graph)
    return CompiledGraph(
        prompt=render_prompt(graph, options),
        mermaid=mermaid,
        valid_mermaid=validate_mermaid(mermaid),
    )


__all__ = [
    "CompiledGraph",
    "PromptOptions",
    "compile_graph",
    "order_nodes",
    "render_mermaid",
    "render_prompt",
]
