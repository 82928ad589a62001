from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from logicflow import config
from logicflow.compiler.render_prompt import DetailLevel, PromptOptions, PromptTarget, Strictness
from logicflow.dsl.parser import ParserMode
from logicflow.editor.adapter import EditorEdge, EditorNode
from logicflow.ir.graph import LogicGraph


class ParserModeRequest(BaseModel):
    """Unset fields fall back to the configured defaults"""
    synthesize_anchors: Optional[bool] = None
    fallback_line_as_process: Optional[bool] = None

    def to_mode(self) -> ParserMode:
        return ParserMode(
            synthesize_anchors=(
                config.PARSER_SYNTHESIZE_ANCHORS
                if self.synthesize_anchors is None
                else self.synthesize_anchors
            ),
            fallback_line_as_process=(
                config.PARSER_FALLBACK_AS_PROCESS
                if self.fallback_line_as_process is None
                else self.fallback_line_as_process
            ),
        )


def resolve_mode(mode: Optional[ParserModeRequest]) -> ParserMode:
    return mode.to_mode() if mode else ParserMode.from_config()


class ParseRequest(BaseModel):
    text: str
    title: Optional[str] = None
    description: Optional[str] = None
    mode: Optional[ParserModeRequest] = None


class GraphRequest(BaseModel):
    graph: LogicGraph


class ValidateRequest(GraphRequest):
    deep: bool = False


class PromptOptionsRequest(BaseModel):
    target: PromptTarget = PromptTarget.CODE
    strictness: Optional[Strictness] = None
    detail_level: Optional[DetailLevel] = None
    include_presets: bool = False
    include_diagram: bool = False

    def to_options(self) -> PromptOptions:
        return PromptOptions(**self.model_dump())


class GenerateRequest(GraphRequest):
    options: PromptOptionsRequest = Field(default_factory=PromptOptionsRequest)
    enforce_valid: bool = False  # Errors block generation


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class AIGenerateRequest(BaseModel):
    prompt: str
    current_flow: Optional[str] = None
    history: List[ChatMessage] = Field(default_factory=list)
    mode: Optional[ParserModeRequest] = None


class AIRefineRequest(BaseModel):
    """Request to let the language model edit an existing graph"""
    graph: LogicGraph
    instruction: str
    history: List[ChatMessage] = Field(default_factory=list)
    mode: Optional[ParserModeRequest] = None


class AIOptimizeRequest(GraphRequest):
    mode: Optional[ParserModeRequest] = None


class EditorImportRequest(BaseModel):
    nodes: List[EditorNode]
    edges: List[EditorEdge]
    title: str = "Untitled Logic"
    description: Optional[str] = None


class AIAnalyzeRequest(GraphRequest):
    """Review a prompt; without one the graph's rendered prompt is reviewed"""
    prompt: Optional[str] = None
    options: PromptOptionsRequest = Field(default_factory=PromptOptionsRequest)
