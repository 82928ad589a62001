"""
Prompt review: ask the language model to score a generated implementation
prompt and suggest improvements.

The model answers in JSON (camelCase keys). The answer is normalized first
and validated second; an answer that is not a JSON object at all raises
MalformedResponseError.
"""

import json
import logging
import re
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from logicflow.compiler.render_prompt import PromptOptions, render_prompt
from logicflow.ir.errors import MalformedResponseError
from logicflow.ir.graph import LogicGraph
from logicflow.llm.base import ChatClient
from logicflow.llm.client import strip_code_fence
from logicflow.llm.prompts import ANALYSIS_SYSTEM_PROMPT, build_prompt_analysis_prompt

logger = logging.getLogger(__name__)

JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


class SuggestedNode(BaseModel):
    role: Literal["input", "process", "decision", "output"]
    title: str
    description: str = ""
    condition: Optional[str] = None


class PromptSuggestion(BaseModel):
    type: Literal["missing_node", "unclear_step", "edge_case", "best_practice"]
    priority: Literal["high", "medium", "low"]
    title: str
    description: str = ""
    suggested_node: Optional[SuggestedNode] = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("suggestion title must not be empty")
        return value


class PromptAnalysisResult(BaseModel):
    analyzable: bool = True  # False: prompt too vague to review
    reason: Optional[str] = None
    completeness_score: int = Field(default=0, ge=0, le=100)
    clarity_score: int = Field(default=0, ge=0, le=100)
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    suggestions: List[PromptSuggestion] = Field(default_factory=list)
    improved_prompt: Optional[str] = None


# ----------------------------
# Answer normalization
# ----------------------------

def extract_json_object(text: str) -> dict:
    """First JSON object in a model answer; fenced or chatty answers are fine."""
    content = strip_code_fence(text)

    try:
        data = json.loads(content)
    except ValueError:
        match = JSON_OBJECT_RE.search(content)
        if not match:
            raise MalformedResponseError("Prompt analysis answer contains no JSON object")
        try:
            data = json.loads(match.group(0))
        except ValueError as e:
            raise MalformedResponseError("Prompt analysis answer is not valid JSON") from e

    if not isinstance(data, dict):
        raise MalformedResponseError("Prompt analysis answer is not a JSON object")
    return data


def _score(value) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return int(min(max(value, 0), 100))


def _texts(items) -> List[str]:
    if not isinstance(items, list):
        return []

    texts = []
    for item in items:
        if isinstance(item, dict):
            text = item.get("text") or item.get("title") or item.get("description")
            texts.append(str(text) if text else json.dumps(item, ensure_ascii=False))
        elif item is not None:
            texts.append(str(item))
    return texts


def _suggestions(items) -> List[PromptSuggestion]:
    if not isinstance(items, list):
        return []

    suggestions = []
    for item in items:
        if not isinstance(item, dict):
            continue

        node = item.get("suggestedNode") or item.get("suggested_node")
        if isinstance(node, dict) and isinstance(node.get("role"), str):
            node = {**node, "role": node["role"].strip().lower()}
        elif not isinstance(node, dict):
            node = None

        try:
            suggestions.append(PromptSuggestion.model_validate({
                "type": item.get("type"),
                "priority": item.get("priority"),
                "title": item.get("title") or "",
                "description": item.get("description") or "",
                "suggested_node": node,
            }))
        except ValidationError as e:
            logger.warning(
                "[ANALYZE] Skipping invalid suggestion %r: %d errors",
                item.get("title"), e.error_count(),
            )
    return suggestions


def normalize_analysis(data: dict) -> PromptAnalysisResult:
    reason = data.get("reason")
    improved = data.get("improvedPrompt", data.get("improved_prompt"))

    return PromptAnalysisResult(
        analyzable=data.get("analyzable") is not False,
        reason=reason if isinstance(reason, str) else None,
        completeness_score=_score(data.get("completenessScore", data.get("completeness_score"))),
        clarity_score=_score(data.get("clarityScore", data.get("clarity_score"))),
        strengths=_texts(data.get("strengths")),
        weaknesses=_texts(data.get("weaknesses")),
        suggestions=_suggestions(data.get("suggestions")),
        improved_prompt=improved if isinstance(improved, str) else None,
    )


def parse_analysis_response(text: str) -> PromptAnalysisResult:
    return normalize_analysis(extract_json_object(text))


# ----------------------------
# Model call
# ----------------------------

def analyze_prompt(
    graph: LogicGraph,
    client: ChatClient,
    prompt: Optional[str] = None,
    options: Optional[PromptOptions] = None,
) -> PromptAnalysisResult:
    """
    Review the implementation prompt for a graph.

    Without an explicit prompt the graph's own rendered prompt is reviewed.
    Client failures propagate unchanged.
    """
    prompt = prompt if prompt is not None else render_prompt(graph, options)
    messages = [
        {"role": "system", "content": ANALYSIS_SYSTEM_PROMPT},
        {"role": "user", "content": build_prompt_analysis_prompt(prompt, graph)},
    ]

    result = parse_analysis_response(client.chat(messages))
    logger.info(
        "[ANALYZE] completeness=%d clarity=%d suggestions=%d",
        result.completeness_score, result.clarity_score, len(result.suggestions),
    )
    return result
