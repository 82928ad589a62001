import logging

from fastapi import APIRouter, Depends, HTTPException

from logicflow.compiler import compile_graph
from logicflow.dsl.parser import parse_logic_text
from logicflow.dsl.serializer import serialize_graph
from logicflow.editor.adapter import editor_to_graph, graph_to_editor
from logicflow.ir.errors import (
    ExternalCallError,
    GraphValidationFailed,
    MalformedResponseError,
    ServiceUnavailableError,
)
from logicflow.llm.base import ChatClient
from logicflow.llm.client import OllamaClient
from logicflow.pipeline.prompt_analysis import analyze_prompt
from logicflow.pipeline.refinement import (
    RefinementResult,
    generate_graph,
    optimize_graph,
    refine_graph,
)
from logicflow.schemas import (
    AIAnalyzeRequest,
    AIGenerateRequest,
    AIOptimizeRequest,
    AIRefineRequest,
    EditorImportRequest,
    GenerateRequest,
    GraphRequest,
    ParseRequest,
    ValidateRequest,
    resolve_mode,
)
from logicflow.validation import analyze_graph, raise_on_errors, validate_graph

logger = logging.getLogger(__name__)

router = APIRouter()


def get_llm_client() -> ChatClient:
    return OllamaClient()


def _external_failure(error: ExternalCallError) -> HTTPException:
    logger.warning("[API] Language model call failed: %s", error)
    if isinstance(error, ServiceUnavailableError):
        return HTTPException(
            status_code=503,
            detail=f"AI service unreachable: {error}. Check that the model server is running.",
        )
    if isinstance(error, MalformedResponseError):
        return HTTPException(
            status_code=502,
            detail=f"AI service sent a malformed response: {error}. Try again.",
        )
    return HTTPException(status_code=502, detail=f"AI request failed: {error}")


def _refinement_payload(result: RefinementResult) -> dict:
    return {
        "text": result.text,
        "graph": result.graph.model_dump(mode="json"),
        "diagnostics": [d.to_dict() for d in result.parse.diagnostics],
        "validation": validate_graph(result.graph).to_dict(),
    }


@router.get("/health")
def health():
    return {"status": "ok"}


@router.post("/parse")
def parse(request: ParseRequest):
    result = parse_logic_text(
        request.text,
        resolve_mode(request.mode),
        title=request.title,
        description=request.description,
    )
    return {
        "graph": result.graph.model_dump(mode="json"),
        "diagnostics": [d.to_dict() for d in result.diagnostics],
    }


@router.post("/serialize")
def serialize(request: GraphRequest):
    return {"text": serialize_graph(request.graph)}


@router.post("/validate")
def validate(request: ValidateRequest):
    result = validate_graph(request.graph, deep=request.deep)
    return {
        **result.to_dict(),
        "analysis": analyze_graph(request.graph).to_dict(),
    }


@router.post("/generate")
def generate(request: GenerateRequest):
    validation = validate_graph(request.graph)

    if request.enforce_valid:
        try:
            raise_on_errors(request.graph)
        except GraphValidationFailed as e:
            raise HTTPException(
                status_code=422,
                detail={
                    "message": str(e),
                    "issues": [i.to_dict() for i in e.issues],
                },
            )

    compiled = compile_graph(request.graph, request.options.to_options())
    return {
        "status": "success" if validation.is_valid else "warning",
        "prompt": compiled.prompt,
        "mermaid": compiled.mermaid,
        "valid_mermaid": compiled.valid_mermaid,
        "validation": validation.to_dict(),
    }


@router.post("/ai/generate")
def ai_generate(request: AIGenerateRequest, client: ChatClient = Depends(get_llm_client)):
    history = [m.model_dump() for m in request.history]
    try:
        result = generate_graph(
            request.prompt,
            client,
            history=history,
            mode=resolve_mode(request.mode),
            current_flow=request.current_flow,
        )
    except ExternalCallError as e:
        raise _external_failure(e)
    return _refinement_payload(result)


@router.post("/ai/refine")
def ai_refine(request: AIRefineRequest, client: ChatClient = Depends(get_llm_client)):
    history = [m.model_dump() for m in request.history]
    try:
        result = refine_graph(
            request.graph,
            request.instruction,
            client,
            history=history,
            mode=resolve_mode(request.mode),
        )
    except ExternalCallError as e:
        raise _external_failure(e)
    return _refinement_payload(result)


@router.post("/ai/optimize")
def ai_optimize(request: AIOptimizeRequest, client: ChatClient = Depends(get_llm_client)):
    try:
        result = optimize_graph(request.graph, client, mode=resolve_mode(request.mode))
    except ExternalCallError as e:
        raise _external_failure(e)
    return _refinement_payload(result)


@router.post("/ai/analyze")
def ai_analyze(request: AIAnalyzeRequest, client: ChatClient = Depends(get_llm_client)):
    prompt = request.prompt
    if prompt is None:
        prompt = compile_graph(request.graph, request.options.to_options()).prompt
    try:
        analysis = analyze_prompt(request.graph, client, prompt=prompt)
    except ExternalCallError as e:
        raise _external_failure(e)
    return {"prompt": prompt, "analysis": analysis.model_dump(mode="json")}


@router.post("/editor/import")
def editor_import(request: EditorImportRequest):
    graph = editor_to_graph(
        request.nodes,
        request.edges,
        title=request.title,
        description=request.description,
    )
    return {"graph": graph.model_dump(mode="json")}


@router.post("/editor/export")
def editor_export(request: GraphRequest):
    nodes, edges = graph_to_editor(request.graph)
    return {
        "nodes": [n.model_dump(mode="json") for n in nodes],
        "edges": [e.model_dump(mode="json") for e in edges],
    }
