import pytest
from fastapi.testclient import TestClient

from conftest import LOGIN_FLOW, FakeChatClient
from logicflow.api.routes import get_llm_client
from logicflow.ir.errors import MalformedResponseError, ServiceUnavailableError
from logicflow.main import app

NEW_FLOW = "INPUT: A\nDECISION: Ok?\n  YES -> Done\n  NO -> Failed\nOUTPUT: Done\nOUTPUT: Failed"


@pytest.fixture
def api():
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def login_payload(api):
    return api.post("/parse", json={"text": LOGIN_FLOW}).json()["graph"]


def _use_llm(reply="", error=None):
    fake = FakeChatClient(reply=reply, error=error)
    app.dependency_overrides[get_llm_client] = lambda: fake
    return fake


def test_health(api):
    assert api.get("/health").json() == {"status": "ok"}


def test_parse(api):
    response = api.post("/parse", json={"text": LOGIN_FLOW, "title": "Login"})

    assert response.status_code == 200
    body = response.json()
    assert body["graph"]["title"] == "Login"
    assert len(body["graph"]["nodes"]) == 8
    assert body["graph"]["nodes"][2]["kind"] == "decision"
    assert body["diagnostics"] == []


def test_parse_reports_diagnostics(api):
    body = api.post("/parse", json={"text": "INPUT: A\nnonsense"}).json()

    assert body["diagnostics"][0]["kind"] == "parse_ambiguity"
    assert body["diagnostics"][0]["line_number"] == 2


def test_parse_with_permissive_mode(api):
    body = api.post("/parse", json={
        "text": "INPUT: A\nnonsense",
        "mode": {"fallback_line_as_process": True},
    }).json()

    assert [n["kind"] for n in body["graph"]["nodes"]] == ["input", "process"]
    assert body["diagnostics"] == []


def test_serialize(api, login_payload):
    text = api.post("/serialize", json={"graph": login_payload}).json()["text"]

    assert text.splitlines()[0] == "INPUT: Login-Daten | Email und Passwort"


def test_validate(api, login_payload):
    body = api.post("/validate", json={"graph": login_payload, "deep": True}).json()

    assert body["is_valid"] is True
    assert body["issues"] == []
    assert body["analysis"]["complexity_score"] == 16


def test_generate(api, login_payload):
    response = api.post("/generate", json={
        "graph": login_payload,
        "options": {"target": "tests", "include_diagram": True},
    })

    body = response.json()
    assert response.status_code == 200
    assert body["status"] == "success"
    assert "## LOGIC FLOW" in body["prompt"]
    assert body["mermaid"].startswith("flowchart TD")
    assert body["valid_mermaid"] is True


def test_generate_invalid_graph_warns(api):
    graph = {"nodes": [{"id": "p", "kind": "process", "title": "Work"}], "edges": []}

    body = api.post("/generate", json={"graph": graph}).json()

    assert body["status"] == "warning"
    assert body["validation"]["error_count"] == 1
    assert "1. **Process:** Work" in body["prompt"]


def test_generate_enforce_valid_blocks_errors(api):
    graph = {"nodes": [{"id": "p", "kind": "process", "title": "Work"}], "edges": []}

    response = api.post("/generate", json={"graph": graph, "enforce_valid": True})

    assert response.status_code == 422
    assert response.json()["detail"]["issues"][0]["code"] == "MISSING_OUTPUT"


def test_blank_title_is_rejected(api):
    graph = {"nodes": [{"id": "p", "kind": "process", "title": "  "}], "edges": []}

    assert api.post("/validate", json={"graph": graph}).status_code == 422


def test_ai_generate(api):
    fake = _use_llm(reply=f"```\n{NEW_FLOW}\n```")

    response = api.post("/ai/generate", json={
        "prompt": "a simple check",
        "history": [{"role": "user", "content": "earlier"}],
    })

    body = response.json()
    assert response.status_code == 200
    assert body["text"] == NEW_FLOW
    assert len(body["graph"]["nodes"]) == 4
    assert body["validation"]["is_valid"] is True
    assert [m["role"] for m in fake.calls[0]] == ["system", "user", "user"]


def test_ai_generate_edits_current_flow(api):
    fake = _use_llm(reply=NEW_FLOW)

    api.post("/ai/generate", json={"prompt": "add a failure path", "current_flow": "INPUT: A"})

    system_prompt = fake.calls[0][0]["content"]
    assert "A flow already exists" in system_prompt
    assert "```\nINPUT: A\n```" in system_prompt


def test_ai_refine(api, login_payload):
    _use_llm(reply=NEW_FLOW)

    response = api.post("/ai/refine", json={"graph": login_payload, "instruction": "simplify"})

    assert response.status_code == 200
    assert len(response.json()["graph"]["nodes"]) == 4


def test_ai_optimize(api, login_payload):
    _use_llm(reply=NEW_FLOW)

    response = api.post("/ai/optimize", json={"graph": login_payload})

    assert response.status_code == 200
    assert response.json()["text"] == NEW_FLOW


def test_ai_service_unavailable(api, login_payload):
    _use_llm(error=ServiceUnavailableError("connection refused"))

    response = api.post("/ai/refine", json={"graph": login_payload, "instruction": "x"})

    assert response.status_code == 503
    assert "AI service unreachable" in response.json()["detail"]


def test_ai_malformed_response(api):
    _use_llm(error=MalformedResponseError("no content"))

    response = api.post("/ai/generate", json={"prompt": "x"})

    assert response.status_code == 502
    assert "malformed" in response.json()["detail"]


def test_editor_export_and_import(api, login_payload):
    exported = api.post("/editor/export", json={"graph": login_payload}).json()

    assert len(exported["nodes"]) == 8
    assert exported["edges"][2]["source_handle"] == "yes"

    imported = api.post("/editor/import", json={**exported, "title": "Canvas"}).json()["graph"]
    assert imported["title"] == "Canvas"
    assert len(imported["edges"]) == 7


def test_ai_analyze(api, login_payload):
    fake = _use_llm(reply='{"completenessScore": 80, "clarityScore": 75, "strengths": ["Clear"]}')

    response = api.post("/ai/analyze", json={"graph": login_payload, "options": {"target": "tests"}})

    assert response.status_code == 200
    body = response.json()
    assert "## LOGIC FLOW" in body["prompt"]
    assert "automated tests" in body["prompt"]
    assert body["prompt"] in fake.calls[0][1]["content"]
    assert body["analysis"]["completeness_score"] == 80
    assert body["analysis"]["strengths"] == ["Clear"]


def test_ai_analyze_explicit_prompt(api, login_payload):
    _use_llm(reply="{}")

    response = api.post("/ai/analyze", json={"graph": login_payload, "prompt": "Write a login"})

    assert response.json()["prompt"] == "Write a login"
    assert response.json()["analysis"]["analyzable"] is True


def test_ai_analyze_bad_json(api, login_payload):
    _use_llm(reply="I think the prompt is fine.")

    response = api.post("/ai/analyze", json={"graph": login_payload})

    assert response.status_code == 502
    assert "malformed" in response.json()["detail"]
