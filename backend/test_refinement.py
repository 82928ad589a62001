import pytest

from conftest import FakeChatClient
from logicflow import config
from logicflow.dsl.serializer import serialize_graph, structural_signature
from logicflow.ir.errors import MalformedResponseError, ServiceUnavailableError
from logicflow.ir.graph import NodeKind
from logicflow.pipeline import refinement
from logicflow.pipeline.refinement import (
    generate_graph,
    optimize_graph,
    parse_external_response,
    refine_graph,
)

REFINED_FLOW = """```
INPUT: Login-Daten | Email und Passwort
DECISION: Captcha gelöst?
  YES -> Weiter
  NO -> Abgelehnt
OUTPUT: Weiter
OUTPUT: Abgelehnt
```"""


def test_parse_external_response_strips_fences(strict_mode):
    result = parse_external_response("Sure!\n```\nINPUT: A\nOUTPUT: B\n```", strict_mode)

    assert result.text == "INPUT: A\nOUTPUT: B"
    assert [n.title for n in result.graph.nodes] == ["A", "B"]


def test_generate_graph_sends_history_in_order(strict_mode):
    client = FakeChatClient(reply=REFINED_FLOW)
    history = [
        {"role": "user", "content": "login flow"},
        {"role": "assistant", "content": "INPUT: Login"},
    ]

    result = generate_graph("add a captcha", client, history=history, mode=strict_mode)

    messages = client.calls[0]
    assert [m["role"] for m in messages] == ["system", "user", "assistant", "user"]
    assert messages[-1]["content"] == "add a captcha"
    assert "Create a new flow" in messages[0]["content"]
    assert client.temperatures == [None]
    assert len(result.graph.nodes) == 4


def test_refine_graph_sends_current_flow(login_graph, strict_mode):
    client = FakeChatClient(reply=REFINED_FLOW)

    refine_graph(login_graph, "add a captcha", client, mode=strict_mode)

    system_prompt = client.calls[0][0]["content"]
    assert serialize_graph(login_graph) in system_prompt
    assert "A flow already exists" in system_prompt


def test_refine_graph_returns_new_graph(login_graph, strict_mode):
    login_graph.title = "Login"
    client = FakeChatClient(reply=REFINED_FLOW)

    result = refine_graph(login_graph, "add a captcha", client, mode=strict_mode)

    assert result.graph is not login_graph
    assert result.graph.title == "Login"
    assert [n.kind for n in result.graph.nodes] == [
        NodeKind.INPUT, NodeKind.DECISION, NodeKind.OUTPUT, NodeKind.OUTPUT,
    ]
    assert result.parse.diagnostics == []
    assert len(login_graph.nodes) == 8


def test_unchanged_answer_round_trips(login_graph, strict_mode):
    client = FakeChatClient(reply=serialize_graph(login_graph))

    result = refine_graph(login_graph, "looks good", client, mode=strict_mode)

    assert structural_signature(result.graph) == structural_signature(login_graph)


@pytest.mark.parametrize("error", [
    ServiceUnavailableError("down"),
    MalformedResponseError("garbage"),
])
def test_failures_propagate(login_graph, error):
    client = FakeChatClient(error=error)

    with pytest.raises(type(error)):
        refine_graph(login_graph, "anything", client)


def test_optimize_graph(login_graph, strict_mode, monkeypatch):
    monkeypatch.setattr(config, "LLM_OPTIMIZE_TEMPERATURE", 0.05)
    client = FakeChatClient(reply=REFINED_FLOW)

    result = optimize_graph(login_graph, client, mode=strict_mode)

    messages = client.calls[0]
    assert len(messages) == 1
    assert serialize_graph(login_graph) in messages[0]["content"]
    assert client.temperatures == [0.05]
    assert len(result.graph.nodes) == 4


@pytest.mark.parametrize("refine", [False, True])
def test_answer_is_unwrapped_once(refine, login_graph, strict_mode, monkeypatch):
    calls = []
    strip = refinement.strip_code_fence

    def counting_strip(text):
        calls.append(text)
        return strip(text)

    monkeypatch.setattr(refinement, "strip_code_fence", counting_strip)
    client = FakeChatClient(reply=REFINED_FLOW)

    if refine:
        result = refine_graph(login_graph, "add a captcha", client, mode=strict_mode)
    else:
        result = generate_graph("add a captcha", client, mode=strict_mode)

    assert calls == [REFINED_FLOW]
    assert result.text.startswith("INPUT: Login-Daten")
    assert not result.text.endswith("```")
