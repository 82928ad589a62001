from unittest.mock import MagicMock, patch

import pytest
import requests

from logicflow.ir.errors import MalformedResponseError, ServiceUnavailableError
from logicflow.llm.client import OllamaClient, strip_code_fence


def _response(payload=None, ok=True, status_code=200, json_error=None):
    response = MagicMock()
    response.ok = ok
    response.status_code = status_code
    response.text = "server said no"
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def client():
    return OllamaClient(
        base_url="http://ollama.test/",
        model="test-model",
        api_key=None,
        timeout=5,
        temperature=0.7,
        top_p=0.9,
    )


def test_strip_code_fence_whole_answer():
    assert strip_code_fence("```\nINPUT: A\nOUTPUT: B\n```") == "INPUT: A\nOUTPUT: B"
    assert strip_code_fence("```text\nINPUT: A\n```") == "INPUT: A"


def test_strip_code_fence_embedded_block():
    text = "Here is your flow:\n```\nINPUT: A\n```\nLet me know if you need more."

    assert strip_code_fence(text) == "INPUT: A"


def test_strip_code_fence_plain_text():
    assert strip_code_fence("  INPUT: A\n") == "INPUT: A"
    assert strip_code_fence("") == ""


def test_chat_posts_ollama_payload(client):
    with patch("logicflow.llm.client.requests.post") as post:
        post.return_value = _response({"message": {"role": "assistant", "content": "INPUT: A"}})

        answer = client.chat([{"role": "user", "content": "hi"}], temperature=0.2)

    assert answer == "INPUT: A"
    args, kwargs = post.call_args
    assert args[0] == "http://ollama.test/api/chat"
    assert kwargs["json"] == {
        "model": "test-model",
        "messages": [{"role": "user", "content": "hi"}],
        "stream": False,
        "options": {"temperature": 0.2, "top_p": 0.9},
    }
    assert kwargs["headers"] == {}
    assert kwargs["timeout"] == 5


def test_chat_uses_default_temperature_and_api_key():
    client = OllamaClient(base_url="http://ollama.test", model="m", api_key="secret", temperature=0.7)

    with patch("logicflow.llm.client.requests.post") as post:
        post.return_value = _response({"message": {"content": "ok"}})
        client.generate("hello")

    kwargs = post.call_args.kwargs
    assert kwargs["json"]["options"]["temperature"] == 0.7
    assert kwargs["json"]["messages"] == [{"role": "user", "content": "hello"}]
    assert kwargs["headers"] == {"Authorization": "Bearer secret"}


def test_connection_failure_is_service_unavailable(client):
    with patch("logicflow.llm.client.requests.post") as post:
        post.side_effect = requests.ConnectionError("refused")

        with pytest.raises(ServiceUnavailableError):
            client.chat([{"role": "user", "content": "hi"}])


def test_timeout_is_service_unavailable(client):
    with patch("logicflow.llm.client.requests.post") as post:
        post.side_effect = requests.Timeout("slow")

        with pytest.raises(ServiceUnavailableError):
            client.chat([{"role": "user", "content": "hi"}])


def test_error_status_is_service_unavailable(client):
    with patch("logicflow.llm.client.requests.post") as post:
        post.return_value = _response(ok=False, status_code=500)

        with pytest.raises(ServiceUnavailableError, match="HTTP 500"):
            client.chat([{"role": "user", "content": "hi"}])


def test_non_json_body_is_malformed(client):
    with patch("logicflow.llm.client.requests.post") as post:
        post.return_value = _response(json_error=ValueError("not json"))

        with pytest.raises(MalformedResponseError):
            client.chat([{"role": "user", "content": "hi"}])


@pytest.mark.parametrize("payload", [
    {},
    {"message": None},
    {"message": {"role": "assistant"}},
    {"message": {"content": "   "}},
    ["not", "a", "dict"],
])
def test_missing_content_is_malformed(client, payload):
    with patch("logicflow.llm.client.requests.post") as post:
        post.return_value = _response(payload)

        with pytest.raises(MalformedResponseError):
            client.chat([{"role": "user", "content": "hi"}])
