import logging
import re
from typing import Dict, List, Optional

import requests

from logicflow import config
from logicflow.ir.errors import MalformedResponseError, ServiceUnavailableError
from logicflow.llm.base import ChatClient

logger = logging.getLogger(__name__)

WHOLE_FENCE_RE = re.compile(r"^```[^\n]*\n?(.*?)\n?```$", re.DOTALL)
EMBEDDED_FENCE_RE = re.compile(r"```[^\n]*\n(.+?)\n```", re.DOTALL)


def strip_code_fence(text: str) -> str:
    """
    Unwrap flow text from a fenced code block.

    A fence around the whole answer is removed; otherwise the first fenced
    block inside surrounding chatter is taken; otherwise the text is
    returned trimmed.
    """
    content = (text or "").strip()

    match = WHOLE_FENCE_RE.match(content)
    if match:
        return match.group(1).strip()

    match = EMBEDDED_FENCE_RE.search(content)
    if match:
        return match.group(1).strip()

    return content


class OllamaClient(ChatClient):
    def __init__(
        self,
        base_url: str = config.OLLAMA_BASE_URL,
        model: str = config.OLLAMA_MODEL,
        api_key: Optional[str] = config.OLLAMA_API_KEY,
        timeout: float = config.LLM_TIMEOUT,
        temperature: float = config.LLM_TEMPERATURE,
        top_p: float = config.LLM_TOP_P,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.api_key = api_key
        self.timeout = timeout
        self.temperature = temperature
        self.top_p = top_p

    def chat(self, messages: List[Dict], temperature: Optional[float] = None) -> str:
        payload = {
            "model": self.model,
            "messages": messages,
            "stream": False,
            "options": {
                "temperature": self.temperature if temperature is None else temperature,
                "top_p": self.top_p,
            },
        }
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        url = f"{self.base_url}/api/chat"

        logger.info("[LLM] Sending %d messages to %s (%s)", len(messages), url, self.model)

        try:
            response = requests.post(url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise ServiceUnavailableError(
                f"Language model service unreachable at {self.base_url}: {e}"
            ) from e

        if not response.ok:
            raise ServiceUnavailableError(
                f"Language model service returned HTTP {response.status_code}: "
                f"{response.text[:200]}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError("Language model response is not valid JSON") from e

        message = data.get("message") if isinstance(data, dict) else None
        content = message.get("content") if isinstance(message, dict) else None

        if not isinstance(content, str) or not content.strip():
            raise MalformedResponseError("Language model response has no message content")

        logger.debug("[LLM] Received %d characters", len(content))
        return content

    def generate(self, prompt: str) -> str:
        return self.chat([{"role": "user", "content": prompt}])
