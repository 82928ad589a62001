from logicflow.llm.base import ChatClient
from logicflow.llm.client import OllamaClient, strip_code_fence
