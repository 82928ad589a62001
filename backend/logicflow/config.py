import os
from dotenv import load_dotenv

# Load .env from project root
load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "qwen2.5:32b")
OLLAMA_API_KEY = os.getenv("OLLAMA_API_KEY")

LLM_TIMEOUT = float(os.getenv("LLM_TIMEOUT", "300"))
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.3"))
LLM_TOP_P = float(os.getenv("LLM_TOP_P", "0.9"))
# Review ("optimize") calls run cooler than generation
LLM_OPTIMIZE_TEMPERATURE = float(os.getenv("LLM_OPTIMIZE_TEMPERATURE", "0.2"))

PARSER_SYNTHESIZE_ANCHORS = _env_bool("PARSER_SYNTHESIZE_ANCHORS")
PARSER_FALLBACK_AS_PROCESS = _env_bool("PARSER_FALLBACK_AS_PROCESS")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
