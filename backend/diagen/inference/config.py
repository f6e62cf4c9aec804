from diagen import config
from diagen.inference.base import LLMClient
from diagen.inference.chat_completions_client import ChatCompletionsClient
from diagen.inference.ollama_client import OllamaClient


def get_llm_client() -> LLMClient:
    if config.LLM_PROVIDER == "openai":
        return ChatCompletionsClient(
            base_url=config.LLM_BASE_URL,
            model=config.LLM_MODEL,
        )
    return OllamaClient()
