from diagen.inference.base import LLMClient
from diagen.inference.config import get_llm_client
from diagen.inference.prompt import compose_prompt, format_icon_listing

__all__ = ["LLMClient", "get_llm_client", "compose_prompt", "format_icon_listing"]
