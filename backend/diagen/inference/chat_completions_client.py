import re
from typing import Optional

import requests

from diagen import config
from diagen.errors import GenerationError
from diagen.inference.base import LLMClient


class ChatCompletionsClient(LLMClient):
    """OpenAI-compatible /chat/completions endpoint (llama.cpp, vLLM, ...)"""

    def __init__(
        self,
        base_url: str = config.LLM_BASE_URL,
        model: str = config.LLM_MODEL,
        temperature: float = config.LLM_TEMPERATURE,
        timeout: int = config.LLM_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = temperature
        self.timeout = timeout

    def generate(self, prompt: str, model: Optional[str] = None) -> str:
        url = f"{self.base_url}/chat/completions"

        try:
            response = requests.post(
                url,
                json={
                    "model": model or self.model,
                    "messages": [{"role": "user", "content": prompt}],
                    "temperature": self.temperature,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            content = response.json()["choices"][0]["message"]["content"]
        except requests.Timeout as e:
            raise GenerationError(f"Generation timed out after {self.timeout}s") from e
        except requests.RequestException as e:
            raise GenerationError(f"Generation request failed: {e}") from e
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise GenerationError("Unexpected chat completions response") from e

        # Strip markdown fences
        content = re.sub(r"^```(?:json)?\s*", "", content.strip())
        content = re.sub(r"\s*```$", "", content.strip())

        return content
