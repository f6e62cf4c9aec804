import time
from typing import Dict, List, Optional

import requests

from diagen import config
from diagen.errors import GenerationError
from diagen.inference.base import LLMClient


class OllamaClient(LLMClient):
    """
    Blocking client for a local Ollama server.

    Large-model inference is slow, so generation uses the multi-minute
    LLM_TIMEOUT. Failures surface immediately as GenerationError;
    there is no retry.
    """

    def __init__(
        self,
        base_url: str = config.OLLAMA_BASE_URL,
        model: str = config.OLLAMA_MODEL,
        temperature: float = config.LLM_TEMPERATURE,
        num_predict: int = config.LLM_NUM_PREDICT,
        timeout: int = config.LLM_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = temperature
        self.num_predict = num_predict
        self.timeout = timeout

    def generate(self, prompt: str, model: Optional[str] = None) -> str:
        payload = {
            "model": model or self.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": self.temperature,
                "top_p": 0.9,
                "num_predict": self.num_predict,
            },
        }

        started = time.monotonic()
        try:
            response = requests.post(
                f"{self.base_url}/api/generate",
                json=payload,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.Timeout as e:
            raise GenerationError(f"Generation timed out after {self.timeout}s") from e
        except requests.RequestException as e:
            raise GenerationError(f"Generation request failed: {e}") from e
        except ValueError as e:
            raise GenerationError("Generation service returned non-JSON response") from e

        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str):
            raise GenerationError("Generation service response has no 'response' text")

        print(f"[LLM] {payload['model']} answered in {time.monotonic() - started:.1f}s")
        return text

    def list_models(self) -> List[Dict]:
        try:
            response = requests.get(f"{self.base_url}/api/tags", timeout=5)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise GenerationError(
                f"Cannot connect to Ollama. Make sure Ollama is running on {self.base_url}"
            ) from e

        return [
            {
                "name": m.get("name"),
                "size": m.get("size"),
                "modified": m.get("modified_at"),
            }
            for m in data.get("models", [])
        ]
