from abc import ABC, abstractmethod
from typing import Optional


class LLMClient(ABC):
    model: str

    @abstractmethod
    def generate(self, prompt: str, model: Optional[str] = None) -> str:
        """Return the generated text for a prompt, or raise GenerationError"""
        pass
