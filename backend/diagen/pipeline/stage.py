from abc import ABC, abstractmethod

from diagen.ir.validation import StageResult
from diagen.pipeline.context import GenerationContext


class PipelineStage(ABC):
    name: str

    @abstractmethod
    def run(self, context: GenerationContext) -> StageResult:
        """
        Must:
        - read from context
        - write to context
        - NEVER call other stages

        Structural failures (ParseError, GenerationError) are raised;
        everything else is reported through the returned StageResult
        or context warnings.
        """
        pass
