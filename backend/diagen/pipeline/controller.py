from typing import List, Optional, Sequence

from diagen.detection.providers import ProviderDetector
from diagen.icons.index import IconIndex
from diagen.inference.base import LLMClient
from diagen.pipeline.context import GenerationContext
from diagen.pipeline.stage import PipelineStage
from diagen.pipeline.stages import (
    GenerationStage,
    IconRepairStage,
    ParseStage,
    PromptStage,
    ProviderDetectionStage,
    StructureFixStage,
)


class GenerationController:
    """
    detect providers -> compose prompt -> generate -> parse -> repair icons -> fix structure

    One controller can serve many requests: the index is read-only and no
    stage keeps per-request state outside the context.
    """

    def __init__(
        self,
        index: IconIndex,
        llm_client: LLMClient,
        detector: Optional[ProviderDetector] = None,
        fix_structure: bool = True,
    ):
        self.index = index
        self.llm_client = llm_client

        self.stages: List[PipelineStage] = [
            ProviderDetectionStage(detector),
            PromptStage(index),
            GenerationStage(llm_client),
            ParseStage(),
            IconRepairStage(index),
        ]
        if fix_structure:
            self.stages.append(StructureFixStage(index))

    def run(
        self,
        markdown: str,
        providers: Optional[Sequence[str]] = None,
        model: Optional[str] = None,
    ) -> GenerationContext:
        context = GenerationContext(
            markdown=markdown,
            explicit_providers=list(providers or []),
            model=model,
        )

        for stage in self.stages:
            result = stage.run(context)

            # Hard stop on failure
            if not result.is_valid:
                context.errors.extend(result.errors)
                print(f"[PIPELINE] Stage '{stage.name}' failed: {[e.message for e in result.errors]}")
                break

        return context
