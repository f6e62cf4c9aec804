from typing import Optional

from diagen.detection.providers import ProviderDetector
from diagen.icons.index import IconIndex
from diagen.inference.base import LLMClient
from diagen.inference.prompt import compose_prompt, offered_providers
from diagen.ir.validation import StageIssue, StageResult
from diagen.llm.parser import parse_diagram
from diagen.pipeline.context import GenerationContext
from diagen.pipeline.stage import PipelineStage
from diagen.validation.diagram_fixer import DiagramAutoFixer
from diagen.validation.diagram_validator import DiagramValidator
from diagen.validation.path_validator import IconPathValidator, find_suspicious_paths


class ProviderDetectionStage(PipelineStage):
    name = "provider_detection"

    def __init__(self, detector: Optional[ProviderDetector] = None):
        self.detector = detector or ProviderDetector()

    def run(self, context: GenerationContext) -> StageResult:
        if not context.markdown or not context.markdown.strip():
            return StageResult.failure([
                StageIssue(level="error", message="Markdown input is empty", object_id="markdown")
            ])

        context.detection = self.detector.detect(context.markdown, context.explicit_providers)
        return StageResult.success()


class PromptStage(PipelineStage):
    name = "prompt"

    def __init__(self, index: IconIndex):
        self.index = index

    def run(self, context: GenerationContext) -> StageResult:
        context.prompt = compose_prompt(context.markdown, context.providers, self.index)
        offered = self.index.filter_providers(offered_providers(context.providers))
        print(f"[PromptComposer] Offering {len(offered)} icons for {', '.join(context.providers)}")
        if len(offered) == 0:
            context.add_warning("No icons available for the detected providers; icon paths cannot be validated")
        return StageResult.success()


class GenerationStage(PipelineStage):
    name = "generation"

    def __init__(self, llm_client: LLMClient):
        self.llm_client = llm_client

    def run(self, context: GenerationContext) -> StageResult:
        # GenerationError propagates to the caller, no retry
        context.raw_output = self.llm_client.generate(context.prompt, model=context.model)
        print(f"[LLM] Received {len(context.raw_output)} chars")
        return StageResult.success()


class ParseStage(PipelineStage):
    name = "parse"

    def run(self, context: GenerationContext) -> StageResult:
        # ParseError propagates: the user is asked to regenerate
        context.diagram = parse_diagram(context.raw_output or "")
        if not context.diagram.nodes:
            context.add_warning("Generated diagram has no nodes")
        return StageResult.success()


class IconRepairStage(PipelineStage):
    name = "icon_repair"

    def __init__(self, index: IconIndex, validator: Optional[IconPathValidator] = None):
        self.index = index
        self.validator = validator or IconPathValidator(index)

    def run(self, context: GenerationContext) -> StageResult:
        context.suspicious_paths = find_suspicious_paths(context.diagram)
        for warning in context.suspicious_paths:
            print(f"[PathValidator] ⚠️ {warning}")

        result = self.validator.validate_and_repair(context.diagram)
        context.diagram = result.diagram
        context.repair_report = result.report

        for unresolved in result.report.unresolved:
            context.add_warning(f"Node '{unresolved.node_id}': {unresolved.message} ({unresolved.original_path})")
        if result.report.fallback_count:
            context.add_warning(f"{result.report.fallback_count} icons replaced by a generic icon")
        return StageResult.success()


class StructureFixStage(PipelineStage):
    name = "structure_fix"

    def __init__(self, index: IconIndex, fixer: Optional[DiagramAutoFixer] = None):
        self.validator = DiagramValidator(index)
        self.fixer = fixer or DiagramAutoFixer()

    def run(self, context: GenerationContext) -> StageResult:
        diagram, fix_result = self.fixer.fix(context.diagram)
        context.diagram = diagram
        context.fix_result = fix_result
        context.validation = self.validator.validate(diagram)
        print(f"[VALIDATE] {context.validation.get_summary()}")
        return StageResult.success()
