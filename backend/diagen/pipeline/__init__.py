from diagen.pipeline.context import GenerationContext
from diagen.pipeline.controller import GenerationController

__all__ = ["GenerationContext", "GenerationController"]
