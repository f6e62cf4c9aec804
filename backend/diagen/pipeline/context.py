from dataclasses import dataclass, field
from typing import List, Optional

from diagen.detection.providers import ProviderDetectionResult
from diagen.ir.diagram import DiagramPayload
from diagen.ir.validation import StageIssue
from diagen.validation.diagram_fixer import FixResult
from diagen.validation.diagram_validator import DiagramValidationResult
from diagen.validation.path_validator import PathRepairReport


@dataclass
class GenerationContext:
    # Raw input (authoritative)
    markdown: str
    explicit_providers: List[str] = field(default_factory=list)
    model: Optional[str] = None

    # Detection + prompt
    detection: Optional[ProviderDetectionResult] = None
    prompt: Optional[str] = None

    # Generation output
    raw_output: Optional[str] = None
    diagram: Optional[DiagramPayload] = None

    # Repair + validation
    repair_report: Optional[PathRepairReport] = None
    suspicious_paths: List[str] = field(default_factory=list)
    validation: Optional[DiagramValidationResult] = None
    fix_result: Optional[FixResult] = None

    warnings: List[str] = field(default_factory=list)
    errors: List[StageIssue] = field(default_factory=list)

    @property
    def providers(self) -> List[str]:
        return self.detection.providers if self.detection else []

    @property
    def succeeded(self) -> bool:
        return not self.errors and self.diagram is not None

    def add_warning(self, message: str):
        self.warnings.append(message)

    def to_response(self) -> dict:
        report = self.repair_report or PathRepairReport()
        return {
            "success": self.succeeded,
            "diagram": self.diagram.to_dict() if self.diagram else None,
            "providers": self.providers,
            "validation": {
                "invalid_count": report.invalid_count,
                "fixed_count": report.fixed_count,
                "fallback_count": report.fallback_count,
                "repairs": [r.to_dict() for r in report.repairs],
                "unresolved": [u.to_dict() for u in report.unresolved],
            },
            "structure": self.validation.to_dict() if self.validation else None,
            "fixes": self.fix_result.to_dict() if self.fix_result else None,
            "warnings": self.warnings,
            "errors": [e.to_dict() for e in self.errors],
        }
