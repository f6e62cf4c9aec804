from diagen.validation.path_validator import (
    IconPathValidator,
    PathRepairReport,
    PathRepairResult,
    find_suspicious_paths,
    validate_and_repair,
)
from diagen.validation.diagram_validator import (
    DiagramValidator,
    DiagramValidationResult,
    ValidationIssue,
    ValidationSeverity,
    validate_diagram,
)
from diagen.validation.diagram_fixer import (
    DiagramAutoFixer,
    FixResult,
    auto_fix_diagram,
    validate_and_fix_diagram,
)

__all__ = [
    "IconPathValidator",
    "PathRepairReport",
    "PathRepairResult",
    "find_suspicious_paths",
    "validate_and_repair",
    "DiagramValidator",
    "DiagramValidationResult",
    "ValidationIssue",
    "ValidationSeverity",
    "validate_diagram",
    "DiagramAutoFixer",
    "FixResult",
    "auto_fix_diagram",
    "validate_and_fix_diagram",
]
