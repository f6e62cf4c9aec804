"""
Diagram Validator - structural checks on a generated diagram payload.

Catches issues like:
- Missing node references in edges
- Duplicate node IDs and duplicate edges
- Empty labels, missing positions, missing edge IDs
- Orphaned nodes (no connections)
- Icon paths outside the icon inventory (when an index is given)
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple
from enum import Enum
from collections import defaultdict

from diagen.icons.index import IconIndex
from diagen.ir.diagram import DiagramPayload


class ValidationSeverity(Enum):
    ERROR = "error"      # Diagram will not render correctly
    WARNING = "warning"  # Diagram renders but has issues
    INFO = "info"        # Suggestions for improvement


@dataclass
class ValidationIssue:
    """A single validation issue found in the diagram"""
    severity: ValidationSeverity
    code: str           # Machine-readable issue code
    message: str        # Human-readable description
    node_id: Optional[str] = None
    edge_info: Optional[str] = None
    suggestion: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
            "node_id": self.node_id,
            "edge_info": self.edge_info,
            "suggestion": self.suggestion,
        }


@dataclass
class DiagramValidationResult:
    """Result of diagram validation"""
    is_valid: bool
    is_complete: bool
    issues: List[ValidationIssue] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=dict)

    @property
    def error_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == ValidationSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == ValidationSeverity.WARNING)

    @property
    def info_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == ValidationSeverity.INFO)

    def codes(self) -> Set[str]:
        return {i.code for i in self.issues}

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "is_complete": self.is_complete,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "info_count": self.info_count,
            "issues": [i.to_dict() for i in self.issues],
            "stats": self.stats,
        }

    def get_summary(self) -> str:
        """Get human-readable summary"""
        status = "✅ Valid" if self.is_valid else "❌ Invalid"
        completeness = "Complete" if self.is_complete else "Incomplete"
        return (
            f"{status} | {completeness} | "
            f"Errors: {self.error_count}, Warnings: {self.warning_count}, Info: {self.info_count}"
        )


class DiagramValidator:
    """
    Validates diagram payloads for completeness and correctness.

    Usage:
        validator = DiagramValidator(index)
        result = validator.validate(diagram)

        if not result.is_valid:
            for issue in result.issues:
                print(f"[{issue.severity.value}] {issue.message}")
    """

    def __init__(self, index: Optional[IconIndex] = None, strict_mode: bool = False):
        self.index = index
        self.strict_mode = strict_mode

    def validate(self, diagram: DiagramPayload) -> DiagramValidationResult:
        """Validate the entire diagram."""
        issues: List[ValidationIssue] = []

        node_ids = {node.id for node in diagram.nodes}

        issues.extend(self._check_empty_diagram(diagram))
        issues.extend(self._check_duplicate_node_ids(diagram))
        issues.extend(self._check_empty_labels(diagram))
        issues.extend(self._check_missing_positions(diagram))
        issues.extend(self._check_orphaned_nodes(diagram, node_ids))
        issues.extend(self._check_missing_edge_references(diagram, node_ids))
        issues.extend(self._check_missing_edge_ids(diagram))
        issues.extend(self._check_self_loops(diagram))
        issues.extend(self._check_duplicate_edges(diagram))
        if self.index is not None:
            issues.extend(self._check_icons(diagram))

        stats = self._calculate_stats(diagram, node_ids)

        has_errors = any(i.severity == ValidationSeverity.ERROR for i in issues)
        has_warnings = any(i.severity == ValidationSeverity.WARNING for i in issues)

        is_valid = not has_errors
        if self.strict_mode:
            is_valid = not has_errors and not has_warnings

        is_complete = not has_errors and stats.get("orphaned_nodes", 0) == 0

        return DiagramValidationResult(
            is_valid=is_valid,
            is_complete=is_complete,
            issues=issues,
            stats=stats,
        )

    def _check_empty_diagram(self, diagram: DiagramPayload) -> List[ValidationIssue]:
        issues = []
        if not diagram.nodes:
            issues.append(ValidationIssue(
                severity=ValidationSeverity.ERROR,
                code="NO_NODES",
                message="Diagram has no nodes",
                suggestion="Regenerate the diagram or add components manually"
            ))
        if not diagram.edges and len(diagram.nodes) > 1:
            issues.append(ValidationIssue(
                severity=ValidationSeverity.WARNING,
                code="NO_EDGES",
                message=f"Diagram has {len(diagram.nodes)} nodes but no edges",
                suggestion="Add connections between components"
            ))
        return issues

    def _check_duplicate_node_ids(self, diagram: DiagramPayload) -> List[ValidationIssue]:
        issues = []
        seen_ids: Dict[str, int] = defaultdict(int)
        for node in diagram.nodes:
            seen_ids[node.id] += 1
        for node_id, count in seen_ids.items():
            if count > 1:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="DUPLICATE_NODE_ID",
                    message=f"Duplicate node ID '{node_id}' appears {count} times",
                    node_id=node_id,
                    suggestion="Ensure each node has a unique ID"
                ))
        return issues

    def _check_empty_labels(self, diagram: DiagramPayload) -> List[ValidationIssue]:
        issues = []
        for node in diagram.nodes:
            if not node.label or not node.label.strip():
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.WARNING,
                    code="EMPTY_LABEL",
                    message=f"Node '{node.id}' has empty label",
                    node_id=node.id,
                    suggestion="Add a descriptive label to the node"
                ))
        return issues

    def _check_missing_positions(self, diagram: DiagramPayload) -> List[ValidationIssue]:
        issues = []
        for node in diagram.nodes:
            if node.position is None:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.WARNING,
                    code="MISSING_POSITION",
                    message=f"Node '{node.id}' has no position",
                    node_id=node.id,
                    suggestion="Place the node on the canvas"
                ))
        return issues

    def _check_orphaned_nodes(self, diagram: DiagramPayload, node_ids: Set[str]) -> List[ValidationIssue]:
        issues = []
        connected: Set[str] = set()
        for edge in diagram.edges:
            connected.add(edge.source)
            connected.add(edge.target)

        # Single-node diagrams have nothing to connect to
        if len(node_ids) < 2:
            return issues

        for node in diagram.nodes:
            if node.id in connected:
                continue
            issues.append(ValidationIssue(
                severity=ValidationSeverity.WARNING,
                code="ORPHANED_NODE",
                message=f"Node '{node.label}' ({node.id}, type={node.type}) has no connections",
                node_id=node.id,
                suggestion=f"Connect this {node.type} to other components or remove if unused"
            ))
        return issues

    def _check_missing_edge_references(self, diagram: DiagramPayload, node_ids: Set[str]) -> List[ValidationIssue]:
        issues = []
        for edge in diagram.edges:
            if edge.source not in node_ids:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="MISSING_SOURCE_NODE",
                    message=f"Edge references non-existent source node '{edge.source}'",
                    edge_info=f"{edge.source} -> {edge.target}",
                    suggestion=f"Add node '{edge.source}' or fix the edge reference"
                ))
            if edge.target not in node_ids:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="MISSING_TARGET_NODE",
                    message=f"Edge references non-existent target node '{edge.target}'",
                    edge_info=f"{edge.source} -> {edge.target}",
                    suggestion=f"Add node '{edge.target}' or fix the edge reference"
                ))
        return issues

    def _check_missing_edge_ids(self, diagram: DiagramPayload) -> List[ValidationIssue]:
        issues = []
        for edge in diagram.edges:
            if not edge.id:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.INFO,
                    code="MISSING_EDGE_ID",
                    message=f"Edge '{edge.source}' -> '{edge.target}' has no id",
                    edge_info=f"{edge.source} -> {edge.target}",
                ))
        return issues

    def _check_self_loops(self, diagram: DiagramPayload) -> List[ValidationIssue]:
        issues = []
        for edge in diagram.edges:
            if edge.source == edge.target:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.WARNING,
                    code="SELF_LOOP",
                    message=f"Edge creates self-loop on node '{edge.source}'",
                    node_id=edge.source,
                    edge_info=f"{edge.source} -> {edge.target}",
                    suggestion="Remove self-referencing edge unless intentional"
                ))
        return issues

    def _check_duplicate_edges(self, diagram: DiagramPayload) -> List[ValidationIssue]:
        issues = []
        edge_counts: Dict[Tuple[str, str, str], int] = defaultdict(int)
        for edge in diagram.edges:
            edge_counts[(edge.source, edge.target, edge.label or "")] += 1
        for (source, target, label), count in edge_counts.items():
            if count > 1:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.INFO,
                    code="DUPLICATE_EDGE",
                    message=f"Duplicate edge '{source}' -> '{target}' ({label}) appears {count} times",
                    edge_info=f"{source} -> {target}",
                    suggestion="Consider consolidating duplicate edges"
                ))
        return issues

    def _check_icons(self, diagram: DiagramPayload) -> List[ValidationIssue]:
        issues = []
        for node in diagram.nodes:
            if node.icon and node.icon not in self.index:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="UNKNOWN_ICON",
                    message=f"Node '{node.id}' uses an icon outside the inventory: {node.icon}",
                    node_id=node.id,
                    suggestion="Run icon path repair or pick an icon from the inventory"
                ))
        return issues

    def _calculate_stats(self, diagram: DiagramPayload, node_ids: Set[str]) -> Dict[str, int]:
        connected = set()
        for edge in diagram.edges:
            connected.add(edge.source)
            connected.add(edge.target)

        return {
            "nodes": len(diagram.nodes),
            "edges": len(diagram.edges),
            "orphaned_nodes": len(node_ids - connected) if len(node_ids) > 1 else 0,
            "nodes_with_icons": sum(1 for n in diagram.nodes if n.icon),
        }


def validate_diagram(
    diagram: DiagramPayload,
    index: Optional[IconIndex] = None,
    strict: bool = False,
) -> DiagramValidationResult:
    """Convenience function to validate a diagram."""
    validator = DiagramValidator(index=index, strict_mode=strict)
    return validator.validate(diagram)
