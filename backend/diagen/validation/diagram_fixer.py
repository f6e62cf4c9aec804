"""
Diagram Auto-Fixer - rule-based repair of structural diagram issues.

Runs after icon path repair. Only deterministic fixes are applied here:
duplicate ids are renamed, broken or redundant edges are dropped, empty
labels and missing edge ids are derived from ids, and nodes without a
position are laid out on a grid. Orphaned nodes are reported, never
connected, since inventing edges would change the architecture.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple

from diagen import config
from diagen.icons.index import IconIndex
from diagen.ir.diagram import DiagramPayload, Position
from diagen.validation.diagram_validator import (
    DiagramValidator,
    DiagramValidationResult,
    ValidationIssue,
    ValidationSeverity,
)


@dataclass
class FixResult:
    """Result of a fix operation"""
    success: bool
    issues_fixed: List[str] = field(default_factory=list)
    issues_remaining: List[str] = field(default_factory=list)
    changes_made: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "issues_fixed": self.issues_fixed,
            "issues_remaining": self.issues_remaining,
            "changes_made": self.changes_made,
        }


class DiagramAutoFixer:
    """
    Usage:
        fixer = DiagramAutoFixer()
        fixed_diagram, result = fixer.fix(diagram)
    """

    AUTO_FIXABLE = {
        "DUPLICATE_NODE_ID",
        "DUPLICATE_EDGE",
        "MISSING_SOURCE_NODE",
        "MISSING_TARGET_NODE",
        "SELF_LOOP",
        "EMPTY_LABEL",
        "MISSING_EDGE_ID",
        "MISSING_POSITION",
    }

    def __init__(self, max_iterations: int = 3, node_spacing: int = config.NODE_SPACING, columns: int = 4):
        self.max_iterations = max_iterations
        self.node_spacing = node_spacing
        self.columns = columns
        self.validator = DiagramValidator()

    def fix(
        self,
        diagram: DiagramPayload,
        validation_result: Optional[DiagramValidationResult] = None,
    ) -> Tuple[DiagramPayload, FixResult]:
        fixed_diagram = diagram.model_copy(deep=True)

        all_changes: List[str] = []
        all_fixed: List[str] = []

        for iteration in range(self.max_iterations):
            if validation_result is None or iteration > 0:
                validation_result = self.validator.validate(fixed_diagram)

            auto_issues = [i for i in validation_result.issues if i.code in self.AUTO_FIXABLE]
            if not auto_issues:
                break

            print(f"[FIXER] Iteration {iteration + 1}/{self.max_iterations}: applying {len(auto_issues)} auto-fixes...")
            changes, fixed = self._apply_auto_fixes(fixed_diagram, auto_issues)
            all_changes.extend(changes)
            all_fixed.extend(fixed)
            if not changes:
                break

        final_validation = self.validator.validate(fixed_diagram)
        remaining = [i.code for i in final_validation.issues if i.severity == ValidationSeverity.ERROR]

        result = FixResult(
            success=final_validation.is_valid,
            issues_fixed=sorted(set(all_fixed)),
            issues_remaining=remaining,
            changes_made=all_changes,
        )
        print(f"[FIXER] Fix complete: {len(all_changes)} changes, {len(remaining)} errors remaining")
        return fixed_diagram, result

    # ============================================================
    # AUTO-FIX METHODS
    # ============================================================

    def _apply_auto_fixes(
        self,
        diagram: DiagramPayload,
        issues: List[ValidationIssue],
    ) -> Tuple[List[str], List[str]]:
        changes = []
        fixed = []
        codes = {i.code for i in issues}

        # Ids first so later fixes see unique nodes
        if "DUPLICATE_NODE_ID" in codes:
            for old_id, new_id in self._fix_duplicate_node_ids(diagram):
                changes.append(f"Renamed duplicate node: {old_id} -> {new_id}")
            fixed.append("DUPLICATE_NODE_ID")

        for issue in issues:
            if issue.code in ("MISSING_SOURCE_NODE", "MISSING_TARGET_NODE"):
                if self._fix_missing_node_reference(diagram, issue):
                    changes.append(f"Removed edge with missing endpoint: {issue.edge_info}")
                    fixed.append(issue.code)

            elif issue.code == "SELF_LOOP":
                if self._fix_self_loop(diagram, issue):
                    changes.append(f"Removed self-loop on: {issue.node_id}")
                    fixed.append(issue.code)

            elif issue.code == "EMPTY_LABEL":
                if self._fix_empty_label(diagram, issue):
                    changes.append(f"Set default label for: {issue.node_id}")
                    fixed.append(issue.code)

        if "DUPLICATE_EDGE" in codes:
            removed = self._fix_duplicate_edges(diagram)
            if removed:
                changes.append(f"Removed {removed} duplicate edges")
                fixed.append("DUPLICATE_EDGE")

        if "MISSING_EDGE_ID" in codes:
            assigned = self._fix_missing_edge_ids(diagram)
            if assigned:
                changes.append(f"Assigned ids to {assigned} edges")
                fixed.append("MISSING_EDGE_ID")

        if "MISSING_POSITION" in codes:
            placed = self._fix_missing_positions(diagram)
            if placed:
                changes.append(f"Placed {placed} nodes on the grid")
                fixed.append("MISSING_POSITION")

        return changes, fixed

    def _fix_duplicate_node_ids(self, diagram: DiagramPayload) -> List[Tuple[str, str]]:
        """Rename later duplicates with a numeric suffix; edges keep pointing at the first"""
        renamed = []
        taken: Set[str] = {node.id for node in diagram.nodes}
        seen: Set[str] = set()

        for node in diagram.nodes:
            if node.id not in seen:
                seen.add(node.id)
                continue
            counter = 2
            new_id = f"{node.id}_{counter}"
            while new_id in taken:
                counter += 1
                new_id = f"{node.id}_{counter}"
            renamed.append((node.id, new_id))
            node.id = new_id
            taken.add(new_id)
            seen.add(new_id)

        return renamed

    def _fix_duplicate_edges(self, diagram: DiagramPayload) -> int:
        """Remove duplicate edges, keep first occurrence"""
        seen: Set[Tuple[str, str, str]] = set()
        edges_to_keep = []

        for edge in diagram.edges:
            key = (edge.source, edge.target, edge.label or "")
            if key not in seen:
                edges_to_keep.append(edge)
                seen.add(key)

        removed = len(diagram.edges) - len(edges_to_keep)
        diagram.edges = edges_to_keep
        return removed

    def _fix_missing_node_reference(self, diagram: DiagramPayload, issue: ValidationIssue) -> bool:
        """Remove edges that reference non-existent nodes"""
        node_ids = diagram.node_ids()
        before = len(diagram.edges)
        diagram.edges = [
            e for e in diagram.edges
            if e.source in node_ids and e.target in node_ids
        ]
        return len(diagram.edges) < before

    def _fix_self_loop(self, diagram: DiagramPayload, issue: ValidationIssue) -> bool:
        if not issue.node_id:
            return False

        before = len(diagram.edges)
        diagram.edges = [
            e for e in diagram.edges
            if not (e.source == issue.node_id and e.target == issue.node_id)
        ]
        return len(diagram.edges) < before

    def _fix_empty_label(self, diagram: DiagramPayload, issue: ValidationIssue) -> bool:
        """Set default label based on node ID"""
        if not issue.node_id:
            return False

        for node in diagram.nodes:
            if node.id == issue.node_id and not (node.label or "").strip():
                node.label = issue.node_id.replace("_", " ").replace("-", " ").title()
                return True
        return False

    def _fix_missing_edge_ids(self, diagram: DiagramPayload) -> int:
        taken = {e.id for e in diagram.edges if e.id}
        assigned = 0
        for edge in diagram.edges:
            if edge.id:
                continue
            base = f"edge-{edge.source}-{edge.target}"
            new_id = base
            counter = 2
            while new_id in taken:
                new_id = f"{base}-{counter}"
                counter += 1
            edge.id = new_id
            taken.add(new_id)
            assigned += 1
        return assigned

    def _fix_missing_positions(self, diagram: DiagramPayload) -> int:
        """Lay unplaced nodes out row by row below everything already placed"""
        placed_y = [n.position.y for n in diagram.nodes if n.position is not None]
        top = (max(placed_y) + self.node_spacing) if placed_y else 100

        count = 0
        for node in diagram.nodes:
            if node.position is not None:
                continue
            row, col = divmod(count, self.columns)
            node.position = Position(
                x=100 + col * self.node_spacing,
                y=top + row * self.node_spacing,
            )
            count += 1
        return count


def auto_fix_diagram(diagram: DiagramPayload, max_iterations: int = 3) -> Tuple[DiagramPayload, FixResult]:
    fixer = DiagramAutoFixer(max_iterations=max_iterations)
    return fixer.fix(diagram)


def validate_and_fix_diagram(
    diagram: DiagramPayload,
    auto_fix: bool = True,
    index: Optional[IconIndex] = None,
) -> Tuple[DiagramPayload, DiagramValidationResult, Optional[FixResult]]:
    """
    Validate, fix when needed, and return the final validation.

    With an index, icons outside the inventory are reported as UNKNOWN_ICON.

    Returns:
        Tuple of (final_diagram, validation_result, fix_result or None)
    """
    validator = DiagramValidator(index)
    validation = validator.validate(diagram)
    print(f"[VALIDATE] {validation.get_summary()}")

    if not auto_fix or not any(i.code in DiagramAutoFixer.AUTO_FIXABLE for i in validation.issues):
        return diagram, validation, None

    fixed_diagram, fix_result = DiagramAutoFixer().fix(diagram, validation)
    final_validation = validator.validate(fixed_diagram)
    print(f"[VALIDATE] After fix: {final_validation.get_summary()}")
    return fixed_diagram, final_validation, fix_result
