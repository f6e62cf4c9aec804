"""
Icon Path Validator - verifies and repairs node icon paths.

Every node with a non-empty icon must end up pointing at a canonical path
of the IconIndex. Invalid paths go through staged resolution, stopping at
the first stage that yields a match:

    1. case        exact path, case-insensitive (also root-relative forms)
    2. normalized  normalized filename / vendor-stripped / known alias
    3. scored      prefix and substring similarity above a threshold
    4. fallback    any General icon, so the node still renders something

Each stage is a pure function (candidate, index) -> Optional[path] and
nodes are processed independently. Nodes that no stage can resolve keep
their original path and are listed in the report. Nothing is raised.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from diagen import config
from diagen.errors import UnresolvedIconWarning
from diagen.icons.entry import normalize_name, path_segments, strip_cloud_prefixes
from diagen.icons.index import IconIndex
from diagen.ir.diagram import DiagramPayload


EXACT_MATCH_SCORE = 250.0
PREFIX_WEIGHT = 150.0
SUBSTRING_WEIGHT = 100.0
MIN_FRAGMENT_LENGTH = 2

# Abbreviations the generator uses in place of full icon names.
# Keys and values are normalized names.
SERVICE_ALIASES: Dict[str, List[str]] = {
    "s3": ["simplestorageservice", "simplestorageservices3"],
    "ec2": ["elasticcomputecloud", "elasticcomputecloudec2"],
    "rds": ["relationaldatabaseservice"],
    "sqs": ["simplequeueservice"],
    "sns": ["simplenotificationservice"],
    "ses": ["simpleemailservice"],
    "iam": ["identityandaccessmanagement", "identityandaccessmanagementiam"],
    "vpc": ["virtualprivatecloud"],
    "elb": ["elasticloadbalancing"],
    "alb": ["applicationloadbalancer"],
    "nlb": ["networkloadbalancer"],
    "ecs": ["elasticcontainerservice"],
    "eks": ["elastickubernetesservice"],
    "ecr": ["elasticcontainerregistry"],
    "efs": ["elasticfilesystem"],
    "ebs": ["elasticblockstore"],
    "kms": ["keymanagementservice"],
    "waf": ["webapplicationfirewall"],
    "aks": ["kubernetesservices", "kubernetesservice"],
    "acr": ["containerregistries", "containerregistry"],
    "gke": ["kubernetesengine", "googlekubernetesengine"],
    "gcs": ["cloudstorage"],
    "k8s": ["kubernetes"],
}

# Shortened filenames the generator is known to make up
KNOWN_SHORTENED_FILENAMES = {
    "S3.svg", "RDS.svg", "EC2.svg", "EKS.svg", "Lambda.svg", "DynamoDB.svg",
    "CloudFront.svg", "Route53.svg", "VPC.svg", "IAM.svg", "Redis.svg",
    "CosmosDB.svg", "AKS.svg",
}


# ============================================================
# Report types
# ============================================================

@dataclass
class IconRepair:
    node_id: str
    original_path: str
    resolved_path: str
    stage: str

    def to_dict(self) -> dict:
        return {
            "node_id": self.node_id,
            "original_path": self.original_path,
            "resolved_path": self.resolved_path,
            "stage": self.stage,
        }


@dataclass
class PathRepairReport:
    fixed_count: int = 0
    invalid_count: int = 0
    repairs: List[IconRepair] = field(default_factory=list)
    unresolved: List[UnresolvedIconWarning] = field(default_factory=list)

    @property
    def fallback_count(self) -> int:
        return sum(1 for r in self.repairs if r.stage == "fallback")

    @property
    def is_clean(self) -> bool:
        return self.invalid_count == 0

    def to_dict(self) -> dict:
        return {
            "fixed_count": self.fixed_count,
            "invalid_count": self.invalid_count,
            "fallback_count": self.fallback_count,
            "repairs": [r.to_dict() for r in self.repairs],
            "unresolved": [u.to_dict() for u in self.unresolved],
        }

    def get_summary(self) -> str:
        return (
            f"{self.invalid_count} invalid paths, {self.fixed_count} fixed, "
            f"{self.fallback_count} via fallback, {len(self.unresolved)} unresolved"
        )


@dataclass
class PathRepairResult:
    diagram: DiagramPayload
    report: PathRepairReport

    def to_dict(self) -> dict:
        return {
            "diagram": self.diagram.to_dict(),
            "report": self.report.to_dict(),
        }


# ============================================================
# Matching helpers
# ============================================================

def similarity_score(candidate: str, key: str) -> float:
    """
    Score two normalized names:

        equal                    EXACT_MATCH_SCORE
        one prefixes the other   shorter/longer * PREFIX_WEIGHT
        one contains the other   shorter/longer * SUBSTRING_WEIGHT
    """
    if not candidate or not key:
        return 0.0
    if candidate == key:
        return EXACT_MATCH_SCORE

    shorter, longer = (candidate, key) if len(candidate) <= len(key) else (key, candidate)
    if len(shorter) < MIN_FRAGMENT_LENGTH:
        return 0.0

    ratio = len(shorter) / len(longer)
    if longer.startswith(shorter):
        return ratio * PREFIX_WEIGHT
    if shorter in longer:
        return ratio * SUBSTRING_WEIGHT
    return 0.0


def candidate_names(candidate: str) -> List[str]:
    """Normalized filename of a candidate path, then its vendor-stripped form"""
    segments = path_segments(candidate)
    normalized = normalize_name(segments[-1]) if segments else ""
    names = []
    for name in (normalized, strip_cloud_prefixes(normalized)):
        if name and name not in names:
            names.append(name)
    return names


def _path_variants(candidate: str, index: IconIndex) -> List[str]:
    cleaned = candidate.strip().replace("\\", "/")
    while cleaned.startswith("./"):
        cleaned = cleaned[2:]
    cleaned = cleaned.lstrip("/")

    variants = [candidate, cleaned]
    for root in index.roots:
        prefix = root.strip("/") + "/"
        if not cleaned.lower().startswith(prefix.lower()):
            variants.append(prefix + cleaned)
    return variants


# ============================================================
# Stages
# ============================================================

def resolve_case_insensitive(candidate: str, index: IconIndex) -> Optional[str]:
    for variant in _path_variants(candidate, index):
        match = index.by_exact_path_lower.get(variant.lower())
        if match:
            return match
    return None


def resolve_normalized_name(candidate: str, index: IconIndex) -> Optional[str]:
    names = candidate_names(candidate)
    for name in list(names):
        for alias in SERVICE_ALIASES.get(name, []):
            if alias not in names:
                names.append(alias)

    for name in names:
        match = index.by_normalized_name.get(name) or index.by_stripped_name.get(name)
        if match:
            return match
    return None


def resolve_scored_match(
    candidate: str,
    index: IconIndex,
    threshold: float = config.FUZZY_MATCH_THRESHOLD,
) -> Optional[str]:
    names = candidate_names(candidate)
    if not names:
        return None

    best_path: Optional[str] = None
    best_score = 0.0

    for entry in index:
        key = entry.normalized_name
        keys = (key, strip_cloud_prefixes(key))
        score = max(similarity_score(name, k) for name in names for k in keys)
        # Strictly greater: the first entry in index order wins ties
        if score > best_score:
            best_score = score
            best_path = entry.canonical_path

    if best_path is not None and best_score > threshold:
        return best_path
    return None


def resolve_generic_fallback(
    candidate: str,
    index: IconIndex,
    hint: Optional[str] = None,
) -> Optional[str]:
    """
    Pick a General icon: the one closest to the candidate or the node's
    label if anything is close at all, otherwise the first one.
    """
    pool = index.general_entries()
    if not pool:
        return None

    names = candidate_names(candidate)
    if hint:
        hint_name = normalize_name(hint)
        if hint_name and hint_name not in names:
            names.append(hint_name)

    best = pool[0]
    best_score = 0.0
    for entry in pool:
        score = max((similarity_score(name, entry.normalized_name) for name in names), default=0.0)
        if score > best_score:
            best_score = score
            best = entry
    return best.canonical_path


# ============================================================
# Validator
# ============================================================

class IconPathValidator:
    """
    Usage:
        validator = IconPathValidator(index)
        result = validator.validate_and_repair(diagram)
        print(result.report.get_summary())
    """

    def __init__(
        self,
        index: IconIndex,
        threshold: float = config.FUZZY_MATCH_THRESHOLD,
        use_generic_fallback: bool = config.ENABLE_GENERIC_FALLBACK,
    ):
        self.index = index
        self.threshold = threshold
        self.use_generic_fallback = use_generic_fallback

    def resolve(self, candidate: str, hint: Optional[str] = None) -> Optional[Tuple[str, str]]:
        """Return (canonical_path, stage_name) for a candidate, or None"""
        match = resolve_case_insensitive(candidate, self.index)
        if match:
            return match, "case"

        match = resolve_normalized_name(candidate, self.index)
        if match:
            return match, "normalized"

        match = resolve_scored_match(candidate, self.index, self.threshold)
        if match:
            return match, "scored"

        if self.use_generic_fallback:
            match = resolve_generic_fallback(candidate, self.index, hint)
            if match:
                return match, "fallback"

        return None

    def validate_and_repair(self, diagram: DiagramPayload) -> PathRepairResult:
        repaired = diagram.model_copy(deep=True)
        report = PathRepairReport()

        for node in repaired.nodes:
            if not node.icon or not node.icon.strip():
                continue

            if node.icon in self.index:
                continue

            original = node.icon
            report.invalid_count += 1

            resolved = self.resolve(original, hint=node.label)
            if resolved is None:
                print(f"[PathValidator] ✗ NO MATCH FOUND for: {original}")
                report.unresolved.append(UnresolvedIconWarning(node_id=node.id, original_path=original))
                continue

            path, stage = resolved
            node.icon = path
            report.fixed_count += 1
            report.repairs.append(
                IconRepair(node_id=node.id, original_path=original, resolved_path=path, stage=stage)
            )
            print(f"[PathValidator] → Fixed ({stage}): {original} -> {path}")

        print(f"[PathValidator] Summary: {report.get_summary()}")
        return PathRepairResult(diagram=repaired, report=report)


def validate_and_repair(
    diagram: DiagramPayload,
    index: IconIndex,
    threshold: float = config.FUZZY_MATCH_THRESHOLD,
    use_generic_fallback: bool = config.ENABLE_GENERIC_FALLBACK,
) -> PathRepairResult:
    validator = IconPathValidator(index, threshold=threshold, use_generic_fallback=use_generic_fallback)
    return validator.validate_and_repair(diagram)


def find_suspicious_paths(diagram: DiagramPayload) -> List[str]:
    """
    Flag icon paths that look made up: known shortened filenames and paths
    too short to carry a provider folder. Diagnostic only.
    """
    warnings = []
    for i, node in enumerate(diagram.nodes):
        if not node.icon:
            continue
        segments = path_segments(node.icon)
        filename = segments[-1] if segments else node.icon
        name = node.label or "unnamed"

        if filename in KNOWN_SHORTENED_FILENAMES:
            warnings.append(f'Node {i} ({name}): uses shortened filename "{filename}"')
        if len(segments) < 4:
            warnings.append(f'Node {i} ({name}): path too short, missing provider or category folder: "{node.icon}"')
    return warnings
