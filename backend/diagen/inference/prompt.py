"""
Prompt composition for diagram generation.

Pure string building: no I/O, no network. Tests assert on the text
directly without calling the generation service.
"""

from typing import Dict, Iterable, List, Optional, Sequence

from diagen import config
from diagen.icons.entry import GENERAL_PROVIDER, IconEntry
from diagen.icons.index import IconIndex


SYSTEM_PROMPT = """You are a cloud architecture diagram generator.
You turn an architecture description into a JSON diagram whose nodes use
provider icons from a fixed inventory."""

ICON_RULES = """ICON PATH RULES (breaking these produces broken images):
- Every "icon" value MUST be copied exactly from AVAILABLE ICONS below
- Only the listed paths are valid; do NOT invent, shorten or simplify paths
- Keep the category folder and the full filename with every word and hyphen
- Match the exact case (e.g. "AWS", not "aws")
- If no listed icon fits a component, use an icon from the General section"""

DIAGRAM_SCHEMA = """{
  "nodes": [
    {
      "id": "unique-id",
      "label": "Service Display Name",
      "icon": "assets/icons/Provider/Category/Exact-Icon-Filename.svg",
      "type": "service",
      "position": {"x": 100, "y": 100}
    }
  ],
  "edges": [
    {
      "id": "edge-id",
      "source": "source-node-id",
      "target": "target-node-id",
      "label": "connection type",
      "type": "orthogonal"
    }
  ],
  "metadata": {
    "title": "Architecture Diagram Title",
    "description": "Brief description",
    "technologies": "Comma separated providers"
  }
}"""

SCHEMA_FIELD_DOCS = """FIELDS:
- nodes[].id: unique, referenced by edges
- nodes[].label: human readable component name
- nodes[].icon: exact path copied from AVAILABLE ICONS
- nodes[].type: component kind (service, database, queue, user, ...)
- nodes[].position: canvas coordinates in pixels
- edges[].source / edges[].target: existing node ids
- edges[].label: what flows over the connection
- edges[].type: always "orthogonal"
- metadata: title, description and the technologies used"""


def offered_providers(providers: Sequence[str]) -> List[str]:
    """Detected providers plus General, which is always offered"""
    result = []
    for provider in list(providers) + [GENERAL_PROVIDER]:
        if provider not in result:
            result.append(provider)
    return result


def format_icon_listing(entries: Iterable[IconEntry], provider_order: Sequence[str] = ()) -> str:
    """
    Group entries by provider then category, one quoted canonical path per
    line followed by a readable label as a matching aid.
    """
    grouped: Dict[str, Dict[str, List[IconEntry]]] = {}
    for entry in entries:
        grouped.setdefault(entry.provider, {}).setdefault(entry.category, []).append(entry)

    if not grouped:
        return "No icons found"

    order = [p for p in provider_order if p in grouped]
    order += [p for p in grouped if p not in order]

    lines: List[str] = []
    for provider in order:
        lines.append("")
        lines.append(f"[{provider}] Icons:")
        for category, items in grouped[provider].items():
            lines.append(f"  {category}:")
            for entry in items:
                lines.append(f'    "{entry.canonical_path}"  // {entry.display_name}')
    return "\n".join(lines).strip("\n")


def compose_prompt(
    free_text: str,
    providers: Sequence[str],
    index: IconIndex,
    min_spacing: int = 250,
    max_spacing: Optional[int] = None,
) -> str:
    """Build the instruction string sent to the generation service"""
    offered = offered_providers(providers)
    subset = index.filter_providers(offered)
    listing = format_icon_listing(subset.entries, provider_order=offered)

    max_spacing = max_spacing or max(config.NODE_SPACING + 50, min_spacing)
    technologies = ", ".join(providers)

    sections = [
        SYSTEM_PROMPT,
        "",
        f"DETECTED TECHNOLOGIES: {technologies}",
        "",
        ICON_RULES,
        "",
        "AVAILABLE ICONS (COPY THESE EXACT PATHS):",
        listing,
        "",
        "LAYOUT:",
        f"- Position nodes with at least {min_spacing}px spacing (aim for {min_spacing}-{max_spacing}px)",
        "- All edges use the \"orthogonal\" type",
        "",
        "MARKDOWN INPUT:",
        free_text,
        "",
        "OUTPUT JSON FORMAT:",
        DIAGRAM_SCHEMA,
        "",
        SCHEMA_FIELD_DOCS,
        "",
        f'Set metadata.technologies to "{technologies}".',
        "",
        "IMPORTANT: Return ONLY valid JSON. No explanations, no markdown code blocks, just the JSON object.",
        "",
        "Generate now:",
    ]
    return "\n".join(sections)
