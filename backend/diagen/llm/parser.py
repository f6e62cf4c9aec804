import json
from typing import Any, Dict, List

from pydantic import ValidationError

from diagen.errors import ParseError
from diagen.ir.diagram import DiagramEdge, DiagramNode, DiagramPayload
from diagen.utils.json_extract import extract_json_block


# ============================================================
# JSON LOADER (LLM TRUST BOUNDARY)
# ============================================================

def load_json_object(raw_text: str) -> Dict[str, Any]:
    """
    Extract and parse the JSON object inside generation output.

    Raises ParseError (with the raw text attached) when no object can be
    recovered. No partial recovery is attempted.
    """
    if not raw_text or not isinstance(raw_text, str):
        raise ParseError("Generation output is empty", raw_text=raw_text or "")

    block = extract_json_block(raw_text)
    if block is None:
        raise ParseError("No JSON object found in generation output", raw_text=raw_text)

    try:
        data = json.loads(block)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON in generation output: {e}", raw_text=raw_text) from e

    if not isinstance(data, dict):
        raise ParseError("Generation output is not a JSON object", raw_text=raw_text)

    return data


# ============================================================
# DIAGRAM PARSER
# ============================================================

def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def parse_diagram(raw_text: str) -> DiagramPayload:
    """
    Turn raw generation text into a DiagramPayload.

    Missing or non-list `nodes`/`edges` become empty lists. Node fields
    are coerced (numbers to text, unparseable positions to None) so every
    object in `nodes` survives. Edges without usable endpoints are dropped
    with a warning.
    """
    data = load_json_object(raw_text)

    nodes: List[DiagramNode] = []
    for i, item in enumerate(_as_list(data.get("nodes"))):
        if not isinstance(item, dict):
            continue
        item = dict(item)
        if item.get("id") in (None, "") or isinstance(item.get("id"), (dict, list, bool)):
            item["id"] = f"node-{i + 1}"
        try:
            nodes.append(DiagramNode.model_validate(item))
        except ValidationError as e:
            print(f"[Parser] Dropping malformed node #{i}: {e.errors()[0]['msg']}")

    edges: List[DiagramEdge] = []
    for i, item in enumerate(_as_list(data.get("edges"))):
        if not isinstance(item, dict):
            continue
        try:
            edges.append(DiagramEdge.model_validate(item))
        except ValidationError as e:
            print(f"[Parser] Dropping malformed edge #{i}: {e.errors()[0]['msg']}")

    metadata = data.get("metadata")
    if not isinstance(metadata, dict):
        metadata = {}

    print(f"[Parser] Parsed diagram: {len(nodes)} nodes, {len(edges)} edges")
    return DiagramPayload(nodes=nodes, edges=edges, metadata=metadata)
