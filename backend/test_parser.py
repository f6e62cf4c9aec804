"""Generation output parsing"""

import pytest

from diagen.errors import ParseError
from diagen.llm.parser import load_json_object, parse_diagram
from diagen.utils.json_extract import extract_json_block


FENCED_OUTPUT = """Sure! Here is the architecture diagram you asked for:

```json
{
  "nodes": [
    {"id": "api", "label": "API Gateway", "icon": "S3.svg", "type": "service", "position": {"x": 100, "y": 100}},
    {"id": "fn", "label": "Handler", "icon": "assets/icons/AWS/Compute/Lambda.svg", "position": {"x": 400, "y": 100}}
  ],
  "edges": [
    {"id": "e1", "source": "api", "target": "fn", "label": "invokes", "type": "orthogonal"}
  ],
  "metadata": {"title": "Serverless API"}
}
```

Let me know if you want any changes."""


def test_fenced_json_with_prose():
    diagram = parse_diagram(FENCED_OUTPUT)

    assert [n.id for n in diagram.nodes] == ["api", "fn"]
    assert diagram.nodes[0].icon == "S3.svg"
    assert diagram.nodes[1].type == "service"
    assert diagram.nodes[1].position.x == 400
    assert diagram.edges[0].source == "api"
    assert diagram.metadata == {"title": "Serverless API"}


def test_refusal_raises_parse_error():
    with pytest.raises(ParseError) as exc:
        parse_diagram("I cannot help with that request.")
    assert exc.value.raw_text == "I cannot help with that request."


def test_invalid_json_raises_parse_error():
    raw = 'Here you go: {"nodes": [{"id": "a",}]'
    with pytest.raises(ParseError) as exc:
        parse_diagram(raw)
    assert exc.value.raw_text == raw


def test_empty_output_raises_parse_error():
    with pytest.raises(ParseError):
        parse_diagram("")


def test_load_json_object_ignores_surrounding_text():
    assert load_json_object('result: {"a": 1} done') == {"a": 1}


def test_missing_sections_default_to_empty():
    diagram = parse_diagram('{"metadata": "not a dict"}')
    assert diagram.nodes == []
    assert diagram.edges == []
    assert diagram.metadata == {}


def test_lenient_node_and_edge_handling():
    raw = """{
      "nodes": [
        {"label": "No Id"},
        {"id": 7, "label": null, "type": null},
        "not a node"
      ],
      "edges": [
        {"source": "node-1", "target": 7},
        {"source": "node-1"}
      ]
    }"""
    diagram = parse_diagram(raw)

    assert [n.id for n in diagram.nodes] == ["node-1", "7"]
    assert diagram.nodes[1].label == ""
    assert diagram.nodes[1].type == "service"
    assert len(diagram.edges) == 1
    assert diagram.edges[0].target == "7"
    assert diagram.edges[0].id is None


def test_unknown_fields_survive():
    diagram = parse_diagram('{"nodes": [{"id": "a", "style": {"color": "red"}}], "edges": []}')
    assert diagram.to_dict()["nodes"][0]["style"] == {"color": "red"}


def test_parse_error_excerpt():
    error = ParseError("bad", raw_text="x" * 600)
    assert error.excerpt() == "x" * 500 + "..."
    assert ParseError("bad", raw_text="short").excerpt() == "short"


def test_extract_json_block():
    assert extract_json_block('noise {"a": {"b": 1}} trailing') == '{"a": {"b": 1}}'
    assert extract_json_block("no braces here") is None
    assert extract_json_block("} backwards {") is None


def test_chatty_fenced_empty_diagram():
    raw = 'Here is the diagram:\n```json\n{"nodes":[],"edges":[]}\n```\nHope this helps!'
    diagram = parse_diagram(raw)
    assert diagram.nodes == []
    assert diagram.edges == []


def test_odd_node_fields_keep_the_node():
    raw = """{
      "nodes": [
        {"id": "a", "label": 42, "icon": "S3.svg"},
        {"id": "b", "label": "B", "icon": 7, "position": {"x": "100px", "y": 1}},
        {"id": "c", "label": ["not", "text"], "icon": {"path": "x"}, "type": 3, "position": "top-left"}
      ],
      "edges": [{"source": "a", "target": "b", "label": 5}]
    }"""
    diagram = parse_diagram(raw)

    assert [n.id for n in diagram.nodes] == ["a", "b", "c"]
    assert diagram.nodes[0].label == "42"
    assert diagram.nodes[1].icon == "7"
    assert diagram.nodes[1].position is None
    assert diagram.nodes[2].label == ""
    assert diagram.nodes[2].icon is None
    assert diagram.nodes[2].type == "3"
    assert diagram.nodes[2].position is None
    assert diagram.edges[0].label == "5"


def test_null_passthrough_keys_survive_to_dict():
    diagram = parse_diagram('{"nodes": [{"id": "a", "note": null}], "edges": [{"source": "a", "target": "a"}]}')
    data = diagram.to_dict()

    assert data["nodes"][0] == {"id": "a", "label": "", "type": "service", "note": None}
    assert "id" not in data["edges"][0]
