"""End-to-end generation pipeline with a canned generation service"""

import json

import pytest

from diagen.errors import GenerationError, ParseError
from diagen.pipeline.controller import GenerationController

from conftest import LAMBDA_PATH, S3_PATH, FakeLLMClient


GENERATED = json.dumps({
    "nodes": [
        {"id": "bucket", "label": "Uploads", "icon": "S3.svg", "type": "storage", "position": {"x": 100, "y": 100}},
        {"id": "fn", "label": "Resize", "icon": "assets/icons/aws/compute/lambda.svg", "position": {"x": 400, "y": 100}},
    ],
    "edges": [
        {"id": "e1", "source": "bucket", "target": "fn", "label": "triggers", "type": "orthogonal"},
    ],
    "metadata": {"title": "Image resizing", "technologies": "AWS"},
})


def test_generation_repairs_icons(icon_index):
    client = FakeLLMClient("Here is the diagram:\n```json\n" + GENERATED + "\n```")
    context = GenerationController(index=icon_index, llm_client=client).run(
        "Images land in an AWS S3 bucket and a Lambda resizes them"
    )

    assert context.succeeded
    assert context.providers == ["AWS", "General"]
    assert [n.icon for n in context.diagram.nodes] == [S3_PATH, LAMBDA_PATH]
    assert context.repair_report.invalid_count == 2
    assert context.repair_report.fixed_count == 2

    # The shortened filename is linted before repair
    assert any("S3.svg" in w for w in context.suspicious_paths)


def test_prompt_offers_detected_providers_only(icon_index):
    client = FakeLLMClient(GENERATED)
    GenerationController(index=icon_index, llm_client=client).run("Runs on Azure", providers=None)

    prompt = client.prompts[0]
    assert "Kubernetes-Services.svg" in prompt
    assert LAMBDA_PATH not in prompt


def test_explicit_providers_override_detection(icon_index):
    client = FakeLLMClient(GENERATED)
    context = GenerationController(index=icon_index, llm_client=client).run(
        "uses AWS Lambda", providers=["Azure"]
    )

    assert context.providers == ["Azure"]
    assert context.detection.explicit


def test_single_end_to_end_repair_counts():
    from diagen.icons.index import build_index
    from diagen.icons.sources import TreeInventorySource

    index = build_index(TreeInventorySource(text="\n".join([
        "├── AWS",
        "│   └── Storage",
        "│       └── Simple-Storage-Service.svg",
        "└── General",
        "    └── User.svg",
    ])))
    output = '{"nodes": [{"id": "s3", "label": "Bucket", "icon": "S3.svg"}], "edges": []}'
    context = GenerationController(index, FakeLLMClient(output), fix_structure=False).run("AWS storage")

    assert context.diagram.nodes[0].icon == S3_PATH
    assert context.repair_report.invalid_count == 1
    assert context.repair_report.fixed_count == 1
    assert context.fix_result is None


def test_structure_is_fixed_after_repair(icon_index):
    output = json.dumps({
        "nodes": [
            {"id": "a", "label": "API", "icon": LAMBDA_PATH},
            {"id": "b", "label": "Store", "icon": S3_PATH},
        ],
        "edges": [{"source": "a", "target": "b"}, {"source": "a", "target": "missing"}],
    })
    context = GenerationController(icon_index, FakeLLMClient(output)).run("AWS api")

    assert [e.id for e in context.diagram.edges] == ["edge-a-b"]
    assert all(n.position is not None for n in context.diagram.nodes)
    assert context.validation.is_valid
    assert context.fix_result.success


def test_blank_markdown_stops_before_generation(icon_index):
    client = FakeLLMClient(GENERATED)
    context = GenerationController(icon_index, client).run("   ")

    assert not context.succeeded
    assert context.errors[0].object_id == "markdown"
    assert client.prompts == []
    assert context.to_response()["diagram"] is None


def test_parse_error_propagates(icon_index):
    client = FakeLLMClient("I cannot help with that request.")
    with pytest.raises(ParseError):
        GenerationController(icon_index, client).run("AWS lambda")


def test_generation_error_propagates(icon_index):
    client = FakeLLMClient(error=GenerationError("Generation timed out after 300s"))
    with pytest.raises(GenerationError):
        GenerationController(icon_index, client).run("AWS lambda")


def test_unresolved_icons_become_warnings(icon_index):
    from diagen.icons.index import IconIndex

    index = IconIndex(icon_index.entries_for("AWS"))
    output = '{"nodes": [{"id": "x", "label": "X", "icon": "Quantum-Flux-Capacitor.svg"}], "edges": []}'
    context = GenerationController(index, FakeLLMClient(output)).run("AWS")

    response = context.to_response()
    assert response["validation"]["unresolved"] == [
        {"node_id": "x", "original_path": "Quantum-Flux-Capacitor.svg", "message": "No matching icon found"}
    ]
    assert any("Quantum-Flux-Capacitor.svg" in w for w in response["warnings"])
