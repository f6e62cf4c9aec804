"""HTTP surface with the index, generation client and database swapped out"""

import json

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from diagen.api.routes import get_icon_index, get_llm_client, get_ollama_client
from diagen.db.models import Base, GenerationLog
from diagen.db.session import get_db
from diagen.errors import GenerationError
from diagen.icons.entry import IconEntry
from diagen.icons.index import IconIndex
from diagen.main import app

from conftest import LAMBDA_PATH, S3_PATH, FakeLLMClient


GENERATED = json.dumps({
    "nodes": [
        {"id": "bucket", "label": "Uploads", "icon": "S3.svg", "position": {"x": 100, "y": 100}},
        {"id": "fn", "label": "Resize", "icon": LAMBDA_PATH, "position": {"x": 400, "y": 100}},
    ],
    "edges": [{"id": "e1", "source": "bucket", "target": "fn", "label": "triggers"}],
    "metadata": {"title": "Image resizing"},
})


class FakeOllama:
    def __init__(self, models=None, error=None):
        self.models = models or []
        self.error = error

    def list_models(self):
        if self.error is not None:
            raise self.error
        return self.models


@pytest.fixture
def db_session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine)


@pytest.fixture
def llm():
    return FakeLLMClient(GENERATED)


@pytest.fixture
def client(icon_index, llm, db_session_factory):
    def override_get_db():
        db = db_session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_icon_index] = lambda: icon_index
    app.dependency_overrides[get_llm_client] = lambda: llm
    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["icons"] == 9


def test_icon_tree(client):
    body = client.get("/api/icons").json()
    assert [p["name"] for p in body["tree"]] == ["AWS", "Azure", "Kubernetes", "General"]
    assert body["counts"]["General"] == 3


def test_icon_search(client):
    body = client.get("/api/icons/search", params={"q": "lambda"}).json()
    assert body["count"] == 1
    assert body["results"][0]["path"] == LAMBDA_PATH

    body = client.get("/api/icons/search", params={"q": "", "provider": "General"}).json()
    assert body["count"] == 3


def test_generate_repairs_and_logs(client, db_session_factory):
    response = client.post("/api/generate", json={"markdown": "An AWS S3 bucket triggers a Lambda"})
    assert response.status_code == 200

    body = response.json()
    assert body["success"] is True
    assert body["providers"] == ["AWS", "General"]
    assert body["diagram"]["nodes"][0]["icon"] == S3_PATH
    assert body["validation"]["invalid_count"] == 1
    assert body["validation"]["fixed_count"] == 1

    db = db_session_factory()
    try:
        logs = db.query(GenerationLog).all()
        assert len(logs) == 1
        assert logs[0].providers == "AWS,General"
        assert logs[0].model == "fake-model"
        assert logs[0].fixed_count == 1
        assert logs[0].success is True
    finally:
        db.close()


def test_generate_with_explicit_providers_and_model(client, llm):
    response = client.post(
        "/api/generate",
        json={"markdown": "uses AWS Lambda", "providers": ["Azure"], "model": "llama3"},
    )
    assert response.status_code == 200
    assert response.json()["providers"] == ["Azure"]
    assert "Kubernetes-Services.svg" in llm.prompts[0]


def test_generate_parse_error_is_422(client, llm):
    llm.response = "I cannot help with that request."
    response = client.post("/api/generate", json={"markdown": "AWS lambda"})

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["raw_excerpt"] == "I cannot help with that request."
    assert "again" in detail["hint"]


def test_generate_service_failure_is_502(client, llm):
    llm.error = GenerationError("Generation timed out after 300s")
    response = client.post("/api/generate", json={"markdown": "AWS lambda"})

    assert response.status_code == 502
    assert "timed out" in response.json()["detail"]


def test_generate_rejects_missing_or_blank_markdown(client):
    assert client.post("/api/generate", json={}).status_code == 422
    assert client.post("/api/generate", json={"markdown": ""}).status_code == 422

    response = client.post("/api/generate", json={"markdown": "   "})
    assert response.status_code == 400
    assert response.json()["detail"]["errors"][0]["message"] == "Markdown input is empty"


def test_validate_loaded_diagram(client):
    diagram = json.loads(GENERATED)
    diagram["nodes"][1]["icon"] = "assets/icons/aws/compute/lambda.svg"

    response = client.post("/api/validate", json={"diagram": diagram})
    assert response.status_code == 200

    body = response.json()
    assert [n["icon"] for n in body["diagram"]["nodes"]] == [S3_PATH, LAMBDA_PATH]
    assert body["validation"]["invalid_count"] == 2
    assert body["structure"]["is_valid"] is True
    assert body["fixes"] is None
    assert any("S3.svg" in w for w in body["warnings"])


def test_validate_with_structure_fix(client):
    diagram = {
        "nodes": [{"id": "a", "label": "", "icon": LAMBDA_PATH}],
        "edges": [{"source": "a", "target": "a"}],
    }
    body = client.post("/api/validate", json={"diagram": diagram, "fix_structure": True}).json()

    assert body["diagram"]["edges"] == []
    assert body["diagram"]["nodes"][0]["label"] == "A"
    assert body["fixes"]["success"] is True


def test_validate_with_structure_fix_reports_unknown_icons(client):
    app.dependency_overrides[get_icon_index] = lambda: IconIndex([IconEntry("AWS", "Compute", "Lambda.svg")])
    diagram = {
        "nodes": [
            {"id": "a", "label": "A", "icon": LAMBDA_PATH, "position": {"x": 100, "y": 100}},
            {"id": "b", "label": "B", "icon": "Quantum-Flux-Capacitor.svg", "position": {"x": 400, "y": 100}},
        ],
        "edges": [{"id": "e1", "source": "a", "target": "b"}],
    }
    body = client.post("/api/validate", json={"diagram": diagram, "fix_structure": True}).json()

    assert body["validation"]["unresolved"][0]["node_id"] == "b"
    codes = [issue["code"] for issue in body["structure"]["issues"]]
    assert codes == ["UNKNOWN_ICON"]
    assert body["structure"]["is_valid"] is False


def test_ollama_models(client):
    app.dependency_overrides[get_ollama_client] = lambda: FakeOllama(models=[{"name": "qwen2.5-coder:7b"}])
    body = client.get("/api/ollama/models").json()
    assert body["models"][0]["name"] == "qwen2.5-coder:7b"


def test_ollama_models_unreachable(client):
    app.dependency_overrides[get_ollama_client] = lambda: FakeOllama(
        error=GenerationError("Cannot connect to Ollama")
    )
    response = client.get("/api/ollama/models")
    assert response.status_code == 502
