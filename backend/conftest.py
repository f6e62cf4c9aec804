import pytest

from diagen.icons.index import IconIndex, build_index
from diagen.icons.sources import TreeInventorySource
from diagen.inference.base import LLMClient
from diagen.ir.diagram import DiagramPayload


TREE_INVENTORY = """assets/icons
├── AWS
│   ├── Compute
│   │   ├── Lambda.svg
│   │   └── Elastic-Compute-Cloud.svg
│   ├── Database
│   │   └── DynamoDB.svg
│   └── Storage
│       └── Simple-Storage-Service.svg
├── Azure
│   └── Containers
│       └── Kubernetes-Services.svg
├── Kubernetes
│   └── Pod.svg
└── General
    ├── User.svg
    ├── Database.svg
    └── Server.svg

9 directories, 9 files
"""

S3_PATH = "assets/icons/AWS/Storage/Simple-Storage-Service.svg"
LAMBDA_PATH = "assets/icons/AWS/Compute/Lambda.svg"


class FakeLLMClient(LLMClient):
    """Returns a canned response and remembers the prompts it was sent"""

    def __init__(self, response: str = "", error: Exception = None):
        self.model = "fake-model"
        self.response = response
        self.error = error
        self.prompts = []

    def generate(self, prompt, model=None):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


def make_diagram(*icons, edges=None) -> DiagramPayload:
    nodes = [
        {
            "id": f"n{i + 1}",
            "label": f"Node {i + 1}",
            "icon": icon,
            "type": "service",
            "position": {"x": 100 + i * 300, "y": 100},
        }
        for i, icon in enumerate(icons)
    ]
    return DiagramPayload.model_validate({"nodes": nodes, "edges": edges or [], "metadata": {}})


@pytest.fixture
def icon_index() -> IconIndex:
    return build_index(TreeInventorySource(text=TREE_INVENTORY))
