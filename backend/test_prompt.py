from diagen.icons.index import IconIndex
from diagen.inference.prompt import compose_prompt, format_icon_listing, offered_providers

from conftest import LAMBDA_PATH, S3_PATH


def test_offered_providers_always_include_general():
    assert offered_providers(["AWS"]) == ["AWS", "General"]
    assert offered_providers(["General"]) == ["General"]
    assert offered_providers([]) == ["General"]


def test_prompt_lists_only_offered_icons(icon_index):
    prompt = compose_prompt("Upload files to S3 and process them with Lambda", ["AWS"], icon_index)

    assert f'"{LAMBDA_PATH}"' in prompt
    assert f'"{S3_PATH}"' in prompt
    assert '"assets/icons/General/User.svg"' in prompt
    assert "Kubernetes-Services.svg" not in prompt
    assert "assets/icons/Kubernetes/Pod.svg" not in prompt


def test_prompt_carries_rules_input_and_schema(icon_index):
    prompt = compose_prompt("Upload files to S3", ["AWS"], icon_index)

    assert "DETECTED TECHNOLOGIES: AWS" in prompt
    assert "Upload files to S3" in prompt
    assert "Return ONLY valid JSON" in prompt
    assert '"orthogonal"' in prompt
    assert "at least 250px spacing" in prompt
    assert prompt.index("AVAILABLE ICONS") < prompt.index("MARKDOWN INPUT") < prompt.index("OUTPUT JSON FORMAT")


def test_listing_groups_by_provider_and_category(icon_index):
    listing = format_icon_listing(icon_index.entries, provider_order=["General", "AWS"])
    lines = listing.splitlines()

    assert lines[0] == "[General] Icons:"
    assert "  General-Icons:" in lines
    assert f'    "{S3_PATH}"  // Simple Storage Service' in lines
    assert listing.index("[General] Icons:") < listing.index("[AWS] Icons:") < listing.index("[Azure] Icons:")


def test_empty_index_says_so():
    assert format_icon_listing([]) == "No icons found"
    prompt = compose_prompt("anything", ["AWS"], IconIndex.empty())
    assert "No icons found" in prompt


def test_prompt_is_deterministic(icon_index):
    first = compose_prompt("Same input", ["AWS", "Kubernetes"], icon_index)
    second = compose_prompt("Same input", ["AWS", "Kubernetes"], icon_index)
    assert first == second
