from diagen.detection.providers import ProviderDetector, detect_providers


def test_nothing_detected_falls_back_to_general():
    assert detect_providers("A simple web app with a database", []) == ["General"]


def test_explicit_override_wins():
    assert detect_providers("uses AWS Lambda", ["Azure"]) == ["Azure"]


def test_explicit_override_is_verbatim():
    result = ProviderDetector().detect("anything", ["GCP", "Kubernetes"])
    assert result.providers == ["GCP", "Kubernetes"]
    assert result.explicit is True


def test_detection_is_case_insensitive_and_ordered():
    text = "Grafana dashboards for a K8S cluster fronted by Amazon Web Services load balancers"
    assert detect_providers(text) == ["AWS", "Kubernetes", "Monitoring", "General"]


def test_keyword_matches_are_reported():
    result = ProviderDetector().detect("Deploy to Google Cloud with Prometheus")
    assert result.providers == ["GCP", "Monitoring", "General"]
    assert result.keyword_matches == {"GCP": ["google cloud"], "Monitoring": ["prometheus"]}
    assert result.explicit is False


def test_custom_keywords_from_yaml(tmp_path):
    keywords = tmp_path / "keywords.yaml"
    keywords.write_text("AWS:\n  - Lambda\n  - dynamodb\nUnknown:\n  - whatever\n", encoding="utf-8")

    detector = ProviderDetector(keywords_file=str(keywords))

    assert "lambda" in detector.keywords["AWS"]
    assert "Unknown" not in detector.keywords
    assert detector.detect("Serverless lambda functions").providers == ["AWS", "General"]
    # Defaults are untouched
    assert ProviderDetector.PROVIDER_KEYWORDS["AWS"] == ["aws", "amazon web services"]


def test_missing_or_malformed_keywords_file(tmp_path):
    missing = ProviderDetector(keywords_file=str(tmp_path / "nope.yaml"))
    assert missing.keywords == ProviderDetector.PROVIDER_KEYWORDS

    bad = tmp_path / "bad.yaml"
    bad.write_text("- just\n- a list\n", encoding="utf-8")
    assert ProviderDetector(keywords_file=str(bad)).keywords == ProviderDetector.PROVIDER_KEYWORDS
