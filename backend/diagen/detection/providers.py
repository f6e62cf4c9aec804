from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence
import os

import yaml

from diagen import config
from diagen.icons.entry import GENERAL_PROVIDER, PROVIDER_PRIORITY


@dataclass
class ProviderDetectionResult:
    providers: List[str]
    explicit: bool = False
    keyword_matches: Dict[str, List[str]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "providers": self.providers,
            "explicit": self.explicit,
            "keyword_matches": self.keyword_matches,
        }


class ProviderDetector:
    """
    Infers which icon providers are relevant to an architecture description.

    Explicit user selection always wins. Otherwise each provider has an
    OR-list of trigger substrings matched case-insensitively. Output is
    ordered by PROVIDER_PRIORITY and always ends with General, the
    catch-all pool the repair stage falls back to.
    """

    PROVIDER_KEYWORDS: Dict[str, List[str]] = {
        "AWS": ["aws", "amazon web services"],
        "Azure": ["azure", "microsoft azure"],
        "GCP": ["gcp", "google cloud"],
        "Kubernetes": ["kubernetes", "k8s"],
        "Monitoring": ["prometheus", "grafana", "datadog", "cloudwatch", "monitoring"],
    }

    def __init__(self, keywords_file: Optional[str] = None):
        self.keywords: Dict[str, List[str]] = {
            provider: list(triggers) for provider, triggers in self.PROVIDER_KEYWORDS.items()
        }
        self.keywords_file = keywords_file or config.PROVIDER_KEYWORDS_FILE
        if self.keywords_file:
            self._load_custom_keywords(self.keywords_file)

    def _load_custom_keywords(self, path: str):
        """
        Merge extra triggers from a YAML mapping:

            AWS: [lambda, dynamodb]
            Kubernetes: [helm]
        """
        if not os.path.exists(path):
            print(f"[ProviderDetector] Keywords file not found: {path}")
            return

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            print(f"[ProviderDetector] Error loading keywords from {path}: {e}")
            return

        if not isinstance(data, dict):
            print(f"[ProviderDetector] Ignoring {path}: expected a provider -> keywords mapping")
            return

        for provider, triggers in data.items():
            if provider not in self.keywords or not isinstance(triggers, list):
                continue
            existing = self.keywords[provider]
            for trigger in triggers:
                trigger = str(trigger).strip().lower()
                if trigger and trigger not in existing:
                    existing.append(trigger)
            print(f"[ProviderDetector] Loaded keywords for provider: {provider}")

    def detect(self, text: str, explicit: Optional[Sequence[str]] = None) -> ProviderDetectionResult:
        if explicit:
            providers = list(explicit)
            print(f"[ProviderDetector] User selected: {', '.join(providers)}")
            return ProviderDetectionResult(providers=providers, explicit=True)

        text_lower = (text or "").lower()
        matches: Dict[str, List[str]] = {}

        for provider in PROVIDER_PRIORITY:
            hits = [t for t in self.keywords.get(provider, []) if t in text_lower]
            if hits:
                matches[provider] = hits

        providers = [p for p in PROVIDER_PRIORITY if p in matches]
        providers.append(GENERAL_PROVIDER)

        print(f"[ProviderDetector] Auto-detected: {', '.join(providers)}")
        return ProviderDetectionResult(providers=providers, keyword_matches=matches)


def detect_providers(text: str, explicit: Optional[Sequence[str]] = None) -> List[str]:
    return ProviderDetector().detect(text, explicit).providers
