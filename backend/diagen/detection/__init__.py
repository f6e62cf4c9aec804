from diagen.detection.providers import ProviderDetector, ProviderDetectionResult, detect_providers

__all__ = ["ProviderDetector", "ProviderDetectionResult", "detect_providers"]
