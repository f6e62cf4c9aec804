import os
from dotenv import load_dotenv

# Load .env from project root
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Generation service
OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "qwen2.5-coder:7b")

LLM_PROVIDER = os.getenv("LLM_PROVIDER", "ollama")  # ollama | openai
LLM_BASE_URL = os.getenv("LLM_BASE_URL", "http://localhost:8001/v1")
# Chat-completions model; shares the Ollama default when unset
LLM_MODEL = os.getenv("LLM_MODEL", OLLAMA_MODEL)
LLM_TIMEOUT = int(os.getenv("LLM_TIMEOUT", "300"))
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.7"))
LLM_NUM_PREDICT = int(os.getenv("LLM_NUM_PREDICT", "4096"))

# Icon inventory
PROJECT_ROOT = os.getenv("PROJECT_ROOT", os.getcwd())
ICONS_ROOT = os.getenv("ICONS_ROOT", "assets/icons")
ICON_INVENTORY_PATH = os.getenv("ICON_INVENTORY_PATH", "tree.txt")
ICON_EXTENSION = os.getenv("ICON_EXTENSION", ".svg")
PROVIDER_KEYWORDS_FILE = os.getenv("PROVIDER_KEYWORDS_FILE")

# Path repair
FUZZY_MATCH_THRESHOLD = float(os.getenv("FUZZY_MATCH_THRESHOLD", "30"))
ENABLE_GENERIC_FALLBACK = _env_bool("ENABLE_GENERIC_FALLBACK", True)

# Layout hint / missing position placement
NODE_SPACING = int(os.getenv("NODE_SPACING", "300"))

# Persistence
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./diagen.db")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]
