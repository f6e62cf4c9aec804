from dataclasses import dataclass
from typing import List, Tuple
import re


DEFAULT_ICONS_ROOT = "assets/icons"

# Category used for providers that keep their icons in a single flat folder
FLAT_CATEGORY = "General-Icons"

# Priority order used for detection output and prompt grouping
PROVIDER_PRIORITY: Tuple[str, ...] = ("AWS", "Azure", "GCP", "Kubernetes", "Monitoring")
GENERAL_PROVIDER = "General"
KNOWN_PROVIDERS: Tuple[str, ...] = PROVIDER_PRIORITY + (GENERAL_PROVIDER,)

# Vendor tokens the generator likes to glue in front of service names
CLOUD_PREFIX_TOKENS: Tuple[str, ...] = ("amazon", "aws", "azure", "microsoft", "google", "gcp")

_NON_ALNUM = re.compile(r"[^a-z0-9]")


@dataclass(frozen=True)
class IconEntry:
    """One addressable icon asset"""
    provider: str
    category: str
    filename: str
    root: str = DEFAULT_ICONS_ROOT

    @property
    def canonical_path(self) -> str:
        return build_canonical_path(self.root, self.provider, self.category, self.filename)

    @property
    def stem(self) -> str:
        return strip_extension(self.filename)

    @property
    def display_name(self) -> str:
        """Filename with separators replaced by spaces, used as a matching aid"""
        return self.stem.replace("-", " ").replace("_", " ")

    @property
    def normalized_name(self) -> str:
        return normalize_name(self.filename)

    def to_dict(self) -> dict:
        return {
            "provider": self.provider,
            "category": self.category,
            "filename": self.filename,
            "path": self.canonical_path,
            "display_name": self.display_name,
        }


def build_canonical_path(root: str, provider: str, category: str, filename: str) -> str:
    """
    <root>/<provider>/[<category>/]<filename>

    The flat-provider sentinel category is not a folder on disk and is
    left out of the path.
    """
    parts = [root.rstrip("/"), provider]
    if category and category != FLAT_CATEGORY:
        parts.append(category.strip("/"))
    parts.append(filename)
    return "/".join(p for p in parts if p)


def strip_extension(filename: str) -> str:
    base = filename.rsplit("/", 1)[-1]
    if "." in base:
        return base.rsplit(".", 1)[0]
    return base


def normalize_name(filename: str) -> str:
    """Filename stem, lowercased, with every non-alphanumeric removed"""
    return _NON_ALNUM.sub("", strip_extension(filename).lower())


def strip_cloud_prefixes(normalized: str) -> str:
    """
    Drop leading vendor tokens ("awslambda" -> "lambda").

    Never strips down to an empty string: "aws" stays "aws".
    """
    current = normalized
    changed = True
    while changed:
        changed = False
        for token in CLOUD_PREFIX_TOKENS:
            if current.startswith(token) and len(current) > len(token):
                current = current[len(token):]
                changed = True
                break
    return current


def path_segments(path: str) -> List[str]:
    return [segment for segment in path.replace("\\", "/").split("/") if segment]
