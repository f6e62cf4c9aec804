"""
Icon inventory: entries, source adapters and the read-only index.
"""

from diagen.icons.entry import (
    FLAT_CATEGORY,
    GENERAL_PROVIDER,
    KNOWN_PROVIDERS,
    PROVIDER_PRIORITY,
    IconEntry,
    normalize_name,
    strip_cloud_prefixes,
)
from diagen.icons.sources import (
    DirectoryIconSource,
    IconSource,
    TreeInventorySource,
    parse_tree_inventory,
)
from diagen.icons.index import IconIndex, build_index, load_icon_index

__all__ = [
    "FLAT_CATEGORY",
    "GENERAL_PROVIDER",
    "KNOWN_PROVIDERS",
    "PROVIDER_PRIORITY",
    "IconEntry",
    "normalize_name",
    "strip_cloud_prefixes",
    "DirectoryIconSource",
    "IconSource",
    "TreeInventorySource",
    "parse_tree_inventory",
    "IconIndex",
    "build_index",
    "load_icon_index",
]
