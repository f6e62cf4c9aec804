"""
Icon Index - normalized, read-only registry of every available icon.

Built once (per process, or per request when the inventory may change)
and passed by reference into detection, prompt composition and path
repair. Nothing mutates it after construction, so concurrent requests
can share one instance.
"""

from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Sequence, Union
import os

from diagen import config
from diagen.errors import InventoryReadError
from diagen.icons.entry import (
    FLAT_CATEGORY,
    GENERAL_PROVIDER,
    KNOWN_PROVIDERS,
    IconEntry,
    strip_cloud_prefixes,
)
from diagen.icons.sources import DirectoryIconSource, IconSource, TreeInventorySource


class IconIndex:
    """
    Collection of IconEntry plus derived lookups:

    by_exact_path_lower   lowercased canonical path -> canonical path
    by_normalized_name    normalized stem -> canonical path (first seen wins)
    by_stripped_name      normalized stem without vendor prefix -> canonical path
    """

    def __init__(self, entries: Iterable[IconEntry] = ()):
        kept: List[IconEntry] = []
        by_lower: Dict[str, str] = {}
        by_normalized: Dict[str, str] = {}
        by_stripped: Dict[str, str] = {}
        by_path: Dict[str, IconEntry] = {}

        for entry in entries:
            path = entry.canonical_path
            lower = path.lower()
            if lower in by_lower:
                # Same icon listed twice (case-insensitively)
                continue

            kept.append(entry)
            by_lower[lower] = path
            by_path[path] = entry

            normalized = entry.normalized_name
            if normalized:
                by_normalized.setdefault(normalized, path)
                by_stripped.setdefault(strip_cloud_prefixes(normalized), path)

        roots: List[str] = []
        for entry in kept:
            if entry.root not in roots:
                roots.append(entry.root)

        self._entries = tuple(kept)
        self.roots: Sequence[str] = tuple(roots)
        self._paths: FrozenSet[str] = frozenset(by_path)
        self._by_path = MappingProxyType(by_path)
        self.by_exact_path_lower: Mapping[str, str] = MappingProxyType(by_lower)
        self.by_normalized_name: Mapping[str, str] = MappingProxyType(by_normalized)
        self.by_stripped_name: Mapping[str, str] = MappingProxyType(by_stripped)

    @classmethod
    def empty(cls) -> "IconIndex":
        return cls(())

    # ------------------------------------------------------------
    # Basic access
    # ------------------------------------------------------------

    @property
    def entries(self) -> Sequence[IconEntry]:
        return self._entries

    @property
    def paths(self) -> FrozenSet[str]:
        return self._paths

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[IconEntry]:
        return iter(self._entries)

    def __contains__(self, path: object) -> bool:
        """Case-exact membership of a canonical path"""
        return path in self._paths

    def get(self, path: str) -> Optional[IconEntry]:
        return self._by_path.get(path)

    def providers(self) -> List[str]:
        seen: List[str] = []
        for entry in self._entries:
            if entry.provider not in seen:
                seen.append(entry.provider)
        return seen

    def entries_for(self, provider: str) -> List[IconEntry]:
        return [e for e in self._entries if e.provider == provider]

    def general_entries(self) -> List[IconEntry]:
        return self.entries_for(GENERAL_PROVIDER)

    def filter_providers(self, providers: Iterable[str]) -> "IconIndex":
        wanted = set(providers)
        return IconIndex(e for e in self._entries if e.provider in wanted)

    def counts(self) -> Dict[str, int]:
        result: Dict[str, int] = {}
        for entry in self._entries:
            result[entry.provider] = result.get(entry.provider, 0) + 1
        return result

    # ------------------------------------------------------------
    # Browsing
    # ------------------------------------------------------------

    def search(self, query: str, provider: Optional[str] = None, limit: int = 200) -> List[IconEntry]:
        """Case-insensitive match on filename, display name or category"""
        needle = (query or "").strip().lower()
        results = []
        for entry in self._entries:
            if provider and entry.provider != provider:
                continue
            if needle and not (
                needle in entry.filename.lower()
                or needle in entry.display_name.lower()
                or needle in entry.category.lower()
            ):
                continue
            results.append(entry)
            if limit and len(results) >= limit:
                break
        return results

    def as_tree(self) -> List[dict]:
        """
        provider -> category folders -> icons, in index order.

        Flat-provider icons hang directly off the provider node.
        """
        tree: List[dict] = []
        folders: Dict[str, dict] = {}

        for entry in self._entries:
            provider_node = folders.get(entry.provider)
            if provider_node is None:
                provider_node = {
                    "name": entry.provider,
                    "type": "directory",
                    "path": entry.provider,
                    "children": [],
                }
                folders[entry.provider] = provider_node
                tree.append(provider_node)

            parent = provider_node
            if entry.category and entry.category != FLAT_CATEGORY:
                rel = entry.provider
                for part in entry.category.split("/"):
                    rel = f"{rel}/{part}"
                    node = folders.get(rel)
                    if node is None:
                        node = {"name": part, "type": "directory", "path": rel, "children": []}
                        folders[rel] = node
                        parent["children"].append(node)
                    parent = node

            parent["children"].append({
                "name": entry.filename,
                "type": "icon",
                "path": entry.canonical_path,
            })

        return tree


# ============================================================
# BUILDERS
# ============================================================

def build_index(
    sources: Union[IconSource, Sequence[IconSource]],
    known_providers: Iterable[str] = KNOWN_PROVIDERS,
    fallback_source: Optional[IconSource] = None,
    fallback_providers: Iterable[str] = (GENERAL_PROVIDER,),
) -> IconIndex:
    """
    Build an IconIndex from one or more sources.

    Unreadable sources are skipped with a warning (the index may end up
    empty). After the primary sources, `fallback_source` tops up each of
    `fallback_providers` with any icon whose filename is not indexed yet,
    because the textual inventory can drift from what is on disk.
    """
    if isinstance(sources, IconSource):
        sources = [sources]

    known = list(known_providers)
    entries: List[IconEntry] = []

    for source in sources:
        try:
            listed = source.list_providers()
        except InventoryReadError as e:
            print(f"[IconIndex] ⚠️ {e} - continuing without it")
            continue

        for provider in listed:
            if provider not in known:
                continue
            try:
                found = source.list_entries(provider)
            except InventoryReadError as e:
                print(f"[IconIndex] ⚠️ {e}")
                continue
            print(f"[IconIndex] Found {len(found)} icons for {provider} from {source.name}")
            entries.extend(found)

    if fallback_source is not None:
        for provider in fallback_providers:
            existing = {e.filename for e in entries if e.provider == provider}
            try:
                on_disk = fallback_source.list_entries(provider)
            except InventoryReadError as e:
                print(f"[Filesystem Fallback] Could not scan {provider}: {e}")
                continue

            added = 0
            for entry in on_disk:
                if entry.filename in existing:
                    continue
                entries.append(entry)
                existing.add(entry.filename)
                added += 1

            if added:
                print(f"[Filesystem Fallback] Added {added} additional {provider} icons from disk")

    index = IconIndex(entries)
    print(f"[IconIndex] Index ready: {len(index)} icons across {len(index.providers())} providers")
    return index


def load_icon_index(
    project_root: Optional[str] = None,
    inventory_path: Optional[str] = None,
    icons_root: Optional[str] = None,
    extension: Optional[str] = None,
) -> IconIndex:
    """Build the index from the configured tree.txt plus the on-disk General folder"""
    project_root = project_root or config.PROJECT_ROOT
    inventory_path = inventory_path or config.ICON_INVENTORY_PATH
    icons_root = icons_root or config.ICONS_ROOT
    extension = extension or config.ICON_EXTENSION

    if not os.path.isabs(inventory_path):
        inventory_path = os.path.join(project_root, inventory_path)

    tree_source = TreeInventorySource.from_file(
        inventory_path,
        root=icons_root,
        extension=extension,
    )
    disk_source = DirectoryIconSource(
        os.path.join(project_root, icons_root),
        root=icons_root,
        extension=extension,
    )
    return build_index(tree_source, fallback_source=disk_source)
