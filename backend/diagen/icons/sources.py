"""
Icon sources - adapters that list providers and icon entries.

Two adapters satisfy the same IconSource capability:

    TreeInventorySource   parses a `tree`-style text listing (tree.txt)
    DirectoryIconSource   walks the icons folder on disk

Either one can feed build_index().
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Tuple
import os
import re

from diagen.errors import InventoryReadError
from diagen.icons.entry import (
    DEFAULT_ICONS_ROOT,
    FLAT_CATEGORY,
    KNOWN_PROVIDERS,
    IconEntry,
)


class IconSource(ABC):
    name: str = "source"

    @abstractmethod
    def list_providers(self) -> List[str]:
        """Providers this source knows about, in traversal order"""

    @abstractmethod
    def list_entries(self, provider: str) -> List[IconEntry]:
        """Icons of one provider, in traversal order"""


# ============================================================
# TEXT TREE INVENTORY
# ============================================================

# "├── ", "└── " and their --charset=ascii forms "|-- ", "`-- "
_CONNECTOR = re.compile(r"(?:├──|└──|\|--|`--)\s?")
_TREE_PADDING = " \t│|\xa0"


def split_tree_line(line: str, indent: int = 4) -> Optional[Tuple[int, str]]:
    """
    Return (depth, name) for one line of a tree listing, or None for blanks.

    Depth is derived from the column of the connector glyph, or from the
    leading padding when the listing is plain-indented.
    """
    raw = line.rstrip("\r\n")
    if not raw.strip():
        return None

    match = _CONNECTOR.search(raw)
    if match:
        name = raw[match.end():].strip()
        depth = match.start() // indent
    else:
        stripped = raw.lstrip(_TREE_PADDING)
        name = stripped.strip()
        depth = (len(raw) - len(stripped)) // indent

    # "name -> target" for symlinks
    if " -> " in name:
        name = name.split(" -> ", 1)[0].strip()

    if not name:
        return None
    return depth, name


def parse_tree_inventory(
    text: str,
    known_providers: Iterable[str] = KNOWN_PROVIDERS,
    root: str = DEFAULT_ICONS_ROOT,
    extension: str = ".svg",
    indent: int = 4,
) -> Dict[str, List[IconEntry]]:
    """
    Single linear pass over the listing.

    A line whose name is a known provider opens that provider's section.
    The section closes on any line at the same depth or shallower (a
    sibling provider header re-opens a new section). Inside a section,
    non-leaf lines push categories and leaf lines become IconEntry values
    under the categories currently open. Leaves directly under the provider
    get FLAT_CATEGORY.
    """
    known = set(known_providers)
    extension = extension.lower()
    sections: Dict[str, List[IconEntry]] = {}

    provider: Optional[str] = None
    provider_depth = -1
    categories: List[Tuple[int, str]] = []

    for line in text.splitlines():
        parsed = split_tree_line(line, indent)
        if parsed is None:
            continue
        depth, name = parsed

        if provider is not None and depth <= provider_depth:
            provider = None
            categories = []

        if provider is None:
            if name in known:
                provider = name
                provider_depth = depth
                sections.setdefault(name, [])
            continue

        while categories and categories[-1][0] >= depth:
            categories.pop()

        if name.lower().endswith(extension):
            category = "/".join(c for _, c in categories) or FLAT_CATEGORY
            sections[provider].append(
                IconEntry(provider=provider, category=category, filename=name, root=root)
            )
        else:
            categories.append((depth, name))

    return sections


class TreeInventorySource(IconSource):
    """
    Textual inventory adapter.

    The text is read lazily on first use so that an unreadable file surfaces
    as InventoryReadError inside build_index, where it is recoverable.
    """

    name = "tree"

    def __init__(
        self,
        text: Optional[str] = None,
        path: Optional[str] = None,
        known_providers: Iterable[str] = KNOWN_PROVIDERS,
        root: str = DEFAULT_ICONS_ROOT,
        extension: str = ".svg",
        indent: int = 4,
    ):
        if text is None and path is None:
            raise ValueError("TreeInventorySource needs either text or path")
        self.text = text
        self.path = path
        self.known_providers = tuple(known_providers)
        self.root = root
        self.extension = extension
        self.indent = indent
        self._sections: Optional[Dict[str, List[IconEntry]]] = None

    @classmethod
    def from_file(cls, path: str, **kwargs) -> "TreeInventorySource":
        return cls(path=path, **kwargs)

    def _read_text(self) -> str:
        if self.text is not None:
            return self.text
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise InventoryReadError(self.path, str(e)) from e

    def _load(self) -> Dict[str, List[IconEntry]]:
        if self._sections is None:
            self._sections = parse_tree_inventory(
                self._read_text(),
                known_providers=self.known_providers,
                root=self.root,
                extension=self.extension,
                indent=self.indent,
            )
        return self._sections

    def list_providers(self) -> List[str]:
        return list(self._load().keys())

    def list_entries(self, provider: str) -> List[IconEntry]:
        return list(self._load().get(provider, []))


# ============================================================
# FILESYSTEM
# ============================================================

class DirectoryIconSource(IconSource):
    """Walks <icons_dir>/<Provider>/[<Category>/...]<file> on disk"""

    name = "directory"

    def __init__(
        self,
        icons_dir: str,
        known_providers: Optional[Iterable[str]] = KNOWN_PROVIDERS,
        root: str = DEFAULT_ICONS_ROOT,
        extension: str = ".svg",
    ):
        self.icons_dir = icons_dir
        self.known_providers = tuple(known_providers) if known_providers else None
        self.root = root
        self.extension = extension.lower()

    def list_providers(self) -> List[str]:
        try:
            names = sorted(
                d for d in os.listdir(self.icons_dir)
                if os.path.isdir(os.path.join(self.icons_dir, d))
            )
        except OSError as e:
            raise InventoryReadError(self.icons_dir, str(e)) from e

        if self.known_providers is None:
            return names
        return [p for p in self.known_providers if p in names]

    def list_entries(self, provider: str) -> List[IconEntry]:
        provider_dir = os.path.join(self.icons_dir, provider)
        if not os.path.isdir(provider_dir):
            raise InventoryReadError(provider_dir, "not a directory")

        entries = []
        for dirpath, dirnames, filenames in os.walk(provider_dir):
            dirnames.sort()
            rel = os.path.relpath(dirpath, provider_dir)
            category = "" if rel == "." else rel.replace(os.sep, "/")
            for filename in sorted(filenames):
                if not filename.lower().endswith(self.extension):
                    continue
                entries.append(
                    IconEntry(
                        provider=provider,
                        category=category or FLAT_CATEGORY,
                        filename=filename,
                        root=self.root,
                    )
                )
        return entries
