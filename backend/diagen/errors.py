"""
Error taxonomy.

Structural failures (unreadable inventory, unparseable generation output,
unreachable generation service) are raised. Per-node icon problems are
recorded in the repair report instead.
"""

from dataclasses import dataclass


class DiagenError(Exception):
    """Base class for all diagen errors"""


class InventoryReadError(DiagenError):
    """Icon inventory source could not be read. Recoverable: the index builds without it."""

    def __init__(self, source: str, reason: str = ""):
        self.source = source
        self.reason = reason
        message = f"Cannot read icon inventory '{source}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class ParseError(DiagenError):
    """No JSON object could be recovered from the generation output."""

    def __init__(self, message: str, raw_text: str = ""):
        self.raw_text = raw_text
        super().__init__(message)

    def excerpt(self, limit: int = 500) -> str:
        if len(self.raw_text) <= limit:
            return self.raw_text
        return self.raw_text[:limit] + "..."


class GenerationError(DiagenError):
    """The external generation service failed, timed out or replied with garbage."""


@dataclass
class UnresolvedIconWarning:
    """A node whose icon could not be matched. Reported, never raised."""
    node_id: str
    original_path: str
    message: str = "No matching icon found"

    def to_dict(self) -> dict:
        return {
            "node_id": self.node_id,
            "original_path": self.original_path,
            "message": self.message,
        }
