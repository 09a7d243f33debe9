"""Single-store deduplication."""

from .deduplicator import Deduplicator, ProgressCallback

__all__ = ["Deduplicator", "ProgressCallback"]
