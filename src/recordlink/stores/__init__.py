"""Record stores feeding the matching engines."""

from .base import RecordStore
from .query import QueryStore
from .sequence import SequenceStore

__all__ = ["RecordStore", "QueryStore", "SequenceStore"]
