"""Domain value objects for record linkage."""

from .accessors import AttributeReader, Extractor
from .core import AttributePair, Candidate, Match

__all__ = ["AttributeReader", "Extractor", "AttributePair", "Candidate", "Match"]
