"""Configuration package exposing settings and policy models."""

from .policies import (
    DeduplicationPolicy,
    IndexPolicy,
    MatchingPolicy,
    Policies,
    SimilarityPolicy,
    StorePolicy,
    load_policies,
)
from .settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "Policies",
    "load_policies",
    "MatchingPolicy",
    "DeduplicationPolicy",
    "IndexPolicy",
    "SimilarityPolicy",
    "StorePolicy",
]
