"""Attribute index backends and the backend factory."""

from __future__ import annotations

from typing import Optional

from ..config.policies import IndexPolicy
from .base import AttributeIndex
from .memory import HashIndex
from .redis_index import RedisIndex


def create_index(policy: Optional[IndexPolicy] = None) -> AttributeIndex:
    """Instantiate the index backend selected by ``policy``."""

    policy = policy or IndexPolicy()
    if policy.backend == "redis":
        return RedisIndex.from_url(policy.redis_url, namespace=policy.namespace)
    return HashIndex()


__all__ = ["AttributeIndex", "HashIndex", "RedisIndex", "create_index"]
