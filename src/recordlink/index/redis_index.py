"""Attribute index stored in Redis lists so it can live outside the process."""

from __future__ import annotations

import json
from datetime import date
from typing import Any, Hashable, List, Optional

import redis

from ..exceptions import UnsupportedTypeError
from ..utils import chunked, get_logger

_LOGGER = get_logger(module=__name__)
_DELETE_BATCH = 500
_TUPLE_TAG = "__tuple__"


def _render_value(value: Any) -> str:
    if isinstance(value, date):
        rendered = value.isoformat()
    else:
        rendered = str(value)
    return f"{type(value).__name__}={rendered}"


def _id_payload(record_id: Hashable) -> Any:
    if isinstance(record_id, tuple):
        return {_TUPLE_TAG: [_id_payload(part) for part in record_id]}
    if isinstance(record_id, bool) or not isinstance(record_id, (int, str)):
        raise UnsupportedTypeError(
            f"Redis index cannot store record id of type {type(record_id).__name__}"
        )
    return record_id


def _encode_id(record_id: Hashable) -> str:
    return json.dumps(_id_payload(record_id))


def _restore_tuples(payload: Any) -> Hashable:
    if isinstance(payload, dict):
        return tuple(payload[_TUPLE_TAG])
    return payload


def _decode_id(raw: Any) -> Hashable:
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    return json.loads(raw, object_hook=_restore_tuples)


class RedisIndex:
    """Attribute index keeping one Redis list per ``(attribute, value)``.

    Keys take the form ``<namespace>:<attribute>:<type>=<value>``; tagging the
    value with its type keeps ``1`` and ``"1"`` apart. Ids are appended with
    ``RPUSH`` so reads return them in insertion order. They are stored as
    JSON, so ``7``, ``"007"`` and ``(3, 4)`` all come back as written. The
    namespace is cleared on construction.
    """

    def __init__(self, client: "redis.Redis", *, namespace: str = "recordlink") -> None:
        self._client = client
        self.namespace = namespace
        self.reset()

    @classmethod
    def from_url(cls, url: str, *, namespace: str = "recordlink") -> "RedisIndex":
        client = redis.from_url(url, decode_responses=True)
        _LOGGER.debug("Connecting Redis index", url=url, namespace=namespace)
        return cls(client, namespace=namespace)

    def _key(self, attribute: str, value: Any) -> str:
        return f"{self.namespace}:{attribute}:{_render_value(value)}"

    def put(self, attribute: str, value: Any, record_id: Hashable) -> None:
        if value is None:
            return
        self._client.rpush(self._key(attribute, value), _encode_id(record_id))

    def get(self, attribute: str, value: Any) -> Optional[List[Hashable]]:
        if value is None:
            return None
        raw_ids = self._client.lrange(self._key(attribute, value), 0, -1)
        if not raw_ids:
            return None
        return [_decode_id(raw) for raw in raw_ids]

    def reset(self) -> None:
        removed = 0
        for batch in chunked(self._client.scan_iter(match=f"{self.namespace}:*"), _DELETE_BATCH):
            removed += self._client.delete(*batch)
        if removed:
            _LOGGER.debug("Cleared Redis index namespace", namespace=self.namespace, keys=removed)


__all__ = ["RedisIndex"]
