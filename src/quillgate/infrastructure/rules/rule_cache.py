"""Read-mostly cache of active data permission rules."""

import time
from collections.abc import Awaitable, Callable

from quillgate.domain.entities import DataPermissionRule
from quillgate.domain.value_objects import PermissionAction

Bucket = tuple[str, PermissionAction]


class RuleCache:
    """Active rules per (resource_type, operation) bucket.

    Readers get an immutable tuple from the current mapping. Writers never
    mutate the mapping in place; they build a new one and swap it, so
    concurrent readers always see a consistent snapshot. A load that races
    with an invalidation is not stored.
    """

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._monotonic = monotonic
        self._buckets: dict[Bucket, tuple[float, tuple[DataPermissionRule, ...]]] = {}
        self._generation = 0

    async def get_or_load(
        self,
        resource_type: str,
        operation: PermissionAction,
        loader: Callable[[], Awaitable[list[DataPermissionRule]]],
    ) -> tuple[DataPermissionRule, ...]:
        key = (resource_type, operation)
        entry = self._buckets.get(key)
        now = self._monotonic()
        if entry is not None and (self._ttl <= 0 or now - entry[0] < self._ttl):
            return entry[1]

        generation = self._generation
        rules = tuple(await loader())
        if generation == self._generation:
            self._buckets = {**self._buckets, key: (now, rules)}
        return rules

    def invalidate(self, resource_type: str, operation: PermissionAction | None = None) -> None:
        """Drop one bucket, or every bucket of a resource type."""
        self._generation += 1
        self._buckets = {
            k: v
            for k, v in self._buckets.items()
            if not (k[0] == resource_type and (operation is None or k[1] == operation))
        }

    def clear(self) -> None:
        self._generation += 1
        self._buckets = {}

    def __contains__(self, key: Bucket) -> bool:
        return key in self._buckets
