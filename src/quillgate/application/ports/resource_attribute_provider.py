"""Resource attribute provider port - reads records owned by the blog domain."""

from typing import Any, Protocol


class ResourceAttributeProvider(Protocol):
    """Port for loading the attributes of a single record."""

    async def get_attributes(self, resource_type: str, resource_id: str) -> dict[str, Any] | None: ...
