"""Configuration repository ports."""

from typing import Protocol
from uuid import UUID

from quillgate.domain.entities import ConfigurationVersion, SystemConfiguration


class ConfigurationRepository(Protocol):
    """Port for system configuration persistence."""

    async def get_by_id(self, configuration_id: UUID) -> SystemConfiguration | None: ...

    async def get_by_key(self, section: str, key: str) -> SystemConfiguration | None: ...

    async def create(self, configuration: SystemConfiguration) -> SystemConfiguration: ...

    async def update(self, configuration: SystemConfiguration) -> None: ...


class ConfigurationVersionRepository(Protocol):
    """Port for configuration version history."""

    async def get_by_id(self, version_id: UUID) -> ConfigurationVersion | None: ...

    async def get_by_number(
        self, configuration_id: UUID, version: int
    ) -> ConfigurationVersion | None: ...

    async def list_by_configuration(self, configuration_id: UUID) -> list[ConfigurationVersion]: ...

    async def list_pending(
        self, configuration_id: UUID | None = None
    ) -> list[ConfigurationVersion]: ...

    async def next_version_number(self, configuration_id: UUID) -> int: ...

    async def create(self, version: ConfigurationVersion) -> ConfigurationVersion: ...

    async def update(self, version: ConfigurationVersion) -> None: ...

    async def clear_current(self, configuration_id: UUID) -> None: ...
